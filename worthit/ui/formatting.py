"""Display formatting for entry rows."""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

WORTH_IT = "👍"
NOT_WORTH_IT = "👎"


def format_date(timestamp: datetime, fmt: str = "%d/%m/%y") -> str:
    """Format a timestamp as DD/MM/YY."""
    return timestamp.strftime(fmt)


def format_currency(
    amount: Optional[Union[Decimal, float, int]],
    symbol: str = "$",
) -> str:
    if amount is None:
        return ""
    return f"{symbol}{float(amount):.2f}"


def worth_label(worth_it: bool) -> str:
    return WORTH_IT if worth_it else NOT_WORTH_IT
