"""UI helpers shared by the Streamlit app."""

from worthit.ui.feedback import Message, MessageBoard, MessageLevel
from worthit.ui.formatting import format_currency, format_date, worth_label

__all__ = [
    "Message",
    "MessageBoard",
    "MessageLevel",
    "format_currency",
    "format_date",
    "worth_label",
]
