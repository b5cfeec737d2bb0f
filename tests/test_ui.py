"""
Tests for display formatting and user feedback.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from worthit.swipe.contracts import Notifier
from worthit.ui import MessageBoard, MessageLevel, format_currency, format_date, worth_label


class TestFormatting:
    """Tests for row formatting helpers."""

    def test_format_date(self):
        """Test dates are shown as DD/MM/YY."""
        assert format_date(datetime(2024, 3, 7, 9, 15, tzinfo=timezone.utc)) == "07/03/24"

    def test_format_date_custom(self):
        """Test a custom strftime format."""
        assert format_date(datetime(2024, 3, 7), "%Y-%m-%d") == "2024-03-07"

    @pytest.mark.parametrize("amount,expected", [
        (Decimal("12.5"), "$12.50"),
        (3, "$3.00"),
        (0.5, "$0.50"),
        (None, ""),
    ])
    def test_format_currency(self, amount, expected):
        """Test costs are shown with two decimals."""
        assert format_currency(amount) == expected

    def test_format_currency_symbol(self):
        """Test the currency symbol is configurable."""
        assert format_currency(Decimal("5"), "€") == "€5.00"

    def test_worth_label(self):
        """Test thumbs up / down labels."""
        assert worth_label(True) == "👍"
        assert worth_label(False) == "👎"


class TestMessageBoard:
    """Tests for the notifier used by the app."""

    def test_is_a_notifier(self):
        """Test MessageBoard satisfies the Notifier contract."""
        assert isinstance(MessageBoard(), Notifier)

    def test_collects_messages_in_order(self):
        """Test messages keep their level and order."""
        board = MessageBoard()
        board.show_success("Saved")
        board.show_error("Failed to delete entry")

        assert [m.level for m in board.messages] == [MessageLevel.SUCCESS, MessageLevel.ERROR]
        assert board.last_error == "Failed to delete entry"

    def test_drain_empties_board(self):
        """Test drained messages are not shown twice."""
        board = MessageBoard()
        board.show_error("oops")
        assert len(board.drain()) == 1
        assert board.messages == []
        assert board.last_error is None

    def test_clear(self):
        """Test clear forgets everything."""
        board = MessageBoard()
        board.show_success("ok")
        board.clear()
        assert board.messages == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
