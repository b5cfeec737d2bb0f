"""
User-visible feedback.

MessageBoard collects success and error messages raised while handling
a user action. The Streamlit app drains it after each action and shows
the messages as st.success / st.error.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)


class MessageLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Message(BaseModel):
    level: MessageLevel
    text: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MessageBoard:
    """Notifier that keeps messages until they are shown."""

    def __init__(self):
        self._messages: list[Message] = []

    def show_error(self, message: str) -> None:
        logger.info("user_error_shown", message=message)
        self._messages.append(Message(level=MessageLevel.ERROR, text=message))

    def show_success(self, message: str) -> None:
        self._messages.append(Message(level=MessageLevel.SUCCESS, text=message))

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def last_error(self) -> Optional[str]:
        for message in reversed(self._messages):
            if message.level is MessageLevel.ERROR:
                return message.text
        return None

    def drain(self) -> list[Message]:
        """Return all pending messages and forget them."""
        messages, self._messages = self._messages, []
        return messages

    def clear(self) -> None:
        self._messages.clear()
