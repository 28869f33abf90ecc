"""
Transient user-facing notices.

Search failures are reported to the user as short, non-blocking messages
rather than exceptions. The notice board keeps the most recent ones for the
UI layer to display and logs each of them.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional


logger = logging.getLogger(__name__)


@dataclass
class Notice:
    """A single user-facing message.

    Attributes:
        level: "info", "warning" or "error"
        message: One-line text shown to the user
        created_at: When the notice was posted
    """
    level: str
    message: str
    created_at: datetime = field(default_factory=datetime.now)


class NoticeBoard:
    """Collects notices for the UI and forwards them to an optional listener."""

    def __init__(
        self,
        max_notices: int = 20,
        listener: Optional[Callable[[Notice], None]] = None
    ):
        self.max_notices = max_notices
        self.listener = listener
        self.notices: List[Notice] = []

    def post(self, message: str, level: str = "info") -> Notice:
        """Post a notice and return it."""
        notice = Notice(level=level, message=message)
        self.notices.append(notice)
        # Oldest notices fall off first
        if len(self.notices) > self.max_notices:
            self.notices = self.notices[-self.max_notices:]

        if level == "error":
            logger.warning(f"User notice: {message}")
        else:
            logger.info(f"User notice: {message}")

        if self.listener:
            self.listener(notice)
        return notice

    def error(self, message: str) -> Notice:
        return self.post(message, level="error")

    def latest(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None

    def clear(self) -> None:
        self.notices = []
