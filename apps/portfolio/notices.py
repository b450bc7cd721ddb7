"""
User-visible notices

Services report the outcome of every user action here (success or failure);
the frontend drains them and shows them as toasts.

Each operation also returns its own Notice, so a caller never has to read
the shared board to learn what happened to its request.
"""
import logging
import threading
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: str
    message: str

    @property
    def ok(self) -> bool:
        return self.level == SUCCESS


class NoticeBoard:
    """Pending notices, oldest first. Safe to share between request threads."""

    def __init__(self, limit: int = 50):
        self.limit = limit
        self._pending: List[Notice] = []
        self._lock = threading.Lock()

    def success(self, message: str) -> Notice:
        return self.post(Notice(SUCCESS, message))

    def error(self, message: str) -> Notice:
        return self.post(Notice(ERROR, message))

    def post(self, notice: Notice) -> Notice:
        logger.info(f"Notice [{notice.level}]: {notice.message}")
        with self._lock:
            self._pending.append(notice)
            # Unread notices beyond the limit are dropped, oldest first
            del self._pending[:-self.limit]
        return notice

    def drain(self) -> List[Notice]:
        with self._lock:
            pending, self._pending = self._pending, []
        return pending
