from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Callable
from ..utils.logger import get_logger

logger = get_logger(__name__)

@dataclass
class Notice:
    kind: str
    message: str
    created_at: datetime = field(default_factory=datetime.now)

class ErrorReporter:
    NETWORK = "network"
    AUTH = "auth"
    DATABASE = "database"
    CONTENT = "content"
    UNKNOWN = "unknown"

    MESSAGES = {
        NETWORK: "Could not reach the server. Check your connection.",
        AUTH: "Authentication failed. Please sign in again.",
        DATABASE: "Could not save your data. Your changes may not have been stored.",
        CONTENT: "Could not load the content. Try refreshing the page.",
        UNKNOWN: "An unexpected error occurred. Please try again.",
    }

    def __init__(self, listener: Optional[Callable[[Notice], None]] = None):
        self._listener = listener
        self.last_notice: Optional[Notice] = None

    def report(self, kind: str, message: Optional[str] = None):
        """Record a user-facing notice. Never raises."""
        try:
            if kind not in self.MESSAGES:
                kind = self.UNKNOWN
            notice = Notice(kind=kind, message=message or self.MESSAGES[kind])
            self.last_notice = notice
            logger.warning(f"[{kind}] {notice.message}")
            if self._listener:
                self._listener(notice)
        except Exception as e:
            logger.error(f"Error reporter failed: {e}")

    def clear(self):
        self.last_notice = None
