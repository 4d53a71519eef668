"""User-visible notices."""

from dataclasses import dataclass
from typing import List, Optional, Protocol

from loguru import logger


@dataclass
class Notice:
    """A non-blocking, dismissible message. timeout=0 keeps it until dismissed."""
    message: str
    timeout: Optional[float] = None

    @property
    def persistent(self) -> bool:
        return self.timeout == 0


class Notifier(Protocol):
    def notify(self, message: str, timeout: Optional[float] = None) -> None:
        ...


class LogNotifier:
    """Notifier that logs every notice and keeps a history of them."""

    def __init__(self):
        self.notices: List[Notice] = []

    def notify(self, message: str, timeout: Optional[float] = None) -> None:
        notice = Notice(message=message, timeout=timeout)
        self.notices.append(notice)
        if notice.persistent:
            logger.error(message)
        else:
            logger.warning(message)
