import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """User-facing notifications (toasts in the web client)."""

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    def error(self, message: str) -> None:
        logger.error(message)
