"""
Transient user notifications for the page translation pipeline.

When a translation batch fails the page keeps showing its original text and
the reader gets a short, non-blocking message. The pipeline only hands the
message to a notifier; how it is shown is up to the application.

Author: Leonardo Pacciani-Mori
License: MIT
"""

from abc import ABC, abstractmethod
from typing import List

from ..config.logging_config import get_logger

# Module-level logger for consistent logging.
logger = get_logger(__name__)


class Notifier(ABC):
    """Abstract base class for receivers of transient messages meant for the reader."""

    @abstractmethod
    def notify(self, message: str) -> None:
        """Show a message to the reader."""
        pass


class LogNotifier(Notifier):
    """Writes notifications to the log."""

    def notify(self, message: str) -> None:
        logger.warning(f"Notification: {message}")


class QueueNotifier(Notifier):
    """
    Keeps notifications until the application collects them.

    A web layer can call ``drain()`` when rendering a response and show the
    returned messages as toasts.
    """

    def __init__(self):
        self.messages: List[str] = []

    def notify(self, message: str) -> None:
        logger.debug(f"Queued notification: {message}")
        self.messages.append(message)

    def drain(self) -> List[str]:
        """Return all pending messages and forget them."""
        messages, self.messages = self.messages, []
        return messages
