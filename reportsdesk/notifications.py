"""
User-facing notifications.

The request client reports user-visible failures (connection lost, forbidden,
invalid data, server errors) through a notifier. The default notifier does
nothing; the terminal front-end plugs in ConsoleNotifier.
"""

from enum import Enum
from typing import Optional, List, Tuple

from rich.console import Console
from rich.text import Text


class NotificationType(str, Enum):
    """Notification kinds"""
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class Notifier:
    """No-op notifier. Subclass and override `notify`."""

    def notify(self, kind: NotificationType, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        self.notify(NotificationType.SUCCESS, message)

    def error(self, message: str) -> None:
        self.notify(NotificationType.ERROR, message)

    def info(self, message: str) -> None:
        self.notify(NotificationType.INFO, message)

    def warning(self, message: str) -> None:
        self.notify(NotificationType.WARNING, message)


class RecordingNotifier(Notifier):
    """Keeps every notification in memory (tests, batch scripts)"""

    def __init__(self):
        self.messages: List[Tuple[NotificationType, str]] = []

    def notify(self, kind: NotificationType, message: str) -> None:
        self.messages.append((kind, message))

    def of_kind(self, kind: NotificationType) -> List[str]:
        return [message for k, message in self.messages if k == kind]


class ConsoleNotifier(Notifier):
    """
    Prints notifications to a rich console.

    Usage:
        notifier = ConsoleNotifier(console)
        notifier.error("خطأ في الاتصال بالخادم")
    """

    STYLES = {
        NotificationType.SUCCESS: ("✓", "green"),
        NotificationType.ERROR: ("✗", "red"),
        NotificationType.INFO: ("💬", "blue"),
        NotificationType.WARNING: ("⚠", "yellow"),
    }

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def notify(self, kind: NotificationType, message: str) -> None:
        icon, color = self.STYLES[kind]
        self.console.print(Text(f"{icon} {message}", style=color))
