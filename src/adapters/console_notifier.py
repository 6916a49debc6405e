"""Console notification adapter.

Renders native-notification stand-ins with rich so replays show exactly what
would have been delivered.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from adapters.notification_formatting import DEFAULT_BASE_URL, format_notification_text
from core.models import NativeNotification


class ConsoleNotifier:
    """Notifier adapter that prints each notification as a rich panel."""

    def __init__(self, console: Optional[Console] = None, base_url: str = DEFAULT_BASE_URL) -> None:
        self._console = console or Console()
        self._base_url = base_url
        self.sent_count = 0

    async def send(self, notification: NativeNotification) -> None:
        """Render the notification to the console."""

        style = "bold red" if notification.kind == "call" else "bold cyan"
        title = "Incoming call" if notification.kind == "call" else "New message"
        body = Text(format_notification_text(notification, self._base_url))
        self._console.print(Panel(body, title=title, border_style=style, expand=False))
        self.sent_count += 1
