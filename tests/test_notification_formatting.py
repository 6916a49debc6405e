from __future__ import annotations

import asyncio
import io

from rich.console import Console

from adapters.console_notifier import ConsoleNotifier
from adapters.notification_formatting import (
    build_conversation_url,
    format_notification_text,
    format_outcome_row,
)
from core.dispatcher import DispatchOutcome
from core.models import NativeNotification, NotificationMatchResult


def test_build_conversation_url() -> None:
    assert build_conversation_url("/t/123") == "https://www.messenger.com/t/123"
    assert build_conversation_url("/t/123", "https://example.test/") == "https://example.test/t/123"
    assert build_conversation_url("https://other.test/t/9") == "https://other.test/t/9"
    assert build_conversation_url(None) is None
    assert build_conversation_url("") is None


def test_format_notification_text_includes_link() -> None:
    notification = NativeNotification(title="Alice", body="Hey there", href="/t/1")
    text = format_notification_text(notification)
    assert text.splitlines()[0] == "Alice"
    assert "Hey there" in text
    assert text.endswith("Open: https://www.messenger.com/t/1")


def test_format_outcome_row() -> None:
    match = NotificationMatchResult(
        confidence=0.9,
        ambiguous=False,
        muted=False,
        reason="matched",
        matched_href="/t/1",
    )
    assert format_outcome_row(DispatchOutcome(decision="duplicate", match=match)) == [
        "duplicate",
        "matched",
        "0.90",
        "/t/1",
    ]
    assert format_outcome_row(DispatchOutcome(decision="settling")) == ["settling", "-", "-", "-"]


def test_console_notifier_renders_panel() -> None:
    buffer = io.StringIO()
    console = Console(file=buffer, width=100, color_system=None)
    notifier = ConsoleNotifier(console)
    asyncio.run(notifier.send(NativeNotification(title="Alice", body="Hey there", href="/t/1")))
    output = buffer.getvalue()
    assert "New message" in output
    assert "Alice" in output
    assert "https://www.messenger.com/t/1" in output
    assert notifier.sent_count == 1
