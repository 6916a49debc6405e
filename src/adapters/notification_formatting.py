"""Shared notification formatting helpers.

Keeping formatting here prevents drift between the console notifier and the
CLI summary so the same labels show up everywhere.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin

from core.dispatcher import DispatchOutcome
from core.models import NativeNotification

DEFAULT_BASE_URL = "https://www.messenger.com"


def build_conversation_url(href: Optional[str], base_url: str = DEFAULT_BASE_URL) -> Optional[str]:
    """Return the click-to-navigate URL for a conversation href."""

    if not href:
        return None
    href = href.strip()
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(base_url.rstrip("/") + "/", href.lstrip("/"))


def format_notification_text(notification: NativeNotification, base_url: str = DEFAULT_BASE_URL) -> str:
    """Plain-text rendering used by the console notifier and logs."""

    lines = [notification.title or "(no title)"]
    if notification.body:
        lines.append(notification.body)
    url = build_conversation_url(notification.href, base_url)
    if url:
        lines.extend(["", f"Open: {url}"])
    return "\n".join(lines)


def format_outcome_row(outcome: DispatchOutcome) -> list[str]:
    """Columns for the CLI summary table: decision, reason, confidence, target."""

    match = outcome.match
    reason = match.reason if match else "-"
    confidence = f"{match.confidence:.2f}" if match else "-"
    target = "-"
    if match and match.matched_href:
        target = match.matched_href
    elif outcome.notification and outcome.notification.kind == "call":
        target = "(call)"
    return [outcome.decision, reason, confidence, target]
