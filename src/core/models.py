"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to whatever produced the notification or scraped the sidebar.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

REASON_MATCHED = "matched"
REASON_NO_CANDIDATES = "no-candidates"
REASON_LOW_CONFIDENCE = "low-confidence"
REASON_AMBIGUOUS = "ambiguous-candidates"
REASON_MUTED_CONFLICT = "muted-conflict"

CALL_REASON_PATTERN = "incoming-call-pattern"
CALL_REASON_NOT_CALL = "not-call"


def coerce_text(value: Any) -> str:
    """Return a plain string for loosely typed text fields."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


@dataclass(frozen=True)
class NotificationPayload:
    """Title/body pair taken from an intercepted notification call."""

    title: str
    body: str

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "NotificationPayload":
        raw = raw or {}
        return cls(title=coerce_text(raw.get("title")), body=coerce_text(raw.get("body")))


@dataclass(frozen=True)
class NotificationCandidate:
    """Snapshot of one sidebar conversation row at scrape time."""

    href: str
    title: str
    body: str
    muted: bool = False
    unread: bool = True

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "NotificationCandidate":
        raw = raw or {}
        return cls(
            href=coerce_text(raw.get("href")),
            title=coerce_text(raw.get("title")),
            body=coerce_text(raw.get("body")),
            muted=coerce_flag(raw.get("muted", False)),
            unread=coerce_flag(raw.get("unread", True)),
        )


@dataclass(frozen=True)
class NotificationMatchResult:
    """Outcome of resolving a payload against candidate rows.

    ``matched_href`` is only set when ``reason`` is ``"matched"`` and the
    result is not ambiguous.
    """

    confidence: float
    ambiguous: bool
    muted: bool
    reason: str
    matched_href: Optional[str] = None

    @property
    def is_match(self) -> bool:
        return self.reason == REASON_MATCHED and not self.ambiguous


@dataclass(frozen=True)
class CallClassification:
    """Whether a payload looks like an incoming call alert."""

    is_incoming_call: bool
    reason: str
    matched_pattern: Optional[str] = None


@dataclass(frozen=True)
class NativeNotification:
    """Notification handed to a notifier adapter for delivery."""

    title: str
    body: str
    href: Optional[str]
    kind: str = "message"
