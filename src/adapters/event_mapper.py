"""Raw event-to-core mapping adapter.

Events arrive as JSON objects from whatever intercepted the page notification
and scraped the sidebar. This keeps their loose shapes out of the core.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Iterable, Iterator, List, Mapping, Optional

from core.models import NotificationCandidate, NotificationPayload, coerce_text


class EventFormatError(ValueError):
    """Raised when an event line cannot be turned into a payload."""

    def __init__(self, line_number: int, message: str) -> None:
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number


@dataclass(frozen=True)
class NotificationEvent:
    """One payload plus the sidebar rows visible when it fired."""

    payload: NotificationPayload
    candidates: List[NotificationCandidate]
    timestamp_ms: Optional[float] = None


def unwrap_rich_text(value: Any) -> str:
    """Return text from plain strings or React-style ``{"props": {"content": [...]}}``."""

    if isinstance(value, Mapping):
        props = value.get("props")
        if isinstance(props, Mapping):
            content = props.get("content")
            if isinstance(content, list) and content:
                return unwrap_rich_text(content[0])
            return coerce_text(content) if isinstance(content, str) else ""
        return ""
    return coerce_text(value)


def _unwrap_text_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    unwrapped = dict(raw)
    for field in ("title", "body"):
        unwrapped[field] = unwrap_rich_text(raw.get(field))
    return unwrapped


def build_payload(raw: Any) -> NotificationPayload:
    """Build a core NotificationPayload, coercing missing or odd fields."""

    if not isinstance(raw, Mapping):
        return NotificationPayload.from_mapping(None)
    return NotificationPayload.from_mapping(_unwrap_text_fields(raw))


def build_candidates(raw_rows: Any) -> List[NotificationCandidate]:
    """Build candidates from scraped rows; non-object rows are ignored."""

    if not isinstance(raw_rows, list):
        return []
    candidates: List[NotificationCandidate] = []
    for row in raw_rows:
        if not isinstance(row, Mapping):
            continue
        candidates.append(NotificationCandidate.from_mapping(_unwrap_text_fields(row)))
    return candidates


def build_event(raw: Mapping[str, Any]) -> NotificationEvent:
    timestamp = raw.get("timestamp_ms")
    return NotificationEvent(
        payload=build_payload(raw.get("payload")),
        candidates=build_candidates(raw.get("candidates")),
        timestamp_ms=float(timestamp) if isinstance(timestamp, (int, float)) else None,
    )


def iter_events(lines: Iterable[str]) -> Iterator[NotificationEvent]:
    """Parse JSON lines into events, skipping blank and ``#`` comment lines."""

    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            raw = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise EventFormatError(line_number, f"invalid JSON ({e.msg})") from e
        if not isinstance(raw, dict):
            raise EventFormatError(line_number, "event must be a JSON object")
        yield build_event(raw)
