"""Core notification dispatch pipeline.

This module is integration-agnostic. It only relies on the notifier port for
delivery, so the same decisions drive a console replay or a native bridge.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Callable, Iterable, Optional

from core.classify import classify_call_notification, is_likely_global_site_notification
from core.config import DispatchConfig, MatcherConfig
from core.dedup import Deduper
from core.matcher import resolve_match
from core.models import (
    NativeNotification,
    NotificationCandidate,
    NotificationMatchResult,
    NotificationPayload,
    coerce_text,
)
from core.ports import NotifierPort
from core.text import normalize_text

LOGGER = logging.getLogger(__name__)

DECISION_EMPTY = "empty"
DECISION_SETTLING = "settling"
DECISION_GLOBAL_SITE = "global-site"
DECISION_CALL = "call"
DECISION_UNRESOLVED = "unresolved"
DECISION_MUTED = "muted"
DECISION_DUPLICATE = "duplicate"
DECISION_NOTIFIED = "notified"


@dataclass(frozen=True)
class DispatchOutcome:
    """What the dispatcher decided for one payload."""

    decision: str
    match: Optional[NotificationMatchResult] = None
    notification: Optional[NativeNotification] = None

    @property
    def delivered(self) -> bool:
        return self.notification is not None


def _wall_clock_ms() -> float:
    return time.time() * 1000


class NotificationDispatcher:
    """Orchestrates classification, matching, dedup, and delivery."""

    def __init__(
        self,
        notifier: NotifierPort,
        deduper: Deduper,
        config: Optional[DispatchConfig] = None,
        matcher_config: Optional[MatcherConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._notifier = notifier
        self._deduper = deduper
        self._config = config or DispatchConfig()
        self._matcher_config = matcher_config or MatcherConfig()
        self._clock = clock or _wall_clock_ms
        self._settling_until = 0.0
        self.start_settling()

    def start_settling(self, duration_ms: Optional[float] = None) -> None:
        """Open a quiet window, e.g. after startup or when the page navigates."""

        duration = self._config.startup_grace_ms if duration_ms is None else duration_ms
        self._settling_until = self._clock() + max(0.0, duration)

    @property
    def is_settling(self) -> bool:
        return self._clock() < self._settling_until

    async def handle(
        self,
        payload: NotificationPayload,
        candidates: Iterable[NotificationCandidate],
    ) -> DispatchOutcome:
        """Run one intercepted notification through the dispatch pipeline."""

        if not normalize_text(payload.title) and not normalize_text(payload.body):
            return DispatchOutcome(decision=DECISION_EMPTY)

        # The page replays notifications for old messages right after load.
        if self.is_settling:
            LOGGER.debug("Notification suppressed while settling: %s", payload.title)
            return DispatchOutcome(decision=DECISION_SETTLING)

        if self._config.skip_global_site and is_likely_global_site_notification(payload):
            LOGGER.info("Skipping site activity notification: %s", payload.title)
            return DispatchOutcome(decision=DECISION_GLOBAL_SITE)

        call = classify_call_notification(payload)
        if call.is_incoming_call:
            if not self._config.notify_calls:
                LOGGER.info("Incoming call notification dropped (%s)", call.matched_pattern)
                return DispatchOutcome(decision=DECISION_CALL)
            notification = self._build(payload, href=None, kind="call")
            await self._notifier.send(notification)
            LOGGER.info("Incoming call notification sent (%s)", call.matched_pattern)
            return DispatchOutcome(decision=DECISION_CALL, notification=notification)

        match = resolve_match(payload, candidates, self._matcher_config)
        if not match.is_match:
            LOGGER.info(
                "No notification for %r: %s (confidence %.2f)",
                payload.title,
                match.reason,
                match.confidence,
            )
            return DispatchOutcome(decision=DECISION_UNRESOLVED, match=match)

        if match.muted:
            LOGGER.info("Matched muted conversation %s, skipping", match.matched_href)
            return DispatchOutcome(decision=DECISION_MUTED, match=match)

        # Only a delivered-or-deliverable match touches the dedup window.
        if self._deduper.should_suppress(match.matched_href or "", self._clock()):
            LOGGER.info("Dedup skip for %s", match.matched_href)
            return DispatchOutcome(decision=DECISION_DUPLICATE, match=match)

        notification = self._build(payload, href=match.matched_href, kind="message")
        await self._notifier.send(notification)
        LOGGER.info("Notification sent for %s (confidence %.2f)", match.matched_href, match.confidence)
        return DispatchOutcome(decision=DECISION_NOTIFIED, match=match, notification=notification)

    def _build(self, payload: NotificationPayload, href: Optional[str], kind: str) -> NativeNotification:
        # Body is clipped to keep native toasts short.
        body = coerce_text(payload.body)[: self._config.body_chars]
        return NativeNotification(title=coerce_text(payload.title), body=body, href=href, kind=kind)
