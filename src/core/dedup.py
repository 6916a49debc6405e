"""Deduplication helpers (core domain)."""

from __future__ import annotations

import logging
import math
import time
from typing import Optional

from core.config import DEFAULT_DEDUP_TTL_MS, MIN_DEDUP_TTL_MS, DedupConfig
from core.text import normalize_text

LOGGER = logging.getLogger(__name__)


def _wall_clock_ms() -> float:
    return time.time() * 1000


def normalize_ttl_ms(ttl_ms: float) -> int:
    """Floor the TTL and enforce the minimum window."""

    try:
        ttl_value = float(ttl_ms)
    except (TypeError, ValueError):
        ttl_value = float(DEFAULT_DEDUP_TTL_MS)
    if not math.isfinite(ttl_value):
        ttl_value = float(DEFAULT_DEDUP_TTL_MS)
    return max(MIN_DEDUP_TTL_MS, math.floor(ttl_value))


class Deduper:
    """Sliding suppression window keyed by normalized conversation href.

    Every call both checks and records: the stored timestamp always moves to
    the latest call, so a steady burst of events spaced closer than the TTL
    stays suppressed until a quiet gap of at least the TTL.

    Timestamps must be non-decreasing when ``sweep_interval_ms`` is set.
    Not safe for concurrent use; callers serialize ``should_suppress``.
    """

    def __init__(self, ttl_ms: float = DEFAULT_DEDUP_TTL_MS, sweep_interval_ms: Optional[float] = None) -> None:
        self._ttl = normalize_ttl_ms(ttl_ms)
        self._sweep_interval = sweep_interval_ms
        self._last_sweep: Optional[float] = None
        self._seen: dict[str, float] = {}

    @classmethod
    def from_config(cls, config: DedupConfig) -> "Deduper":
        return cls(ttl_ms=config.ttl_ms, sweep_interval_ms=config.sweep_interval_ms)

    @property
    def ttl_ms(self) -> int:
        return self._ttl

    def __len__(self) -> int:
        return len(self._seen)

    def should_suppress(self, key: str, now_ms: Optional[float] = None) -> bool:
        """Return True when ``key`` was seen less than one TTL before ``now_ms``."""

        normalized = normalize_text(key)
        if not normalized:
            return False

        now = _wall_clock_ms() if now_ms is None else now_ms
        self._maybe_sweep(now)

        previous = self._seen.get(normalized)
        self._seen[normalized] = now
        if previous is None:
            return False
        return now - previous < self._ttl

    def sweep(self, now_ms: Optional[float] = None) -> int:
        """Drop entries whose window has elapsed; return how many were removed.

        An expired entry and a missing entry both answer False on the next
        call, so with a clock that never goes backwards sweeping cannot change
        what ``should_suppress`` returns. A later call stamped before the sweep
        would find the key gone and answer False where it might have been True.
        """

        now = _wall_clock_ms() if now_ms is None else now_ms
        expired = [key for key, seen_at in self._seen.items() if now - seen_at >= self._ttl]
        for key in expired:
            del self._seen[key]
        self._last_sweep = now
        if expired:
            LOGGER.debug("Dedup sweep removed %s expired keys", len(expired))
        return len(expired)

    def _maybe_sweep(self, now: float) -> None:
        if self._sweep_interval is None:
            return
        if self._last_sweep is None:
            self._last_sweep = now
            return
        if now - self._last_sweep >= self._sweep_interval:
            self.sweep(now)


def create_deduper(ttl_ms: float = DEFAULT_DEDUP_TTL_MS) -> Deduper:
    """Return a fresh deduper with its own private state."""

    return Deduper(ttl_ms=ttl_ms)
