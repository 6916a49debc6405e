"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Scoring thresholds were tuned against real sidebar snapshots; behavior
# compatibility depends on the exact values.
MIN_CONFIDENCE = 0.55
AMBIGUITY_DELTA = 0.14
MUTED_CONFLICT_SCORE_FLOOR = 0.20
CROSS_REFERENCE_SLACK = 0.1

WEIGHT_EXACT_TITLE = 0.66
WEIGHT_TITLE_CONTAINS = 0.45
WEIGHT_TITLE_OVERLAP = 0.22
WEIGHT_BODY_OVERLAP = 0.20
WEIGHT_BODY_TITLE_OVERLAP = 0.12
WEIGHT_BODY_MENTIONS_TITLE = 0.34
WEIGHT_PREVIEW_MENTIONS_SENDER = 0.14
READ_PENALTY = 0.20

DEFAULT_DEDUP_TTL_MS = 4000
MIN_DEDUP_TTL_MS = 100

DEFAULT_STARTUP_GRACE_MS = 8000
DEFAULT_BODY_CHARS = 100


@dataclass(frozen=True)
class MatcherConfig:
    """Decision thresholds used by the matcher."""

    min_confidence: float = MIN_CONFIDENCE
    ambiguity_delta: float = AMBIGUITY_DELTA
    muted_conflict_score_floor: float = MUTED_CONFLICT_SCORE_FLOOR


@dataclass(frozen=True)
class DedupConfig:
    """Suppression window settings for the deduper."""

    ttl_ms: float = DEFAULT_DEDUP_TTL_MS
    sweep_interval_ms: Optional[float] = None


@dataclass(frozen=True)
class DispatchConfig:
    """Settings consumed by the notification dispatcher."""

    startup_grace_ms: float = DEFAULT_STARTUP_GRACE_MS
    skip_global_site: bool = True
    notify_calls: bool = True
    body_chars: int = DEFAULT_BODY_CHARS
