"""Static configuration for notibridge.

All user-editable settings (thresholds, dedup window, dispatch switches,
logging) live in a single JSON file for quick edits without touching Python.
"""

import json
import os

from core.config import (
    AMBIGUITY_DELTA,
    DEFAULT_BODY_CHARS,
    DEFAULT_DEDUP_TTL_MS,
    DEFAULT_STARTUP_GRACE_MS,
    MIN_CONFIDENCE,
    MUTED_CONFLICT_SCORE_FLOOR,
    DedupConfig,
    DispatchConfig,
    MatcherConfig,
)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json sits at the project root; NOTIBRIDGE_CONFIG points elsewhere.
CONFIG_PATH = os.getenv("NOTIBRIDGE_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _optional_float(value) -> "float | None":
    if value is None:
        return None
    return float(value)


def _fraction(section: dict, name: str, default: float) -> float:
    value = float(section.get(name, default))
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"matcher.{name} must be between 0 and 1, got {value}")
    return value


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Matcher thresholds. Defaults are the tuned values; override with care since
# small changes shift which notifications are withheld as ambiguous.
_matcher = _CONFIG.get("matcher", {})
MATCHER_CONFIG = MatcherConfig(
    min_confidence=_fraction(_matcher, "min_confidence", MIN_CONFIDENCE),
    ambiguity_delta=_fraction(_matcher, "ambiguity_delta", AMBIGUITY_DELTA),
    muted_conflict_score_floor=_fraction(_matcher, "muted_conflict_score_floor", MUTED_CONFLICT_SCORE_FLOOR),
)

# Dedup window per conversation href.
# - ttl_ms: repeated notifications closer than this are suppressed
# - sweep_interval_ms: drop expired keys periodically (null disables)
_dedup = _CONFIG.get("dedup", {})
DEDUP_CONFIG = DedupConfig(
    ttl_ms=float(_dedup.get("ttl_ms", DEFAULT_DEDUP_TTL_MS)),
    sweep_interval_ms=_optional_float(_dedup.get("sweep_interval_ms")),
)

_dispatch = _CONFIG.get("dispatch", {})
DISPATCH_CONFIG = DispatchConfig(
    startup_grace_ms=float(_dispatch.get("startup_grace_ms", DEFAULT_STARTUP_GRACE_MS)),
    skip_global_site=bool(_dispatch.get("skip_global_site", True)),
    notify_calls=bool(_dispatch.get("notify_calls", True)),
    body_chars=int(_dispatch.get("body_chars", DEFAULT_BODY_CHARS)),
)

# Base URL used to turn conversation hrefs into click-to-navigate links.
_notifications = _CONFIG.get("notifications", {})
BASE_URL = _notifications.get("base_url", "https://www.messenger.com")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
