"""Text normalization helpers shared by the matcher and deduper."""

from __future__ import annotations

import math
import re
from typing import Any, Sequence

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def normalize_text(value: Any) -> str:
    """Lowercase, collapse whitespace, and trim."""

    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return _WHITESPACE_RE.sub(" ", value.lower()).strip()


def tokenize(value: Any) -> list[str]:
    """Split normalized text into alphanumeric tokens of 2+ characters."""

    normalized = _NON_ALNUM_RE.sub(" ", normalize_text(value)).strip()
    if not normalized:
        return []
    return [token for token in normalized.split(" ") if len(token) >= 2]


def token_overlap_ratio(a: Sequence[str], b: Sequence[str]) -> float:
    """Return shared unique tokens divided by the larger unique-token count."""

    if not a or not b:
        return 0.0
    a_set = set(a)
    b_set = set(b)
    intersection = len(a_set & b_set)
    return intersection / max(len(a_set), len(b_set), 1)


def clamp_score(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))
