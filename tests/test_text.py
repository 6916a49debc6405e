from __future__ import annotations

import math

from core.text import clamp_score, normalize_text, token_overlap_ratio, tokenize


def test_normalize_text_collapses_and_lowercases() -> None:
    assert normalize_text("  Hello\n  WORLD\t ") == "hello world"
    assert normalize_text(None) == ""
    assert normalize_text(42) == "42"


def test_tokenize_drops_punctuation_and_short_tokens() -> None:
    assert tokenize("Hi, I'm at the café!") == ["hi", "at", "the", "caf"]
    assert tokenize("a b c") == []
    assert tokenize("") == []


def test_token_overlap_uses_larger_unique_set() -> None:
    assert token_overlap_ratio(["alice", "bob"], ["alice"]) == 0.5
    assert token_overlap_ratio(["alice", "alice"], ["alice"]) == 1.0
    assert token_overlap_ratio([], ["alice"]) == 0.0


def test_clamp_score_bounds_and_non_finite() -> None:
    assert clamp_score(1.4) == 1.0
    assert clamp_score(-0.3) == 0.0
    assert clamp_score(math.nan) == 0.0
    assert clamp_score(math.inf) == 0.0
