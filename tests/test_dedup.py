from __future__ import annotations

from core.config import DedupConfig
from core.dedup import Deduper, create_deduper, normalize_ttl_ms


def test_first_sighting_is_not_suppressed_then_window_applies() -> None:
    deduper = create_deduper(4000)
    assert deduper.should_suppress("A", now_ms=0) is False
    assert deduper.should_suppress("A", now_ms=1000) is True
    assert deduper.should_suppress("A", now_ms=5000) is False


def test_window_slides_with_every_call() -> None:
    deduper = create_deduper(4000)
    assert deduper.should_suppress("/t/1", now_ms=0) is False
    assert deduper.should_suppress("/t/1", now_ms=3000) is True
    # 6000 is past the first call's window but within the refreshed one.
    assert deduper.should_suppress("/t/1", now_ms=6000) is True
    assert deduper.should_suppress("/t/1", now_ms=10000) is False
    # The unsuppressed call above still refreshed the timestamp.
    assert deduper.should_suppress("/t/1", now_ms=10500) is True


def test_keys_are_normalized() -> None:
    deduper = create_deduper()
    assert deduper.should_suppress("/t/123", now_ms=0) is False
    assert deduper.should_suppress("/T/123 ", now_ms=10) is True


def test_empty_key_never_suppresses() -> None:
    deduper = create_deduper()
    assert deduper.should_suppress("", now_ms=0) is False
    assert deduper.should_suppress("   ", now_ms=1) is False
    assert len(deduper) == 0


def test_keys_are_independent() -> None:
    deduper = create_deduper()
    assert deduper.should_suppress("/t/1", now_ms=0) is False
    assert deduper.should_suppress("/t/2", now_ms=10) is False
    assert deduper.should_suppress("/t/1", now_ms=20) is True


def test_ttl_is_floored_and_clamped() -> None:
    assert normalize_ttl_ms(4000.9) == 4000
    assert normalize_ttl_ms(5) == 100
    assert normalize_ttl_ms(float("nan")) == 4000
    deduper = create_deduper(10)
    assert deduper.ttl_ms == 100
    assert deduper.should_suppress("x", now_ms=0) is False
    assert deduper.should_suppress("x", now_ms=99) is True
    assert deduper.should_suppress("x", now_ms=199) is False


def test_separate_dedupers_do_not_share_state() -> None:
    first = create_deduper()
    second = create_deduper()
    assert first.should_suppress("/t/1", now_ms=0) is False
    assert second.should_suppress("/t/1", now_ms=1) is False


def test_sweep_drops_only_expired_entries() -> None:
    deduper = create_deduper(4000)
    deduper.should_suppress("/t/old", now_ms=0)
    deduper.should_suppress("/t/new", now_ms=3000)
    assert deduper.sweep(now_ms=4500) == 1
    assert len(deduper) == 1
    assert deduper.should_suppress("/t/new", now_ms=4600) is True
    assert deduper.should_suppress("/t/old", now_ms=4700) is False


def test_automatic_sweep_keeps_answers_unchanged() -> None:
    swept = Deduper.from_config(DedupConfig(ttl_ms=1000, sweep_interval_ms=500))
    plain = create_deduper(1000)
    calls = [("a", 0), ("b", 200), ("a", 900), ("b", 2500), ("a", 2600), ("c", 2700), ("a", 3000)]
    for key, now in calls:
        assert swept.should_suppress(key, now_ms=now) == plain.should_suppress(key, now_ms=now)
    assert len(swept) <= len(plain)


def test_sweeping_on_every_call_matches_plain_window_for_increasing_time() -> None:
    swept = Deduper(ttl_ms=1000, sweep_interval_ms=0)
    plain = create_deduper(1000)
    calls = [("a", 0), ("a", 999), ("b", 1500), ("a", 2000), ("b", 2400), ("a", 3000), ("b", 4000)]
    for key, now in calls:
        assert swept.should_suppress(key, now_ms=now) == plain.should_suppress(key, now_ms=now)
