"""Tests for stage history arithmetic."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest

from stagegate.domain.history import compute_transition_stats, days_in_stage, duration_minutes, ensure_utc

pytestmark = pytest.mark.unit

T0 = datetime(2026, 10, 1, 8, 0, tzinfo=UTC)


def test_ensure_utc_attaches_timezone_to_naive():
    assert ensure_utc(datetime(2026, 1, 1)).tzinfo is UTC
    assert ensure_utc(None) is None


def test_duration_rounds_to_nearest_minute():
    assert duration_minutes(T0, T0 + timedelta(minutes=90, seconds=29)) == 90
    assert duration_minutes(T0, T0 + timedelta(minutes=90, seconds=31)) == 91


def test_duration_accepts_naive_datetimes():
    naive = T0.replace(tzinfo=None)
    assert duration_minutes(naive, T0 + timedelta(hours=2)) == 120


def test_days_in_stage_floors():
    assert days_in_stage(T0, T0 + timedelta(hours=47, minutes=59)) == 1
    assert days_in_stage(T0, T0 + timedelta(hours=48)) == 2
    assert days_in_stage(T0, T0 + timedelta(minutes=5)) == 0


def _entry(stage_id, duration=None, bypass_reason=None):
    return SimpleNamespace(
        to_stage_id=stage_id,
        entered_at=T0,
        exited_at=T0 + timedelta(minutes=duration) if duration is not None else None,
        duration_minutes=duration,
        bypass_required=bypass_reason is not None,
        bypass_reason=bypass_reason,
    )


def test_transition_stats():
    entries = [
        _entry("s1", duration=60),
        _entry("s1", duration=91),
        _entry("s2", bypass_reason="customer escalation"),
        _entry("s9", duration=10),
    ]
    stats = compute_transition_stats(entries, {"s1": "Inquiry Received", "s2": "Technical Review"})

    assert stats.total_transitions == 4
    assert stats.bypass_transitions == 1
    assert stats.bypass_reasons == ["customer escalation"]
    assert stats.transitions_per_stage == {"Inquiry Received": 2, "Technical Review": 1, "s9": 1}
    assert stats.average_minutes_per_stage == {"Inquiry Received": 75.5, "s9": 10.0}


def test_empty_stats():
    stats = compute_transition_stats([], {})
    assert stats.total_transitions == 0
    assert stats.average_minutes_per_stage == {}
