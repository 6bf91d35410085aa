"""Stage history arithmetic and aggregation.

Pure domain logic with no external dependencies. Entries are any objects
exposing ``to_stage_id``, ``entered_at``, ``exited_at``, ``duration_minutes``,
``bypass_required`` and ``bypass_reason``.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def duration_minutes(entered_at: datetime, exited_at: datetime) -> int:
    """Whole minutes spent in a stage, rounded to the nearest minute."""
    elapsed = ensure_utc(exited_at) - ensure_utc(entered_at)
    return round(elapsed.total_seconds() / 60)


def days_in_stage(entered_at: datetime, now: datetime) -> int:
    """Whole days since entered_at, floored."""
    return (ensure_utc(now) - ensure_utc(entered_at)).days


@dataclass
class TransitionStats:
    total_transitions: int = 0
    bypass_transitions: int = 0
    transitions_per_stage: dict[str, int] = field(default_factory=dict)
    average_minutes_per_stage: dict[str, float] = field(default_factory=dict)
    bypass_reasons: list[str] = field(default_factory=list)


def compute_transition_stats(entries: Iterable, stage_names: Mapping) -> TransitionStats:
    """Aggregate history entries into per-stage counts and average dwell time.

    Stages are reported by name; entries for stages missing from
    ``stage_names`` are reported under their id.
    """
    stats = TransitionStats()
    durations: dict[str, list[int]] = {}

    for entry in entries:
        stage = stage_names.get(entry.to_stage_id, str(entry.to_stage_id))
        stats.total_transitions += 1
        stats.transitions_per_stage[stage] = stats.transitions_per_stage.get(stage, 0) + 1

        if entry.bypass_required:
            stats.bypass_transitions += 1
            if entry.bypass_reason:
                stats.bypass_reasons.append(entry.bypass_reason)

        if entry.exited_at is not None and entry.duration_minutes is not None:
            durations.setdefault(stage, []).append(entry.duration_minutes)

    stats.average_minutes_per_stage = {
        stage: round(sum(values) / len(values), 1) for stage, values in durations.items()
    }
    return stats
