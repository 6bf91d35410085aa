"""Stage ordering and sequence validation.

Pure domain logic with no external dependencies. Stage arguments are any
objects exposing ``id``, ``name``, ``stage_order`` and ``is_active``
(WorkflowStage rows in production, plain dataclasses in tests).
"""

from collections.abc import Iterable
from dataclasses import dataclass

from stagegate.domain.checks import CheckCategory, CheckStatus, PrerequisiteCheck

# Project statuses that end the lifecycle; no further transitions allowed
TERMINAL_STATUSES = frozenset({"completed", "cancelled"})


@dataclass
class SequenceResult:
    """Result of the service-level sequence check."""

    allowed: bool
    reason: str = ""
    skipped: int = 0


def sort_stages(stages: Iterable) -> list:
    return sorted(stages, key=lambda s: s.stage_order)


def first_stage(stages: Iterable):
    """Lowest-ordered active stage, or None for an empty catalog."""
    active = [s for s in sort_stages(stages) if s.is_active]
    return active[0] if active else None


def find_next_stage(stages: Iterable, current):
    """Active stage at ``current.stage_order + 1``, or None at the end of the workflow."""
    for stage in sort_stages(stages):
        if stage.stage_order == current.stage_order + 1 and stage.is_active:
            return stage
    return None


def find_previous_stage(stages: Iterable, current):
    for stage in sort_stages(stages):
        if stage.stage_order == current.stage_order - 1 and stage.is_active:
            return stage
    return None


def skipped_stage_count(current, target) -> int:
    """Number of stages jumped over when moving from current to target."""
    base = current.stage_order if current is not None else 0
    return max(target.stage_order - base - 1, 0)


def check_sequence(current, target, stages: Iterable, *, can_skip: bool = False) -> SequenceResult:
    """Check that target is the next stage after current.

    Pure function -- no side effects, no DB access.

    Rules:
        - Inactive targets are rejected
        - With no current stage, only the first stage may be entered
        - Same-stage and backward moves are rejected
        - Forward moves must land on stage_order + 1 unless can_skip is set
    """
    if not target.is_active:
        return SequenceResult(False, f"Stage {target.name} is not active")

    if current is None:
        first = first_stage(stages)
        if first is None or first.id == target.id:
            return SequenceResult(True)
        if can_skip:
            return SequenceResult(True, skipped=target.stage_order - first.stage_order)
        return SequenceResult(False, f"A new project must enter {first.name} first")

    if target.id == current.id or target.stage_order == current.stage_order:
        return SequenceResult(False, "Already at this stage")

    if target.stage_order < current.stage_order:
        return SequenceResult(False, f"Cannot move backwards from {current.name} to {target.name}")

    skipped = skipped_stage_count(current, target)
    if skipped == 0:
        return SequenceResult(True)
    if can_skip:
        return SequenceResult(True, skipped=skipped)
    return SequenceResult(
        False,
        f"{target.name} is not the next stage after {current.name} (would skip {skipped} stage(s))",
    )


def system_checks(project, target, current=None) -> list[PrerequisiteCheck]:
    """Structural sanity checks for moving project into target."""
    checks = [
        PrerequisiteCheck(
            id="target_stage_active",
            category=CheckCategory.SYSTEM,
            name="Target stage available",
            description="Target stage must exist and be active",
            required=True,
            status=CheckStatus.PASSED if target.is_active else CheckStatus.FAILED,
            details=None if target.is_active else f"{target.name} is inactive",
        ),
    ]

    reachable = current is None or target.stage_order > current.stage_order
    checks.append(
        PrerequisiteCheck(
            id="target_stage_reachable",
            category=CheckCategory.SYSTEM,
            name="Forward progression",
            description="Target stage must come after the current stage",
            required=True,
            status=CheckStatus.PASSED if reachable else CheckStatus.FAILED,
            details=None if reachable else f"{target.name} is not after {current.name}",
        )
    )

    status = (project.status or "").lower()
    open_project = status not in TERMINAL_STATUSES
    checks.append(
        PrerequisiteCheck(
            id="project_open",
            category=CheckCategory.SYSTEM,
            name="Project open",
            description="Project must not be completed or cancelled",
            required=True,
            status=CheckStatus.PASSED if open_project else CheckStatus.FAILED,
            details=None if open_project else f"Project is {status}",
        )
    )

    if reachable:
        skipped = skipped_stage_count(current, target)
        if skipped and current is not None:
            checks.append(
                PrerequisiteCheck(
                    id="stage_skip",
                    category=CheckCategory.SYSTEM,
                    name="Stage skip",
                    description="Transition skips intermediate stages",
                    required=False,
                    status=CheckStatus.FAILED,
                    details=f"Skipping {skipped} stage(s) between {current.name} and {target.name}",
                )
            )

    return checks
