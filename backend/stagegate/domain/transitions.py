"""Transition verdicts and the per-attempt state machine.

Pure domain logic with no external dependencies.
"""

import uuid
from dataclasses import dataclass, field
from enum import StrEnum

from stagegate.core.exceptions import PreconditionError
from stagegate.domain.checks import CheckCategory, CheckStatus, PrerequisiteResult
from stagegate.domain.stages import SequenceResult


class TransitionState(StrEnum):
    """States of one transition attempt.

    idle -> validating -> {valid, invalid} -> (confirm) -> recording -> {committed, failed}
    """

    IDLE = "idle"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"
    RECORDING = "recording"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass
class Verdict:
    """Combined decision for one transition attempt.

    Holds no timestamps so that repeated validation of unchanged state
    compares equal. The project, stage and user ids tie it to the move it
    was computed for.
    """

    is_valid: bool
    can_proceed: bool
    requires_approval: bool
    requires_bypass: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    prerequisite_result: PrerequisiteResult | None = None
    project_id: uuid.UUID | None = None
    target_stage_id: uuid.UUID | None = None
    current_stage_id: uuid.UUID | None = None
    user_id: str | None = None

    @property
    def state(self) -> TransitionState:
        return TransitionState.VALID if self.is_valid else TransitionState.INVALID

    def applies_to(
        self,
        project_id: uuid.UUID,
        target_stage_id: uuid.UUID,
        current_stage_id: uuid.UUID | None,
        user_id: str,
    ) -> bool:
        """True when this verdict was computed for this user moving this project
        from ``current_stage_id`` into ``target_stage_id``."""
        return (
            self.project_id is not None
            and self.project_id == project_id
            and self.target_stage_id == target_stage_id
            and self.current_stage_id == current_stage_id
            and self.user_id == user_id
        )


@dataclass
class TransitionOutcome:
    """Result of a confirmed transition.

    ``warnings`` carries recoverable notices, such as a stage change that
    committed while its history entry could not be written.
    """

    state: TransitionState
    project_id: object
    from_stage_id: object | None
    to_stage_id: object
    history_entry: object | None = None
    bypass_used: bool = False
    warnings: list[str] = field(default_factory=list)


def compute_verdict(
    sequence: SequenceResult,
    prerequisites: PrerequisiteResult,
    *,
    bypass_allowed: bool,
    approvals_required: bool,
    project_id: uuid.UUID | None = None,
    target_stage_id: uuid.UUID | None = None,
    current_stage_id: uuid.UUID | None = None,
    user_id: str | None = None,
) -> Verdict:
    """Merge the sequence check, prerequisite result and bypass capability.

    Rules:
        - is_valid = sequence allowed and every required check passed
        - requires_bypass = not is_valid and the caller may bypass
        - can_proceed = is_valid or requires_bypass
        - requires_approval = approvals required and some approval check
          has not passed (independent of bypass)
    """
    errors = list(prerequisites.errors)
    if not sequence.allowed:
        errors.insert(0, sequence.reason)

    is_valid = sequence.allowed and prerequisites.required_passed
    requires_bypass = not is_valid and bypass_allowed

    approval_checks = prerequisites.by_category(CheckCategory.APPROVALS)
    requires_approval = approvals_required and not all(c.status == CheckStatus.PASSED for c in approval_checks)

    return Verdict(
        is_valid=is_valid,
        can_proceed=is_valid or requires_bypass,
        requires_approval=requires_approval,
        requires_bypass=requires_bypass,
        errors=errors,
        warnings=list(prerequisites.warnings),
        prerequisite_result=prerequisites,
        project_id=project_id,
        target_stage_id=target_stage_id,
        current_stage_id=current_stage_id,
        user_id=user_id,
    )


def require_bypass_reason(verdict: Verdict, bypass_reason: str | None) -> str | None:
    """Return the cleaned bypass reason, or None when no bypass is needed.

    Raises:
        PreconditionError: bypass needed but reason blank
    """
    if not verdict.requires_bypass:
        return None
    reason = (bypass_reason or "").strip()
    if not reason:
        raise PreconditionError("A bypass reason is required to override failed prerequisites")
    return reason
