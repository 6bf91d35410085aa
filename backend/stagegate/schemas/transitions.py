"""Stage transition Pydantic schemas for API requests and responses."""

import uuid

from pydantic import BaseModel, Field, model_validator

from stagegate.domain.transitions import TransitionOutcome, Verdict
from stagegate.schemas.history import HistoryEntryResponse


class PrerequisiteCheckResponse(BaseModel):
    id: str
    category: str
    name: str
    description: str
    required: bool
    status: str
    details: str | None = None


class PrerequisiteResultResponse(BaseModel):
    checks: list[PrerequisiteCheckResponse]
    required_passed: bool
    all_passed: bool
    blockers: list[str]
    errors: list[str]
    warnings: list[str]


class VerdictResponse(BaseModel):
    """Verdict for one transition attempt; errors block, warnings are advisory."""

    is_valid: bool
    can_proceed: bool
    requires_approval: bool
    requires_bypass: bool
    errors: list[str]
    warnings: list[str]
    prerequisites: PrerequisiteResultResponse | None = None

    @classmethod
    def from_verdict(cls, verdict: Verdict) -> "VerdictResponse":
        result = verdict.prerequisite_result
        prerequisites = None
        if result is not None:
            prerequisites = PrerequisiteResultResponse(
                checks=[
                    PrerequisiteCheckResponse(
                        id=c.id,
                        category=c.category.value,
                        name=c.name,
                        description=c.description,
                        required=c.required,
                        status=c.status.value,
                        details=c.details,
                    )
                    for c in result.checks
                ],
                required_passed=result.required_passed,
                all_passed=result.all_passed,
                blockers=result.blockers,
                errors=result.errors,
                warnings=result.warnings,
            )
        return cls(
            is_valid=verdict.is_valid,
            can_proceed=verdict.can_proceed,
            requires_approval=verdict.requires_approval,
            requires_bypass=verdict.requires_bypass,
            errors=verdict.errors,
            warnings=verdict.warnings,
            prerequisites=prerequisites,
        )


class ConfirmTransitionRequest(BaseModel):
    """Request to move a project into a target stage."""

    target_stage_id: uuid.UUID
    reason: str | None = Field(default=None, max_length=2000)
    bypass: bool = Field(default=False, description="Caller acknowledges failed prerequisites and overrides them")
    bypass_reason: str | None = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def require_bypass_reason(self) -> "ConfirmTransitionRequest":
        """A bypass must say why, and a reason only comes with a bypass."""
        if self.bypass and not (self.bypass_reason or "").strip():
            raise ValueError("bypass_reason is required when bypassing prerequisites")
        if not self.bypass and self.bypass_reason is not None:
            raise ValueError("bypass_reason is only accepted together with bypass=true")
        return self


class TransitionOutcomeResponse(BaseModel):
    state: str
    project_id: uuid.UUID
    from_stage_id: uuid.UUID | None = None
    to_stage_id: uuid.UUID
    bypass_used: bool
    history_entry: HistoryEntryResponse | None = None
    warnings: list[str] = Field(default_factory=list, description="Recoverable notices, e.g. history not recorded")

    @classmethod
    def from_outcome(cls, outcome: TransitionOutcome) -> "TransitionOutcomeResponse":
        return cls(
            state=outcome.state.value,
            project_id=outcome.project_id,
            from_stage_id=outcome.from_stage_id,
            to_stage_id=outcome.to_stage_id,
            bypass_used=outcome.bypass_used,
            history_entry=(
                HistoryEntryResponse.model_validate(outcome.history_entry) if outcome.history_entry else None
            ),
            warnings=outcome.warnings,
        )
