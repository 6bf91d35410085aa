"""Document requirement Pydantic schemas for API responses."""

import uuid

from pydantic import BaseModel

from stagegate.domain.documents import DocumentGate, DocumentRequirement, DocumentValidationResult, StageDocumentStatus


class DocumentRequirementResponse(BaseModel):
    category: str
    name: str
    description: str
    required: bool
    min_count: int
    file_types: list[str]
    max_size_mb: float | None = None

    @classmethod
    def from_requirement(cls, req: DocumentRequirement) -> "DocumentRequirementResponse":
        return cls(
            category=req.category,
            name=req.name,
            description=req.description,
            required=req.required,
            min_count=req.min_count,
            file_types=list(req.file_types),
            max_size_mb=req.max_size_mb,
        )


class InvalidRequirementResponse(BaseModel):
    requirement: DocumentRequirementResponse
    reason: str


class RequirementStatusResponse(BaseModel):
    category: str
    name: str
    required: bool
    state: str
    matched: int
    reason: str | None = None


class DocumentSummaryResponse(BaseModel):
    total_required: int
    satisfied: int
    missing: int
    invalid: int


class DocumentValidationResponse(BaseModel):
    is_valid: bool
    summary: DocumentSummaryResponse
    missing: list[DocumentRequirementResponse]
    invalid: list[InvalidRequirementResponse]
    requirements: list[RequirementStatusResponse]
    warnings: list[str]

    @classmethod
    def from_result(cls, result: DocumentValidationResult) -> "DocumentValidationResponse":
        return cls(
            is_valid=result.is_valid,
            summary=DocumentSummaryResponse(
                total_required=result.summary.total_required,
                satisfied=result.summary.satisfied,
                missing=result.summary.missing,
                invalid=result.summary.invalid,
            ),
            missing=[DocumentRequirementResponse.from_requirement(r) for r in result.missing],
            invalid=[
                InvalidRequirementResponse(
                    requirement=DocumentRequirementResponse.from_requirement(i.requirement), reason=i.reason
                )
                for i in result.invalid
            ],
            requirements=[
                RequirementStatusResponse(
                    category=s.requirement.category,
                    name=s.requirement.name,
                    required=s.requirement.required,
                    state=s.state.value,
                    matched=s.matched,
                    reason=s.reason,
                )
                for s in result.requirements
            ],
            warnings=result.warnings,
        )


class DocumentGateResponse(BaseModel):
    can_advance: bool
    blockers: list[str]
    warnings: list[str]
    validation: DocumentValidationResponse

    @classmethod
    def from_gate(cls, gate: DocumentGate) -> "DocumentGateResponse":
        return cls(
            can_advance=gate.can_advance,
            blockers=gate.blockers,
            warnings=gate.warnings,
            validation=DocumentValidationResponse.from_result(gate.validation),
        )


class StageDocumentStatusResponse(BaseModel):
    stage_id: uuid.UUID
    stage_name: str
    completion_percentage: int
    requirements: list[DocumentRequirementResponse]
    validation: DocumentValidationResponse

    @classmethod
    def from_status(cls, status: StageDocumentStatus) -> "StageDocumentStatusResponse":
        return cls(
            stage_id=status.stage_id,
            stage_name=status.stage_name,
            completion_percentage=status.completion_percentage,
            requirements=[DocumentRequirementResponse.from_requirement(r) for r in status.requirements],
            validation=DocumentValidationResponse.from_result(status.validation),
        )
