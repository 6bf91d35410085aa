"""Project document requirement API routes."""

import uuid

from fastapi import APIRouter, Depends

from stagegate.core.auth import Actor, get_current_actor
from stagegate.db.base import get_session_factory
from stagegate.schemas.documents import DocumentGateResponse, StageDocumentStatusResponse
from stagegate.services.document_requirements import DocumentRequirementService

router = APIRouter()


@router.get("/{project_id}/documents/can-advance/{target_stage_id}", response_model=DocumentGateResponse)
async def can_advance_to_stage(
    project_id: uuid.UUID,
    target_stage_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
):
    """Whether the project's documents allow entering the target stage."""
    service = DocumentRequirementService(get_session_factory())
    return DocumentGateResponse.from_gate(await service.can_advance_to_stage(project_id, target_stage_id))


@router.get("/{project_id}/documents/status", response_model=list[StageDocumentStatusResponse])
async def get_document_status(
    project_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
):
    """Document completion of the project against every stage."""
    service = DocumentRequirementService(get_session_factory())
    statuses = await service.get_project_document_status(project_id)
    return [StageDocumentStatusResponse.from_status(s) for s in statuses]
