"""Workflow stage catalog API routes."""

import uuid

from fastapi import APIRouter, HTTPException

from stagegate.db.base import get_session_factory
from stagegate.schemas.documents import DocumentRequirementResponse
from stagegate.schemas.stages import StageResponse
from stagegate.services.document_requirements import DocumentRequirementService
from stagegate.services.stage_registry import StageRegistry

router = APIRouter()


@router.get("", response_model=list[StageResponse])
async def list_stages(include_inactive: bool = False):
    """List workflow stages in order."""
    registry = StageRegistry(get_session_factory())
    return [StageResponse.model_validate(s) for s in await registry.get_workflow_stages(include_inactive=include_inactive)]


@router.get("/{stage_id}/next", response_model=StageResponse | None)
async def get_next_stage(stage_id: uuid.UUID):
    """Stage following ``stage_id``; null at the end of the workflow.

    Raises:
        HTTPException(404): Stage not found
    """
    registry = StageRegistry(get_session_factory())
    if await registry.get_workflow_stage_by_id(stage_id) is None:
        raise HTTPException(status_code=404, detail="Stage not found")
    next_stage = await registry.get_next_stage(stage_id)
    return StageResponse.model_validate(next_stage) if next_stage else None


@router.get("/{stage_id}/document-requirements", response_model=dict[str, list[DocumentRequirementResponse]])
async def get_document_requirements(stage_id: uuid.UUID):
    """Document requirements of a stage, grouped by document family."""
    service = DocumentRequirementService(get_session_factory())
    groups = await service.requirements_by_group(stage_id)
    return {
        group: [DocumentRequirementResponse.from_requirement(r) for r in requirements]
        for group, requirements in groups.items()
    }
