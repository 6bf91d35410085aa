"""Approval request API routes."""

import uuid

from fastapi import APIRouter, Depends

from stagegate.core.auth import Actor, get_current_actor
from stagegate.db.base import get_session_factory
from stagegate.schemas.approvals import ApprovalResponse, ApprovalStatusResponse, RequestApprovalsResponse
from stagegate.services.approvals import ApprovalService

router = APIRouter()


def _status_response(summary) -> ApprovalStatusResponse:
    return ApprovalStatusResponse(
        total=summary.total,
        pending=summary.pending,
        approved=summary.approved,
        rejected=summary.rejected,
        is_complete=summary.is_complete,
    )


@router.post("/{project_id}/approvals/{stage_id}/request", response_model=RequestApprovalsResponse, status_code=201)
async def request_approvals(
    project_id: uuid.UUID,
    stage_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
):
    """Create pending approval requests for the stage's approval roles.

    Raises:
        HTTPException(404): Project or stage not found
    """
    service = ApprovalService(get_session_factory())
    created = await service.request_approvals(project_id, stage_id, requested_by=actor.user_id)
    summary = await service.get_approval_status(project_id, stage_id)
    return RequestApprovalsResponse(
        created=[ApprovalResponse.model_validate(a) for a in created],
        status=_status_response(summary),
    )


@router.get("/{project_id}/approvals/{stage_id}", response_model=ApprovalStatusResponse)
async def get_approval_status(
    project_id: uuid.UUID,
    stage_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
):
    service = ApprovalService(get_session_factory())
    return _status_response(await service.get_approval_status(project_id, stage_id))
