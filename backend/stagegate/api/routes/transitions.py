"""Stage transition API routes.

Validation is read-only and may be called as often as the UI likes;
confirmation re-validates server-side before moving the project.
"""

import uuid

from fastapi import APIRouter, Depends

from stagegate.core.auth import Actor, get_current_actor
from stagegate.db.base import get_session_factory
from stagegate.schemas.transitions import ConfirmTransitionRequest, TransitionOutcomeResponse, VerdictResponse
from stagegate.services.permissions import PermissionChecker, get_permission_checker
from stagegate.services.transition_service import StageTransitionService

router = APIRouter()


@router.get("/{project_id}/transitions/{target_stage_id}/validate", response_model=VerdictResponse)
async def validate_transition(
    project_id: uuid.UUID,
    target_stage_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
    permissions: PermissionChecker = Depends(get_permission_checker),
):
    """Verdict for moving the project into the target stage.

    Raises:
        HTTPException(404): Project or stage not found
    """
    service = StageTransitionService.build(get_session_factory(), permissions)
    verdict = await service.validate_transition(project_id, target_stage_id, actor)
    return VerdictResponse.from_verdict(verdict)


@router.post("/{project_id}/transitions", response_model=TransitionOutcomeResponse, status_code=201)
async def confirm_transition(
    project_id: uuid.UUID,
    request: ConfirmTransitionRequest,
    actor: Actor = Depends(get_current_actor),
    permissions: PermissionChecker = Depends(get_permission_checker),
):
    """Move the project into the target stage.

    Raises:
        HTTPException(403): Transition blocked and caller cannot bypass
        HTTPException(404): Project or stage not found
        HTTPException(422): Bypass needed but no reason given
    """
    service = StageTransitionService.build(get_session_factory(), permissions)
    outcome = await service.confirm_transition(
        project_id,
        request.target_stage_id,
        actor,
        reason=request.reason,
        bypass_reason=request.bypass_reason,
    )
    return TransitionOutcomeResponse.from_outcome(outcome)
