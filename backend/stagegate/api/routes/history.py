"""Stage history API routes."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from stagegate.core.auth import Actor, get_current_actor
from stagegate.db.base import get_session_factory
from stagegate.schemas.history import HistoryEntryResponse, ProjectHistoryResponse, TransitionStatsResponse
from stagegate.services.stage_history import StageHistoryLedger

router = APIRouter()


@router.get("/projects/{project_id}/history", response_model=ProjectHistoryResponse)
async def get_project_history(
    project_id: uuid.UUID,
    actor: Actor = Depends(get_current_actor),
):
    """Stage history of a project, oldest first, with days in the current stage."""
    ledger = StageHistoryLedger(get_session_factory())
    entries = await ledger.get_history(project_id)
    return ProjectHistoryResponse(
        project_id=project_id,
        entries=[HistoryEntryResponse.model_validate(e) for e in entries],
        days_in_current_stage=await ledger.days_in_current_stage(project_id),
    )


@router.get("/history/stats", response_model=TransitionStatsResponse)
async def get_transition_stats(
    since: datetime | None = None,
    until: datetime | None = None,
    actor: Actor = Depends(get_current_actor),
):
    ledger = StageHistoryLedger(get_session_factory())
    stats = await ledger.get_transition_stats(since, until)
    return TransitionStatsResponse(
        total_transitions=stats.total_transitions,
        bypass_transitions=stats.bypass_transitions,
        transitions_per_stage=stats.transitions_per_stage,
        average_minutes_per_stage=stats.average_minutes_per_stage,
        bypass_reasons=stats.bypass_reasons,
    )


@router.get("/history/recent", response_model=list[HistoryEntryResponse])
async def get_recent_transitions(
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
):
    ledger = StageHistoryLedger(get_session_factory())
    return [HistoryEntryResponse.model_validate(e) for e in await ledger.get_recent_transitions(limit)]
