"""Stage history Pydantic schemas for API responses."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class HistoryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    project_id: uuid.UUID
    from_stage_id: uuid.UUID | None = None
    to_stage_id: uuid.UUID
    user_id: str
    entered_at: datetime
    exited_at: datetime | None = None
    duration_minutes: int | None = None
    bypass_required: bool
    bypass_reason: str | None = None
    reason: str | None = None
    exit_reason: str | None = None


class ProjectHistoryResponse(BaseModel):
    project_id: uuid.UUID
    entries: list[HistoryEntryResponse]
    days_in_current_stage: int | None = Field(None, description="Whole days since the open entry; null without history")


class TransitionStatsResponse(BaseModel):
    total_transitions: int
    bypass_transitions: int
    transitions_per_stage: dict[str, int]
    average_minutes_per_stage: dict[str, float]
    bypass_reasons: list[str]
