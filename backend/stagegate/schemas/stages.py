"""Workflow stage Pydantic schemas for API responses."""

import uuid

from pydantic import BaseModel, ConfigDict, Field


class StageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    description: str
    stage_order: int
    exit_criteria: list[str] = Field(default_factory=list)
    required_approvals: bool
    approval_roles: list[str] = Field(default_factory=list)
    responsible_roles: list[str] = Field(default_factory=list)
    estimated_duration_days: int | None = None
    is_active: bool
