"""Approval Pydantic schemas for API responses."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ApprovalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    project_id: uuid.UUID
    stage_id: uuid.UUID
    approver_role: str
    approver_id: str | None = None
    status: str
    due_date: datetime | None = None
    requested_by: str | None = None


class ApprovalStatusResponse(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    is_complete: bool


class RequestApprovalsResponse(BaseModel):
    created: list[ApprovalResponse]
    status: ApprovalStatusResponse
