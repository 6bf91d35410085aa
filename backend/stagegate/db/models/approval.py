"""Approval model: per-stage approval requests for a project."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid

from stagegate.db.base import Base


class Approval(Base):
    __tablename__ = "approvals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=False, index=True)
    stage_id = Column(Uuid, ForeignKey("workflow_stages.id"), nullable=False, index=True)

    approver_role = Column(String(50), nullable=False)  # engineering, qa, production, management
    approver_id = Column(String(255), nullable=True)  # null until assigned
    status = Column(String(20), nullable=False, default="pending")  # pending, approved, rejected

    due_date = Column(DateTime(timezone=True), nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    comments = Column(Text, nullable=True)

    requested_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
