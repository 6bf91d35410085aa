"""WorkflowStage model: ordered catalog of lifecycle stages."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text, Uuid

from stagegate.db.base import Base


class WorkflowStage(Base):
    __tablename__ = "workflow_stages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)  # stable key for rule tables
    description = Column(Text, nullable=False, default="")

    # Total order; "next stage" is the one at stage_order + 1
    stage_order = Column(Integer, nullable=False, unique=True)

    # Exit criteria: ["criterion text 1", "criterion text 2"]
    exit_criteria = Column(JSON, nullable=False, default=list)

    required_approvals = Column(Boolean, nullable=False, default=False)
    approval_roles = Column(JSON, nullable=False, default=list)  # ["engineering", "qa"]
    responsible_roles = Column(JSON, nullable=False, default=list)
    estimated_duration_days = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )
