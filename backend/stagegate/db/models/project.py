"""Project model: work items that move through workflow stages."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, Text, Uuid

from stagegate.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    title = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=True)
    customer_id = Column(String(255), nullable=True, index=True)
    estimated_value = Column(Numeric(14, 2), nullable=True)
    priority_level = Column(String(20), nullable=True)  # low, medium, high, urgent
    due_date = Column(Date, nullable=True)
    status = Column(String(50), nullable=False, default="active")  # active, on_hold, completed, cancelled

    # Null until the project's first confirmed transition
    current_stage_id = Column(Uuid, ForeignKey("workflow_stages.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
