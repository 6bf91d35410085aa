"""StageHistoryEntry model: append-only record of stage occupancy."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, text

from stagegate.db.base import Base


class StageHistoryEntry(Base):
    __tablename__ = "stage_history_entries"
    __table_args__ = (
        # At most one open entry per project, enforced by storage
        Index(
            "uq_stage_history_open_entry",
            "project_id",
            unique=True,
            postgresql_where=text("exited_at IS NULL"),
            sqlite_where=text("exited_at IS NULL"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=False, index=True)

    from_stage_id = Column(Uuid, ForeignKey("workflow_stages.id"), nullable=True)  # null for first entry
    to_stage_id = Column(Uuid, ForeignKey("workflow_stages.id"), nullable=False)
    user_id = Column(String(255), nullable=False)

    entered_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True
    )
    exited_at = Column(DateTime(timezone=True), nullable=True)  # null while the project is in this stage
    duration_minutes = Column(Integer, nullable=True)  # set when the entry is closed

    bypass_required = Column(Boolean, nullable=False, default=False)
    bypass_reason = Column(Text, nullable=True)
    reason = Column(Text, nullable=True)
    exit_reason = Column(Text, nullable=True)
