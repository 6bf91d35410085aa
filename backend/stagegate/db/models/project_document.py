"""ProjectDocument model: documents attached to a project.

Written by the document storage service; the stage gate engine only reads it.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, String, Uuid

from stagegate.db.base import Base


class ProjectDocument(Base):
    __tablename__ = "project_documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=False, index=True)

    category = Column(String(50), nullable=False, index=True)  # rfq, drawing, bom, quote, ...
    file_name = Column(String(255), nullable=False)
    title = Column(String(255), nullable=True)
    file_size = Column(BigInteger, nullable=True)  # bytes
    status = Column(String(20), nullable=False, default="active")  # active, archived

    uploaded_by = Column(String(255), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
