"""Re-export all models so Base.metadata sees them."""

from stagegate.db.models.approval import Approval
from stagegate.db.models.project import Project
from stagegate.db.models.project_document import ProjectDocument
from stagegate.db.models.stage_history import StageHistoryEntry
from stagegate.db.models.workflow_stage import WorkflowStage

__all__ = [
    "Approval",
    "Project",
    "ProjectDocument",
    "StageHistoryEntry",
    "WorkflowStage",
]
