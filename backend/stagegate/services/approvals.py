"""ApprovalService: read access to stage approvals plus caller-triggered requests.

The transition engine only reads approvals. ``request_approvals`` is exposed
for callers (the UI) that want to kick off the approval workflow for a stage.
"""

import uuid
from datetime import UTC, datetime, timedelta

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stagegate.core.config import Settings, get_settings
from stagegate.core.exceptions import NotFoundError
from stagegate.core.ids import parse_uuid
from stagegate.db.models.approval import Approval
from stagegate.db.models.project import Project
from stagegate.db.models.workflow_stage import WorkflowStage
from stagegate.domain.approvals import ApprovalStatus, ApprovalSummary, latest_by_role, summarize_approvals

logger = structlog.get_logger(__name__)


class ApprovalService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], settings: Settings | None = None):
        self.session_factory = session_factory
        self.settings = settings or get_settings()

    async def get_stage_approvals(self, project_id: uuid.UUID | str, stage_id: uuid.UUID | str) -> list[Approval]:
        project_uuid = parse_uuid(project_id, "Project")
        stage_uuid = parse_uuid(stage_id, "WorkflowStage")
        async with self.session_factory() as session:
            result = await session.execute(
                select(Approval)
                .where(Approval.project_id == project_uuid, Approval.stage_id == stage_uuid)
                .order_by(Approval.created_at)
            )
            return list(result.scalars().all())

    async def get_project_approvals(self, project_id: uuid.UUID | str) -> list[Approval]:
        project_uuid = parse_uuid(project_id, "Project")
        async with self.session_factory() as session:
            result = await session.execute(
                select(Approval).where(Approval.project_id == project_uuid).order_by(Approval.created_at)
            )
            return list(result.scalars().all())

    async def get_approval_status(self, project_id: uuid.UUID | str, stage_id: uuid.UUID | str) -> ApprovalSummary:
        return summarize_approvals(await self.get_stage_approvals(project_id, stage_id))

    async def request_approvals(
        self,
        project_id: uuid.UUID | str,
        stage_id: uuid.UUID | str,
        requested_by: str,
        now: datetime | None = None,
    ) -> list[Approval]:
        """Create pending approvals for each of the stage's approval roles.

        Roles that already have a pending or approved request are skipped, so
        calling this twice does not duplicate requests. Rejected roles get a
        fresh request.

        Returns:
            The newly created Approval rows

        Raises:
            NotFoundError: project or stage does not exist
        """
        project_uuid = parse_uuid(project_id, "Project")
        stage_uuid = parse_uuid(stage_id, "WorkflowStage")
        now = now or datetime.now(UTC)
        due = now + timedelta(days=self.settings.approval_due_days)

        async with self.session_factory() as session:
            if await session.get(Project, project_uuid) is None:
                raise NotFoundError("Project", project_id)
            stage = await session.get(WorkflowStage, stage_uuid)
            if stage is None:
                raise NotFoundError("WorkflowStage", stage_id)

            result = await session.execute(
                select(Approval).where(Approval.project_id == project_uuid, Approval.stage_id == stage_uuid)
            )
            latest = latest_by_role(result.scalars().all())

            created = []
            for role in stage.approval_roles or []:
                existing = latest.get(role)
                if existing is not None and existing.status != ApprovalStatus.REJECTED:
                    continue
                approval = Approval(
                    project_id=project_uuid,
                    stage_id=stage_uuid,
                    approver_role=role,
                    status=ApprovalStatus.PENDING.value,
                    due_date=due,
                    requested_by=requested_by,
                    created_at=now,
                )
                session.add(approval)
                created.append(approval)

            await session.commit()

        logger.info(
            "approvals_requested",
            project_id=str(project_uuid),
            stage_id=str(stage_uuid),
            roles=[a.approver_role for a in created],
            requested_by=requested_by,
        )
        return created
