"""StageRegistry: read access to the ordered workflow stage catalog."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stagegate.core.ids import parse_uuid
from stagegate.db.models.workflow_stage import WorkflowStage
from stagegate.domain.stages import find_next_stage, find_previous_stage


class StageRegistry:
    """Lookups over WorkflowStage rows, always ordered by stage_order."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_workflow_stages(self, include_inactive: bool = False) -> list[WorkflowStage]:
        async with self.session_factory() as session:
            query = select(WorkflowStage).order_by(WorkflowStage.stage_order)
            if not include_inactive:
                query = query.where(WorkflowStage.is_active.is_(True))
            result = await session.execute(query)
            return list(result.scalars().all())

    async def get_workflow_stage_by_id(self, stage_id: uuid.UUID | str) -> WorkflowStage | None:
        stage_uuid = parse_uuid(stage_id, "WorkflowStage")
        async with self.session_factory() as session:
            return await session.get(WorkflowStage, stage_uuid)

    async def get_workflow_stage_by_slug(self, slug: str) -> WorkflowStage | None:
        async with self.session_factory() as session:
            result = await session.execute(select(WorkflowStage).where(WorkflowStage.slug == slug))
            return result.scalar_one_or_none()

    async def get_next_stage(self, stage_id: uuid.UUID | str) -> WorkflowStage | None:
        current = await self.get_workflow_stage_by_id(stage_id)
        if current is None:
            return None
        return find_next_stage(await self.get_workflow_stages(), current)

    async def get_previous_stage(self, stage_id: uuid.UUID | str) -> WorkflowStage | None:
        current = await self.get_workflow_stage_by_id(stage_id)
        if current is None:
            return None
        return find_previous_stage(await self.get_workflow_stages(), current)
