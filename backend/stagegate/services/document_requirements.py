"""DocumentRequirementService: evaluates a project's documents against stage requirements.

Requirements come from the static table in stagegate.domain.documents;
documents are read from the document store (ProjectDocument rows). The
service never writes documents.
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stagegate.core.exceptions import NotFoundError
from stagegate.core.ids import parse_uuid
from stagegate.db.models.project_document import ProjectDocument
from stagegate.domain.documents import (
    DocumentGate,
    DocumentRequirement,
    DocumentValidationResult,
    StageDocumentStatus,
    completion_percentage,
    derive_document_gate,
    evaluate_documents,
    get_stage_requirements,
    group_requirements,
)
from stagegate.services.stage_registry import StageRegistry

logger = structlog.get_logger(__name__)


class DocumentRequirementService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], registry: StageRegistry | None = None):
        self.session_factory = session_factory
        self.registry = registry or StageRegistry(session_factory)

    async def list_documents(self, project_id: uuid.UUID | str, category: str | None = None) -> list[ProjectDocument]:
        """Active documents of a project, optionally filtered by category."""
        project_uuid = parse_uuid(project_id, "Project")
        async with self.session_factory() as session:
            query = select(ProjectDocument).where(
                ProjectDocument.project_id == project_uuid,
                ProjectDocument.status == "active",
            )
            if category is not None:
                query = query.where(ProjectDocument.category == category)
            result = await session.execute(query.order_by(ProjectDocument.uploaded_at))
            return list(result.scalars().all())

    async def _get_stage(self, stage_id):
        stage = await self.registry.get_workflow_stage_by_id(stage_id)
        if stage is None:
            raise NotFoundError("WorkflowStage", stage_id)
        return stage

    async def get_stage_requirements(self, stage_id: uuid.UUID | str) -> tuple[DocumentRequirement, ...]:
        stage = await self._get_stage(stage_id)
        return get_stage_requirements(stage.slug)

    async def evaluate_for_stage(self, project_id: uuid.UUID | str, stage) -> DocumentValidationResult:
        """Evaluate against an already-resolved stage."""
        documents = await self.list_documents(project_id)
        validation = evaluate_documents(get_stage_requirements(stage.slug), documents)
        logger.debug(
            "documents_evaluated",
            project_id=str(project_id),
            stage=stage.slug,
            total_required=validation.summary.total_required,
            satisfied=validation.summary.satisfied,
            missing=validation.summary.missing,
            invalid=validation.summary.invalid,
        )
        return validation

    async def evaluate(self, project_id: uuid.UUID | str, target_stage_id: uuid.UUID | str) -> DocumentValidationResult:
        """Evaluate the project's documents against the target stage's requirements.

        Raises:
            NotFoundError: target stage does not exist
        """
        stage = await self._get_stage(target_stage_id)
        return await self.evaluate_for_stage(project_id, stage)

    async def can_advance_to_stage(self, project_id: uuid.UUID | str, target_stage_id: uuid.UUID | str) -> DocumentGate:
        """Whether missing or invalid required documents block the target stage."""
        validation = await self.evaluate(project_id, target_stage_id)
        return derive_document_gate(validation)

    async def get_project_document_status(self, project_id: uuid.UUID | str) -> list[StageDocumentStatus]:
        """Document status of the project against every registered stage."""
        documents = await self.list_documents(project_id)
        statuses = []
        for stage in await self.registry.get_workflow_stages():
            requirements = get_stage_requirements(stage.slug)
            validation = evaluate_documents(requirements, documents)
            statuses.append(
                StageDocumentStatus(
                    stage_id=stage.id,
                    stage_name=stage.name,
                    requirements=requirements,
                    validation=validation,
                    completion_percentage=completion_percentage(validation),
                )
            )
        return statuses

    async def requirements_by_group(self, stage_id: uuid.UUID | str) -> dict[str, list[DocumentRequirement]]:
        return group_requirements(await self.get_stage_requirements(stage_id))
