"""PrerequisiteChecker: evaluates the five check categories for a target stage.

Each category runs in isolation. A category that raises is logged and
replaced by a single failed system check, so callers always get a result.
"""

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from stagegate.core.exceptions import CategoryEvaluationError
from stagegate.domain.approvals import evaluate_approvals
from stagegate.domain.checks import CheckCategory, PrerequisiteCheck, PrerequisiteResult, aggregate_checks, unavailable_check
from stagegate.domain.documents import document_checks
from stagegate.domain.project_data import evaluate_project_data
from stagegate.domain.stage_rules import StageRuleContext, evaluate_stage_rules, rules_for
from stagegate.domain.stages import system_checks
from stagegate.services.approvals import ApprovalService
from stagegate.services.document_requirements import DocumentRequirementService

logger = structlog.get_logger(__name__)


class PrerequisiteChecker:
    def __init__(
        self,
        documents: DocumentRequirementService,
        approvals: ApprovalService,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize with collaborators.

        Args:
            documents: Document requirement evaluator
            approvals: Approval reads
            clock: Returns "now"; used for approval deadlines
        """
        self.documents = documents
        self.approvals = approvals
        self.clock = clock or (lambda: datetime.now(UTC))

    async def check_prerequisites(self, project, target_stage, current_stage=None) -> PrerequisiteResult:
        """Run every category for moving ``project`` into ``target_stage``.

        Raises:
            ValueError: project or target_stage is missing
        """
        if project is None:
            raise ValueError("project is required")
        if target_stage is None:
            raise ValueError("target_stage is required")

        evaluators = (
            (CheckCategory.PROJECT_DATA, self._project_data_checks),
            (CheckCategory.DOCUMENTS, self._document_checks),
            (CheckCategory.APPROVALS, self._approval_checks),
            (CheckCategory.STAGE_SPECIFIC, self._stage_specific_checks),
            (CheckCategory.SYSTEM, self._system_checks),
        )

        checks: list[PrerequisiteCheck] = []
        for category, evaluate in evaluators:
            try:
                checks.extend(await evaluate(project, target_stage, current_stage))
            except Exception as e:
                error = CategoryEvaluationError(category.value, str(e) or type(e).__name__)
                logger.warning(
                    "prerequisite_category_failed",
                    category=category.value,
                    project_id=str(project.id),
                    target_stage=target_stage.slug,
                    error=str(error),
                    error_type=type(e).__name__,
                )
                checks.append(unavailable_check(category, error.reason))

        result = aggregate_checks(checks)
        logger.info(
            "prerequisites_checked",
            project_id=str(project.id),
            target_stage=target_stage.slug,
            checks=len(result.checks),
            required_passed=result.required_passed,
            errors=len(result.errors),
            warnings=len(result.warnings),
        )
        return result

    async def _project_data_checks(self, project, target_stage, current_stage):
        return evaluate_project_data(project, target_stage.stage_order)

    async def _document_checks(self, project, target_stage, current_stage):
        validation = await self.documents.evaluate_for_stage(project.id, target_stage)
        return document_checks(validation)

    async def _approval_checks(self, project, target_stage, current_stage):
        approvals = []
        if target_stage.required_approvals:
            approvals = await self.approvals.get_stage_approvals(project.id, target_stage.id)
        return evaluate_approvals(target_stage, approvals, self.clock())

    async def _stage_specific_checks(self, project, target_stage, current_stage):
        if not rules_for(target_stage.slug):
            return []
        ctx = StageRuleContext(
            project=project,
            target_stage=target_stage,
            current_stage=current_stage,
            documents=await self.documents.list_documents(project.id),
            approvals=await self.approvals.get_project_approvals(project.id),
        )
        return evaluate_stage_rules(ctx)

    async def _system_checks(self, project, target_stage, current_stage):
        return system_checks(project, target_stage, current_stage)
