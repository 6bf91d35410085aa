"""StageTransitionService: validates and confirms stage transitions.

Validation merges the sequence check, the prerequisite checker and the
caller's bypass capability into a Verdict. Confirmation moves the project
and then records history. The stage change and the history write are
separate units of work: a failed history write leaves the stage change in
place and comes back as a warning on the outcome.
"""

import uuid

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stagegate.core.auth import Actor
from stagegate.core.config import Settings
from stagegate.core.exceptions import NotFoundError, PermissionDenied, PersistenceError, PreconditionError
from stagegate.core.ids import parse_uuid
from stagegate.db.models.project import Project
from stagegate.domain.stages import SequenceResult, check_sequence
from stagegate.domain.transitions import (
    TransitionOutcome,
    TransitionState,
    Verdict,
    compute_verdict,
    require_bypass_reason,
)
from stagegate.services.approvals import ApprovalService
from stagegate.services.document_requirements import DocumentRequirementService
from stagegate.services.permissions import BYPASS, SKIP_STAGES, WORKFLOW, PermissionChecker, RolePermissionChecker
from stagegate.services.prerequisite_checker import PrerequisiteChecker
from stagegate.services.stage_history import StageHistoryLedger
from stagegate.services.stage_registry import StageRegistry

logger = structlog.get_logger(__name__)


class StageTransitionService:
    """Service layer for stage transitions.

    Stateless apart from its collaborators: a verdict is returned to the
    caller, who may hand it back to ``confirm_transition``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: StageRegistry,
        checker: PrerequisiteChecker,
        ledger: StageHistoryLedger,
        permissions: PermissionChecker,
    ):
        self.session_factory = session_factory
        self.registry = registry
        self.checker = checker
        self.ledger = ledger
        self.permissions = permissions

    @classmethod
    def build(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        permissions: PermissionChecker | None = None,
        settings: Settings | None = None,
    ) -> "StageTransitionService":
        """Wire the default collaborators around one session factory."""
        registry = StageRegistry(session_factory)
        checker = PrerequisiteChecker(
            DocumentRequirementService(session_factory, registry),
            ApprovalService(session_factory, settings),
        )
        return cls(
            session_factory,
            registry,
            checker,
            StageHistoryLedger(session_factory),
            permissions or RolePermissionChecker(),
        )

    async def _load_project(self, project_id: uuid.UUID) -> Project:
        async with self.session_factory() as session:
            project = await session.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def validate_transition(
        self, project_id: uuid.UUID | str, target_stage_id: uuid.UUID | str, actor: Actor
    ) -> Verdict:
        """Decide whether ``actor`` may move the project into the target stage.

        Raises:
            ValueError: target_stage_id missing
            NotFoundError: project or target stage does not exist
        """
        if target_stage_id is None:
            raise ValueError("target_stage_id is required")

        project_uuid = parse_uuid(project_id, "Project")
        log = logger.bind(project_id=str(project_uuid), target_stage_id=str(target_stage_id), user_id=actor.user_id)
        log.debug("transition_state", state=TransitionState.VALIDATING.value)

        project = await self._load_project(project_uuid)
        target = await self.registry.get_workflow_stage_by_id(target_stage_id)
        if target is None:
            raise NotFoundError("WorkflowStage", target_stage_id)

        current = None
        if project.current_stage_id is not None:
            current = await self.registry.get_workflow_stage_by_id(project.current_stage_id)

        if project.current_stage_id is not None and current is None:
            sequence = SequenceResult(False, "Current stage no longer exists in the workflow")
        else:
            can_skip = await self.permissions.check_permission(actor, WORKFLOW, SKIP_STAGES)
            sequence = check_sequence(
                current, target, await self.registry.get_workflow_stages(), can_skip=can_skip.allowed
            )

        prerequisites = await self.checker.check_prerequisites(project, target, current)
        bypass = await self.permissions.check_permission(actor, WORKFLOW, BYPASS)

        verdict = compute_verdict(
            sequence,
            prerequisites,
            bypass_allowed=bypass.allowed,
            approvals_required=bool(target.required_approvals),
            project_id=project.id,
            target_stage_id=target.id,
            current_stage_id=project.current_stage_id,
            user_id=actor.user_id,
        )
        log.info(
            "transition_validated",
            state=verdict.state.value,
            from_stage=current.slug if current else None,
            to_stage=target.slug,
            sequence_allowed=sequence.allowed,
            can_proceed=verdict.can_proceed,
            requires_bypass=verdict.requires_bypass,
            requires_approval=verdict.requires_approval,
            errors=len(verdict.errors),
            warnings=len(verdict.warnings),
        )
        return verdict

    async def confirm_transition(
        self,
        project_id: uuid.UUID | str,
        target_stage_id: uuid.UUID | str,
        actor: Actor,
        *,
        reason: str | None = None,
        bypass_reason: str | None = None,
        verdict: Verdict | None = None,
    ) -> TransitionOutcome:
        """Move the project into the target stage and record it in history.

        Args:
            verdict: Verdict the caller is acting on. Recomputed when omitted,
                or when it was computed for another project, target stage,
                user or starting stage

        Returns:
            TransitionOutcome in the committed state, with warnings if the
            history entry could not be written

        Raises:
            PermissionDenied: the verdict does not allow proceeding
            PreconditionError: a bypass is needed and bypass_reason is blank,
                or the project changed stage while the move was being saved
            PersistenceError: the stage change itself could not be saved
        """
        project_uuid = parse_uuid(project_id, "Project")
        target_uuid = parse_uuid(target_stage_id, "WorkflowStage")
        log = logger.bind(project_id=str(project_uuid), target_stage_id=str(target_uuid), user_id=actor.user_id)

        if verdict is not None:
            current_stage_id = (await self._load_project(project_uuid)).current_stage_id
            if not verdict.applies_to(project_uuid, target_uuid, current_stage_id, actor.user_id):
                log.info(
                    "transition_verdict_revalidated",
                    current_stage_id=str(current_stage_id) if current_stage_id else None,
                )
                verdict = None
        if verdict is None:
            verdict = await self.validate_transition(project_uuid, target_uuid, actor)

        if not verdict.can_proceed:
            log.warning("transition_rejected", errors=verdict.errors)
            raise PermissionDenied(actor.user_id, WORKFLOW, BYPASS, "transition is blocked by failed prerequisites")

        # Also enforced by ConfirmTransitionRequest at the API boundary
        bypass_reason = require_bypass_reason(verdict, bypass_reason)
        bypass_used = bypass_reason is not None
        reason = reason or ("Manager bypass" if bypass_used else "Normal transition")

        log.info("transition_state", state=TransitionState.RECORDING.value, bypass=bypass_used)

        try:
            async with self.session_factory() as session:
                project = await session.get(Project, project_uuid, with_for_update=True)
                if project is None:
                    raise NotFoundError("Project", project_uuid)
                from_stage_id = project.current_stage_id
                if from_stage_id != verdict.current_stage_id:
                    raise PreconditionError("Project changed stage since the transition was validated")
                project.current_stage_id = target_uuid
                await session.commit()
        except SQLAlchemyError as e:
            log.error("transition_state", state=TransitionState.FAILED.value, error=str(e))
            raise PersistenceError(project_uuid, str(e)) from e

        outcome = TransitionOutcome(
            state=TransitionState.COMMITTED,
            project_id=project_uuid,
            from_stage_id=from_stage_id,
            to_stage_id=target_uuid,
            bypass_used=bypass_used,
        )

        try:
            outcome.history_entry = await self.ledger.record_transition(
                project_uuid,
                target_uuid,
                actor.user_id,
                from_stage_id=from_stage_id,
                reason=reason,
                bypass_required=bypass_used,
                bypass_reason=bypass_reason,
            )
        except PersistenceError as e:
            # Stage change stands; surface the missing history entry to the caller
            log.warning("transition_history_not_recorded", error=str(e))
            outcome.warnings.append(f"Stage changed, but the transition could not be recorded in history: {e.reason}")

        log.info(
            "transition_state",
            state=outcome.state.value,
            from_stage_id=str(from_stage_id) if from_stage_id else None,
            bypass=bypass_used,
            history_recorded=outcome.history_entry is not None,
        )
        return outcome
