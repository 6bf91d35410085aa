"""StageHistoryLedger: append-only record of the stages a project has occupied.

Each project has at most one open entry (exited_at IS NULL); the partial
unique index on stage_history_entries enforces it. Recording a transition
closes the open entry and opens the next one in a single transaction.
"""

import uuid
from datetime import UTC, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stagegate.core.exceptions import ConcurrencyAnomaly, PersistenceError, PreconditionError
from stagegate.core.ids import parse_uuid
from stagegate.db.models.stage_history import StageHistoryEntry
from stagegate.db.models.workflow_stage import WorkflowStage
from stagegate.domain.history import TransitionStats, compute_transition_stats, days_in_stage, duration_minutes

logger = structlog.get_logger(__name__)


class StageHistoryLedger:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record_transition(
        self,
        project_id: uuid.UUID | str,
        to_stage_id: uuid.UUID | str,
        user_id: str,
        *,
        from_stage_id: uuid.UUID | str | None = None,
        reason: str | None = None,
        bypass_required: bool = False,
        bypass_reason: str | None = None,
        now: datetime | None = None,
    ) -> StageHistoryEntry:
        """Close the project's open entry and open one for ``to_stage_id``.

        The closed entry gets exited_at, duration_minutes and the new
        transition's reason as its exit_reason.

        Raises:
            PreconditionError: bypass_required without a bypass_reason
            PersistenceError: the write failed; nothing was recorded
        """
        if bypass_required and not (bypass_reason or "").strip():
            raise PreconditionError("A bypass reason is required for bypass transitions")

        project_uuid = parse_uuid(project_id, "Project")
        to_stage_uuid = parse_uuid(to_stage_id, "WorkflowStage")
        from_stage_uuid = parse_uuid(from_stage_id, "WorkflowStage") if from_stage_id is not None else None
        now = now or datetime.now(UTC)

        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(StageHistoryEntry)
                    .where(
                        StageHistoryEntry.project_id == project_uuid,
                        StageHistoryEntry.exited_at.is_(None),
                    )
                    .order_by(StageHistoryEntry.entered_at.desc())
                    .with_for_update()
                )
                open_entries = list(result.scalars().all())

                if len(open_entries) > 1:
                    anomaly = ConcurrencyAnomaly(project_uuid, [e.id for e in open_entries])
                    logger.error(
                        "stage_history_concurrency_anomaly",
                        project_id=str(project_uuid),
                        open_entry_ids=[str(e.id) for e in open_entries],
                        error=str(anomaly),
                    )

                if open_entries:
                    current = open_entries[0]
                    if from_stage_uuid is not None and current.to_stage_id != from_stage_uuid:
                        logger.warning(
                            "stage_history_from_stage_mismatch",
                            project_id=str(project_uuid),
                            open_stage_id=str(current.to_stage_id),
                            from_stage_id=str(from_stage_uuid),
                        )
                    current.exited_at = now
                    current.duration_minutes = duration_minutes(current.entered_at, now)
                    current.exit_reason = reason
                    # Close before insert so the open-entry index never sees two rows
                    await session.flush()

                entry = StageHistoryEntry(
                    project_id=project_uuid,
                    from_stage_id=from_stage_uuid,
                    to_stage_id=to_stage_uuid,
                    user_id=user_id,
                    entered_at=now,
                    bypass_required=bypass_required,
                    bypass_reason=bypass_reason.strip() if bypass_required else None,
                    reason=reason,
                )
                session.add(entry)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                "stage_history_write_failed",
                project_id=str(project_uuid),
                to_stage_id=str(to_stage_uuid),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceError(project_uuid, str(e)) from e

        logger.info(
            "stage_transition_recorded",
            project_id=str(project_uuid),
            from_stage_id=str(from_stage_uuid) if from_stage_uuid else None,
            to_stage_id=str(to_stage_uuid),
            user_id=user_id,
            bypass_required=bypass_required,
        )
        return entry

    async def get_history(self, project_id: uuid.UUID | str) -> list[StageHistoryEntry]:
        """All entries of a project, oldest first."""
        project_uuid = parse_uuid(project_id, "Project")
        async with self.session_factory() as session:
            result = await session.execute(
                select(StageHistoryEntry)
                .where(StageHistoryEntry.project_id == project_uuid)
                .order_by(StageHistoryEntry.entered_at)
            )
            return list(result.scalars().all())

    async def get_current_entry(self, project_id: uuid.UUID | str) -> StageHistoryEntry | None:
        project_uuid = parse_uuid(project_id, "Project")
        async with self.session_factory() as session:
            result = await session.execute(
                select(StageHistoryEntry)
                .where(
                    StageHistoryEntry.project_id == project_uuid,
                    StageHistoryEntry.exited_at.is_(None),
                )
                .order_by(StageHistoryEntry.entered_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def days_in_current_stage(self, project_id: uuid.UUID | str, now: datetime | None = None) -> int | None:
        """Whole days since the open entry was entered, or None without history."""
        entry = await self.get_current_entry(project_id)
        if entry is None:
            return None
        return days_in_stage(entry.entered_at, now or datetime.now(UTC))

    async def get_transition_stats(
        self, since: datetime | None = None, until: datetime | None = None
    ) -> TransitionStats:
        """Transition counts, bypasses and average dwell time per stage."""
        async with self.session_factory() as session:
            query = select(StageHistoryEntry)
            if since is not None:
                query = query.where(StageHistoryEntry.entered_at >= since)
            if until is not None:
                query = query.where(StageHistoryEntry.entered_at <= until)
            entries = (await session.execute(query)).scalars().all()

            stages = await session.execute(select(WorkflowStage.id, WorkflowStage.name))
            stage_names = {row.id: row.name for row in stages}

        return compute_transition_stats(entries, stage_names)

    async def get_recent_transitions(self, limit: int = 10) -> list[StageHistoryEntry]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(StageHistoryEntry).order_by(StageHistoryEntry.entered_at.desc()).limit(limit)
            )
            return list(result.scalars().all())
