"""Approval evaluation for stage gates.

Pure domain logic with no external dependencies. Approvals are any objects
exposing ``approver_role``, ``status``, ``due_date`` and ``created_at``.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from stagegate.domain.checks import CheckCategory, CheckStatus, PrerequisiteCheck
from stagegate.domain.history import ensure_utc

_EPOCH = datetime.min.replace(tzinfo=UTC)


class ApprovalStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class ApprovalSummary:
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.approved == self.total


def latest_by_role(approvals: Iterable) -> dict[str, object]:
    """Most recent approval per role; later requests supersede earlier ones."""
    latest: dict[str, object] = {}
    for approval in sorted(approvals, key=lambda a: ensure_utc(a.created_at) or _EPOCH):
        latest[approval.approver_role] = approval
    return latest


def summarize_approvals(approvals: Iterable) -> ApprovalSummary:
    summary = ApprovalSummary()
    for approval in latest_by_role(approvals).values():
        summary.total += 1
        if approval.status == ApprovalStatus.APPROVED:
            summary.approved += 1
        elif approval.status == ApprovalStatus.REJECTED:
            summary.rejected += 1
        else:
            summary.pending += 1
    return summary


def _role_label(role: str) -> str:
    return role.replace("_", " ").title()


def evaluate_approvals(stage, approvals: Iterable, now: datetime) -> list[PrerequisiteCheck]:
    """Approval checks for entering ``stage``.

    Rules:
        - Stages without required_approvals yield one optional passed check
        - Otherwise one required check per approval role (the stage's
          approval_roles, or the roles already requested when it lists none)
        - approved -> passed, rejected -> failed
        - pending or never requested -> pending, unless past due -> failed
    """
    if not stage.required_approvals:
        return [
            PrerequisiteCheck(
                id="approvals_not_required",
                category=CheckCategory.APPROVALS,
                name="Approvals",
                description=f"{stage.name} does not require approvals",
                required=False,
                status=CheckStatus.PASSED,
            )
        ]

    latest = latest_by_role(approvals)
    roles = list(stage.approval_roles or []) or sorted(latest)

    if not roles:
        return [
            PrerequisiteCheck(
                id="approvals_unassigned",
                category=CheckCategory.APPROVALS,
                name="Stage approval",
                description=f"{stage.name} requires approval",
                required=True,
                status=CheckStatus.PENDING,
                details="No approvers have been requested yet",
            )
        ]

    now = ensure_utc(now)
    checks = []
    for role in roles:
        label = _role_label(role)
        approval = latest.get(role)
        details = None

        if approval is None:
            status = CheckStatus.PENDING
            details = "Approval has not been requested"
        elif approval.status == ApprovalStatus.APPROVED:
            status = CheckStatus.PASSED
        elif approval.status == ApprovalStatus.REJECTED:
            status = CheckStatus.FAILED
            details = getattr(approval, "comments", None) or "Approval was rejected"
        else:
            due = ensure_utc(approval.due_date)
            if due is not None and due < now:
                status = CheckStatus.FAILED
                details = f"Approval overdue since {due.date().isoformat()}"
            else:
                status = CheckStatus.PENDING
                details = "Awaiting decision"

        checks.append(
            PrerequisiteCheck(
                id=f"approval_{role}",
                category=CheckCategory.APPROVALS,
                name=f"{label} approval",
                description=f"{label} must approve entry into {stage.name}",
                required=True,
                status=status,
                details=details,
            )
        )
    return checks
