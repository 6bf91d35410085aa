"""Tests for approval evaluation."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest

from stagegate.domain.approvals import evaluate_approvals, latest_by_role, summarize_approvals
from stagegate.domain.checks import CheckStatus

pytestmark = pytest.mark.unit

NOW = datetime(2026, 10, 10, 12, 0, tzinfo=UTC)


def _stage(required=True, roles=("sales",)):
    return SimpleNamespace(name="Quoted", required_approvals=required, approval_roles=list(roles))


def _approval(role, status="pending", created=NOW - timedelta(days=1), due=NOW + timedelta(days=2), comments=None):
    return SimpleNamespace(approver_role=role, status=status, created_at=created, due_date=due, comments=comments)


def test_stage_without_approvals_yields_optional_pass():
    [check] = evaluate_approvals(_stage(required=False), [], NOW)
    assert check.id == "approvals_not_required"
    assert check.required is False
    assert check.status == CheckStatus.PASSED


def test_never_requested_is_pending():
    [check] = evaluate_approvals(_stage(), [], NOW)
    assert check.id == "approval_sales"
    assert check.required is True
    assert check.status == CheckStatus.PENDING
    assert check.details == "Approval has not been requested"


def test_approved_passes():
    [check] = evaluate_approvals(_stage(), [_approval("sales", "approved")], NOW)
    assert check.status == CheckStatus.PASSED


def test_rejected_fails_with_comments():
    [check] = evaluate_approvals(_stage(), [_approval("sales", "rejected", comments="Margin too low")], NOW)
    assert check.status == CheckStatus.FAILED
    assert check.details == "Margin too low"


def test_overdue_pending_fails():
    overdue = _approval("sales", due=NOW - timedelta(days=1))
    [check] = evaluate_approvals(_stage(), [overdue], NOW)
    assert check.status == CheckStatus.FAILED
    assert check.details == "Approval overdue since 2026-10-09"


def test_naive_due_date_is_treated_as_utc():
    pending = _approval("sales", due=(NOW + timedelta(hours=1)).replace(tzinfo=None))
    [check] = evaluate_approvals(_stage(), [pending], NOW)
    assert check.status == CheckStatus.PENDING


def test_stage_without_roles_uses_requested_roles():
    checks = evaluate_approvals(_stage(roles=()), [_approval("qa", "approved")], NOW)
    assert [c.id for c in checks] == ["approval_qa"]


def test_stage_without_roles_or_requests_is_unassigned():
    [check] = evaluate_approvals(_stage(roles=()), [], NOW)
    assert check.id == "approvals_unassigned"
    assert check.status == CheckStatus.PENDING


def test_latest_request_supersedes_earlier_decision():
    approvals = [
        _approval("sales", "rejected", created=NOW - timedelta(days=3)),
        _approval("sales", "approved", created=NOW - timedelta(days=1)),
    ]
    assert latest_by_role(approvals)["sales"].status == "approved"
    [check] = evaluate_approvals(_stage(), approvals, NOW)
    assert check.status == CheckStatus.PASSED


def test_summary_counts_latest_per_role():
    approvals = [
        _approval("sales", "approved"),
        _approval("qa", "rejected"),
        _approval("management"),
    ]
    summary = summarize_approvals(approvals)
    assert (summary.total, summary.approved, summary.rejected, summary.pending) == (3, 1, 1, 1)
    assert summary.is_complete is False
