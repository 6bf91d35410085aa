"""Tests for transition verdicts."""

import uuid

import pytest

from stagegate.core.exceptions import PreconditionError
from stagegate.domain.checks import CheckCategory, CheckStatus, PrerequisiteCheck, aggregate_checks
from stagegate.domain.stages import SequenceResult
from stagegate.domain.transitions import (
    TransitionState,
    compute_verdict,
    require_bypass_reason,
)

pytestmark = pytest.mark.unit

ALLOWED = SequenceResult(True)
BLOCKED = SequenceResult(False, "Cannot move backwards from Quoted to Technical Review")


def _check(check_id, status, required=True, category=CheckCategory.DOCUMENTS):
    return PrerequisiteCheck(
        id=check_id,
        category=category,
        name=check_id,
        description=f"{check_id} description",
        required=required,
        status=status,
    )


PASSING = aggregate_checks([_check("rfq", CheckStatus.PASSED)])
FAILING = aggregate_checks([_check("rfq", CheckStatus.FAILED)])


class TestComputeVerdict:
    def test_all_clear_is_valid(self):
        verdict = compute_verdict(ALLOWED, PASSING, bypass_allowed=False, approvals_required=False)
        assert verdict.is_valid is True
        assert verdict.can_proceed is True
        assert verdict.requires_bypass is False
        assert verdict.state == TransitionState.VALID

    def test_failed_required_check_without_bypass(self):
        verdict = compute_verdict(ALLOWED, FAILING, bypass_allowed=False, approvals_required=False)
        assert verdict.is_valid is False
        assert verdict.can_proceed is False
        assert verdict.requires_bypass is False
        assert verdict.errors == ["rfq: rfq description"]
        assert verdict.state == TransitionState.INVALID

    def test_failed_required_check_with_bypass(self):
        verdict = compute_verdict(ALLOWED, FAILING, bypass_allowed=True, approvals_required=False)
        assert verdict.is_valid is False
        assert verdict.can_proceed is True
        assert verdict.requires_bypass is True

    def test_valid_transition_never_requires_bypass(self):
        verdict = compute_verdict(ALLOWED, PASSING, bypass_allowed=True, approvals_required=False)
        assert verdict.requires_bypass is False

    def test_sequence_reason_is_first_error(self):
        verdict = compute_verdict(BLOCKED, FAILING, bypass_allowed=False, approvals_required=False)
        assert verdict.errors[0] == BLOCKED.reason
        assert len(verdict.errors) == 2

    def test_sequence_failure_invalidates_despite_passing_checks(self):
        verdict = compute_verdict(BLOCKED, PASSING, bypass_allowed=True, approvals_required=False)
        assert verdict.is_valid is False
        assert verdict.requires_bypass is True

    def test_pending_approval_requires_approval(self):
        prerequisites = aggregate_checks(
            [_check("approval_sales", CheckStatus.PENDING, category=CheckCategory.APPROVALS)]
        )
        verdict = compute_verdict(ALLOWED, prerequisites, bypass_allowed=True, approvals_required=True)
        assert verdict.requires_approval is True
        assert verdict.requires_bypass is True

    def test_approvals_not_required_stage(self):
        prerequisites = aggregate_checks(
            [_check("approval_sales", CheckStatus.PENDING, category=CheckCategory.APPROVALS)]
        )
        verdict = compute_verdict(ALLOWED, prerequisites, bypass_allowed=False, approvals_required=False)
        assert verdict.requires_approval is False

    def test_repeated_computation_is_equal(self):
        first = compute_verdict(ALLOWED, FAILING, bypass_allowed=True, approvals_required=False)
        second = compute_verdict(ALLOWED, FAILING, bypass_allowed=True, approvals_required=False)
        assert first == second


class TestRequireBypassReason:
    def test_not_needed(self):
        verdict = compute_verdict(ALLOWED, PASSING, bypass_allowed=True, approvals_required=False)
        assert require_bypass_reason(verdict, None) is None

    def test_reason_is_stripped(self):
        verdict = compute_verdict(ALLOWED, FAILING, bypass_allowed=True, approvals_required=False)
        assert require_bypass_reason(verdict, "  customer escalation ") == "customer escalation"

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_blank_reason_rejected(self, reason):
        verdict = compute_verdict(ALLOWED, FAILING, bypass_allowed=True, approvals_required=False)
        with pytest.raises(PreconditionError):
            require_bypass_reason(verdict, reason)


class TestVerdictAppliesTo:
    PROJECT = uuid.uuid4()
    CURRENT = uuid.uuid4()
    TARGET = uuid.uuid4()

    def _verdict(self):
        return compute_verdict(
            ALLOWED,
            PASSING,
            bypass_allowed=False,
            approvals_required=False,
            project_id=self.PROJECT,
            target_stage_id=self.TARGET,
            current_stage_id=self.CURRENT,
            user_id="user-1",
        )

    def test_same_move(self):
        assert self._verdict().applies_to(self.PROJECT, self.TARGET, self.CURRENT, "user-1") is True

    def test_other_target(self):
        assert self._verdict().applies_to(self.PROJECT, uuid.uuid4(), self.CURRENT, "user-1") is False

    def test_project_moved_since(self):
        assert self._verdict().applies_to(self.PROJECT, self.TARGET, uuid.uuid4(), "user-1") is False

    def test_other_project_or_user(self):
        verdict = self._verdict()
        assert verdict.applies_to(uuid.uuid4(), self.TARGET, self.CURRENT, "user-1") is False
        assert verdict.applies_to(self.PROJECT, self.TARGET, self.CURRENT, "user-2") is False

    def test_unbound_verdict_never_applies(self):
        verdict = compute_verdict(ALLOWED, PASSING, bypass_allowed=False, approvals_required=False)
        assert verdict.applies_to(self.PROJECT, self.TARGET, None, "user-1") is False
