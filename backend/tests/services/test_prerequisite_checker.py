"""Integration tests for PrerequisiteChecker."""

from datetime import UTC, datetime

import pytest

from stagegate.domain.checks import CheckCategory, CheckStatus
from stagegate.services.approvals import ApprovalService
from stagegate.services.document_requirements import DocumentRequirementService
from stagegate.services.prerequisite_checker import PrerequisiteChecker

pytestmark = pytest.mark.integration

NOW = datetime(2026, 10, 1, tzinfo=UTC)


class BrokenDocumentService:
    """Stands in for a document store that is down."""

    async def evaluate_for_stage(self, project_id, stage):
        raise ConnectionError("document store unreachable")

    async def list_documents(self, project_id, category=None):
        raise ConnectionError("document store unreachable")


@pytest.fixture
def checker(session_factory) -> PrerequisiteChecker:
    return PrerequisiteChecker(
        DocumentRequirementService(session_factory),
        ApprovalService(session_factory),
        clock=lambda: NOW,
    )


async def test_categories_run_in_order(checker, stages, make_project):
    project = await make_project(current_stage_id=stages["inquiry_received"].id)
    result = await checker.check_prerequisites(project, stages["technical_review"], stages["inquiry_received"])

    order = [c.category for c in result.checks]
    assert order == sorted(order, key=list(CheckCategory).index)
    assert {c.category for c in result.checks} == set(CheckCategory)


async def test_missing_documents_block(checker, stages, make_project):
    project = await make_project(current_stage_id=stages["inquiry_received"].id)
    result = await checker.check_prerequisites(project, stages["technical_review"], stages["inquiry_received"])

    assert result.required_passed is False
    assert result.blockers == ["RFQ Document", "Technical Drawings", "Bill of Materials"]
    assert len(result.errors) == 3


async def test_uploaded_documents_pass(checker, stages, make_project, add_document):
    project = await make_project(current_stage_id=stages["inquiry_received"].id)
    await add_document(project.id, "rfq")
    await add_document(project.id, "drawing", "housing.step")
    await add_document(project.id, "bom", "bom.xlsx")

    result = await checker.check_prerequisites(project, stages["technical_review"], stages["inquiry_received"])

    assert result.required_passed is True
    assert result.errors == []


async def test_pending_approval_is_warning_not_error(checker, stages, make_project, add_approval):
    project = await make_project(current_stage_id=stages["supplier_rfq_sent"].id)
    await add_approval(project.id, stages["quoted"].id, "sales")

    result = await checker.check_prerequisites(project, stages["quoted"], stages["supplier_rfq_sent"])
    [approval] = result.by_category(CheckCategory.APPROVALS)

    assert approval.status == CheckStatus.PENDING
    assert approval.message in result.warnings
    assert result.required_passed is False


async def test_failing_category_is_contained(session_factory, stages, make_project):
    checker = PrerequisiteChecker(BrokenDocumentService(), ApprovalService(session_factory), clock=lambda: NOW)
    project = await make_project(current_stage_id=stages["inquiry_received"].id)

    result = await checker.check_prerequisites(project, stages["technical_review"], stages["inquiry_received"])

    ids = [c.id for c in result.checks]
    assert "documents_unavailable" in ids
    assert "stage_specific_unavailable" in ids
    assert result.by_category(CheckCategory.PROJECT_DATA)
    assert result.required_passed is False
    unavailable = next(c for c in result.checks if c.id == "documents_unavailable")
    assert unavailable.category == CheckCategory.SYSTEM
    assert unavailable.details == "document store unreachable"


async def test_stage_without_rules_skips_document_listing(session_factory, stages, make_project):
    checker = PrerequisiteChecker(BrokenDocumentService(), ApprovalService(session_factory), clock=lambda: NOW)
    project = await make_project()

    result = await checker.check_prerequisites(project, stages["inquiry_received"])

    assert "stage_specific_unavailable" not in [c.id for c in result.checks]


async def test_missing_arguments_raise(checker, stages, make_project):
    project = await make_project()
    with pytest.raises(ValueError):
        await checker.check_prerequisites(project, None)
    with pytest.raises(ValueError):
        await checker.check_prerequisites(None, stages["quoted"])
