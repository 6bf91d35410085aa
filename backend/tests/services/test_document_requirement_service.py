"""Integration tests for DocumentRequirementService."""

import uuid

import pytest

from stagegate.core.exceptions import NotFoundError
from stagegate.services.document_requirements import DocumentRequirementService

pytestmark = pytest.mark.integration


@pytest.fixture
def service(session_factory) -> DocumentRequirementService:
    return DocumentRequirementService(session_factory)


async def test_list_documents_filters_category_and_status(service, make_project, add_document):
    project = await make_project()
    await add_document(project.id, "rfq")
    await add_document(project.id, "bom", "bom.csv")
    await add_document(project.id, "rfq", "old.pdf", status="archived")

    assert len(await service.list_documents(project.id)) == 2
    assert [d.file_name for d in await service.list_documents(project.id, category="rfq")] == ["rfq.pdf"]


async def test_can_advance_reports_blockers(service, stages, make_project, add_document):
    project = await make_project()
    await add_document(project.id, "rfq")

    gate = await service.can_advance_to_stage(project.id, stages["technical_review"].id)

    assert gate.can_advance is False
    assert gate.blockers == [
        "Missing required document: Technical Drawings",
        "Missing required document: Bill of Materials",
    ]


async def test_stage_with_only_optional_documents_can_advance(service, stages, make_project):
    project = await make_project()
    gate = await service.can_advance_to_stage(project.id, stages["procurement_planning"].id)

    assert gate.can_advance is True
    assert len(gate.warnings) == 2


async def test_invalid_file_type_blocks(service, stages, make_project, add_document):
    project = await make_project()
    await add_document(project.id, "rfq", "rfq.exe")

    gate = await service.can_advance_to_stage(project.id, stages["inquiry_received"].id)

    assert gate.can_advance is False
    assert gate.blockers[0].startswith("Invalid RFQ Document: invalid file type")


async def test_unknown_stage_raises(service, stages, make_project):
    project = await make_project()
    with pytest.raises(NotFoundError):
        await service.evaluate(project.id, uuid.uuid4())


async def test_project_document_status_covers_every_stage(service, stages, make_project, add_document):
    project = await make_project()
    await add_document(project.id, "rfq")

    statuses = await service.get_project_document_status(project.id)

    assert [s.stage_name for s in statuses] == [s.name for s in stages.values()]
    by_name = {s.stage_name: s.completion_percentage for s in statuses}
    assert by_name["Inquiry Received"] == 100
    assert by_name["Technical Review"] == 33
    assert by_name["Procurement Planning"] == 100


async def test_requirements_by_group(service, stages):
    groups = await service.requirements_by_group(stages["quoted"].id)
    assert list(groups) == ["Commercial Documents", "Supplier Documents"]
