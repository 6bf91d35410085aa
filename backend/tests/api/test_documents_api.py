"""API tests for project document requirement endpoints."""

import pytest

pytestmark = pytest.mark.integration


async def test_can_advance(api_client, stages, make_project, add_document, sales_headers):
    project = await make_project()
    await add_document(project.id, "rfq")
    target = stages["technical_review"].id

    response = api_client.get(f"/api/projects/{project.id}/documents/can-advance/{target}", headers=sales_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["can_advance"] is False
    assert data["blockers"] == [
        "Missing required document: Technical Drawings",
        "Missing required document: Bill of Materials",
    ]


async def test_document_status(api_client, stages, make_project, add_document, sales_headers):
    project = await make_project()
    await add_document(project.id, "rfq")

    response = api_client.get(f"/api/projects/{project.id}/documents/status", headers=sales_headers)

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 8
    assert data[0]["completion_percentage"] == 100
    assert data[1]["completion_percentage"] == 33
