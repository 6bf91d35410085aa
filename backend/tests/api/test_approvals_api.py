"""API tests for approval requests."""

import uuid

import pytest

pytestmark = pytest.mark.integration


async def test_request_and_read_approvals(api_client, stages, make_project, sales_headers):
    project = await make_project()
    stage_id = stages["quoted"].id

    response = api_client.post(f"/api/projects/{project.id}/approvals/{stage_id}/request", headers=sales_headers)

    assert response.status_code == 201
    data = response.json()
    assert [a["approver_role"] for a in data["created"]] == ["sales"]
    assert data["created"][0]["requested_by"] == "user-sales"
    assert data["status"]["pending"] == 1

    status = api_client.get(f"/api/projects/{project.id}/approvals/{stage_id}", headers=sales_headers).json()
    assert status == {"total": 1, "pending": 1, "approved": 0, "rejected": 0, "is_complete": False}


async def test_request_for_unknown_project(api_client, stages, sales_headers):
    response = api_client.post(
        f"/api/projects/{uuid.uuid4()}/approvals/{stages['quoted'].id}/request", headers=sales_headers
    )
    assert response.status_code == 404
