import pytest
from httpx import AsyncClient
from datetime import datetime


@pytest.mark.asyncio
async def test_superuser_views_audit_log(client: AsyncClient, user_headers, superuser_headers):
    """View the tenant audit log

    Given I am authenticated as a tenant superuser
    When I request audit events for my tenant
    Then I receive the events of my tenant, newest first
    And each event includes action, actor_id, timestamp, metadata
    And I receive a next_cursor for pagination if more events exist
    """
    for subject in ("emp-1", "emp-2", "emp-3"):
        await client.post(
            "/workflows",
            json={"kind": "onboarding", "subject_id": subject},
            headers=user_headers,
        )

    response = await client.get(
        "/audit/events", params={"limit": 2}, headers=superuser_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data["events"]) == 2
    assert data["next_cursor"] is not None

    event = data["events"][0]
    assert event["action"] == "workflow_created"
    assert "actor_id" in event
    assert "timestamp" in event
    assert event["metadata"]["kind"] == "onboarding"

    first_timestamp = datetime.fromisoformat(data["events"][0]["timestamp"].replace("Z", "+00:00"))
    second_timestamp = datetime.fromisoformat(data["events"][1]["timestamp"].replace("Z", "+00:00"))
    assert first_timestamp >= second_timestamp

    rest = await client.get(
        "/audit/events",
        params={"limit": 2, "cursor": data["next_cursor"]},
        headers=superuser_headers,
    )
    assert len(rest.json()["events"]) == 1
    assert rest.json()["next_cursor"] is None


@pytest.mark.asyncio
async def test_plain_user_cannot_view_audit_log(client: AsyncClient, user_headers):
    response = await client.get("/audit/events", headers=user_headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "AUTHORIZATION_DENIED"


@pytest.mark.asyncio
async def test_audit_log_is_tenant_scoped(
    client: AsyncClient, user_headers, superuser_headers, headers_for
):
    from uuid import uuid4

    await client.post(
        "/workflows", json={"kind": "onboarding", "subject_id": "emp-1"}, headers=user_headers
    )

    other = await client.get("/audit/events", headers=headers_for(uuid4(), superuser=True))

    assert other.status_code == 200
    assert other.json()["events"] == []


@pytest.mark.asyncio
async def test_audit_log_filters_by_action(client: AsyncClient, user_headers, superuser_headers):
    created = await client.post(
        "/workflows", json={"kind": "onboarding", "subject_id": "emp-1"}, headers=user_headers
    )
    await client.post(f"/workflows/{created.json()['workflow_id']}/cancel", headers=user_headers)
    # Denied read by a plain user adds an authorization_denied event
    await client.get("/audit/events", headers=user_headers)

    response = await client.get(
        "/audit/events",
        params={"action": "authorization_denied"},
        headers=superuser_headers,
    )

    assert response.status_code == 200
    actions = {event["action"] for event in response.json()["events"]}
    assert actions == {"authorization_denied"}


@pytest.mark.asyncio
async def test_unreadable_cursor_restarts_from_newest(
    client: AsyncClient, user_headers, superuser_headers
):
    await client.post(
        "/workflows", json={"kind": "onboarding", "subject_id": "emp-1"}, headers=user_headers
    )

    response = await client.get(
        "/audit/events", params={"cursor": "not-a-cursor"}, headers=superuser_headers
    )

    assert response.status_code == 200
    assert len(response.json()["events"]) == 1
