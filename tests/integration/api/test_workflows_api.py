from uuid import uuid4

import pytest
from httpx import AsyncClient

from src.app.services.credit_ledger import INSUFFICIENT_CREDIT_MESSAGE


async def _create_workflow(client, headers, subject_id="emp-1", kind="onboarding"):
    response = await client.post(
        "/workflows", json={"kind": kind, "subject_id": subject_id}, headers=headers
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_activation_without_credit(client: AsyncClient, user_headers):
    """Activate with an empty balance

    Given my tenant has no credits
    When I activate a draft workflow
    Then I get 402 with a message telling me to purchase credits
    And the workflow stays a draft
    """
    workflow = await _create_workflow(client, user_headers)

    response = await client.post(
        f"/workflows/{workflow['workflow_id']}/activate", headers=user_headers
    )

    assert response.status_code == 402
    assert response.json()["error"] == {
        "code": "INSUFFICIENT_CREDIT",
        "message": INSUFFICIENT_CREDIT_MESSAGE,
    }
    current = await client.get(f"/workflows/{workflow['workflow_id']}", headers=user_headers)
    assert current.json()["status"] == "draft"
    assert current.json()["credit_transaction_id"] is None


@pytest.mark.asyncio
async def test_activation_consumes_exactly_one_credit(
    client: AsyncClient, user_headers, superuser_headers
):
    await client.post("/credits/purchase", json={"amount": 2}, headers=superuser_headers)
    workflow = await _create_workflow(client, user_headers)
    path = f"/workflows/{workflow['workflow_id']}"

    activated = await client.post(f"{path}/activate", headers=user_headers)
    assert activated.status_code == 200
    assert activated.json()["status"] == "active"
    assert activated.json()["credit_transaction_id"] is not None
    assert activated.json()["activated_at"] is not None

    retry = await client.post(f"{path}/activate", headers=user_headers)
    assert retry.status_code == 409
    assert retry.json()["error"]["code"] == "ALREADY_CONSUMED"

    balance = (await client.get("/credits/balance", headers=user_headers)).json()
    assert balance["used"] == 1
    assert balance["available"] == 1
    assert balance["balance_status"] == "critical"

    history = (await client.get("/credits/transactions", headers=user_headers)).json()
    usage = [tx for tx in history["transactions"] if tx["kind"] == "usage"]
    assert len(usage) == 1
    assert usage[0]["transaction_id"] == activated.json()["credit_transaction_id"]
    assert usage[0]["workflow_id"] == workflow["workflow_id"]


@pytest.mark.asyncio
async def test_completion_and_cancellation_do_not_refund(
    client: AsyncClient, user_headers, superuser_headers
):
    await client.post("/credits/purchase", json={"amount": 1}, headers=superuser_headers)
    workflow = await _create_workflow(client, user_headers)
    path = f"/workflows/{workflow['workflow_id']}"
    await client.post(f"{path}/activate", headers=user_headers)

    cancelled = await client.post(f"{path}/cancel", headers=user_headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"

    complete = await client.post(f"{path}/complete", headers=user_headers)
    assert complete.status_code == 409
    assert complete.json()["error"]["code"] == "INVALID_TRANSITION"

    balance = (await client.get("/credits/balance", headers=user_headers)).json()
    assert balance["used"] == 1
    assert balance["available"] == 0


@pytest.mark.asyncio
async def test_cancelled_draft_consumes_nothing(
    client: AsyncClient, user_headers, superuser_headers
):
    await client.post("/credits/purchase", json={"amount": 1}, headers=superuser_headers)
    workflow = await _create_workflow(client, user_headers)
    path = f"/workflows/{workflow['workflow_id']}"

    await client.post(f"{path}/cancel", headers=user_headers)
    activate = await client.post(f"{path}/activate", headers=user_headers)

    assert activate.status_code == 409
    assert activate.json()["error"]["code"] == "INVALID_TRANSITION"
    balance = (await client.get("/credits/balance", headers=user_headers)).json()
    assert balance["available"] == 1


@pytest.mark.asyncio
async def test_activation_from_reservation(client: AsyncClient, user_headers, superuser_headers):
    await client.post("/credits/purchase", json={"amount": 1}, headers=superuser_headers)
    await client.post("/credits/reserve", json={"amount": 1}, headers=superuser_headers)
    workflow = await _create_workflow(client, user_headers)
    path = f"/workflows/{workflow['workflow_id']}/activate"

    from_available = await client.post(path, headers=user_headers)
    assert from_available.status_code == 402

    from_reserved = await client.post(path, json={"from_reservation": True}, headers=user_headers)
    assert from_reserved.status_code == 200

    balance = (await client.get("/credits/balance", headers=user_headers)).json()
    assert (balance["used"], balance["reserved"], balance["available"]) == (1, 0, 0)


@pytest.mark.asyncio
async def test_cross_tenant_workflow_access_is_denied(
    client: AsyncClient, user_headers, superuser_headers, headers_for
):
    await client.post("/credits/purchase", json={"amount": 1}, headers=superuser_headers)
    workflow = await _create_workflow(client, user_headers)
    path = f"/workflows/{workflow['workflow_id']}"
    intruder = headers_for(uuid4(), superuser=True)

    read = await client.get(path, headers=intruder)
    activate = await client.post(f"{path}/activate", headers=intruder)
    cancel = await client.post(f"{path}/cancel", headers=intruder)

    assert read.status_code == 403
    assert activate.status_code == 403
    assert cancel.status_code == 403
    assert read.json()["error"]["message"] == activate.json()["error"]["message"]
    # Denied requests leave the victim's workflow and credits untouched
    current = (await client.get(path, headers=user_headers)).json()
    assert current["status"] == "draft"


@pytest.mark.asyncio
async def test_unknown_workflow(client: AsyncClient, user_headers):
    response = await client.post(f"/workflows/{uuid4()}/activate", headers=user_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "WORKFLOW_NOT_FOUND"


@pytest.mark.asyncio
async def test_list_workflows_by_status(client: AsyncClient, user_headers, superuser_headers):
    await client.post("/credits/purchase", json={"amount": 1}, headers=superuser_headers)
    first = await _create_workflow(client, user_headers, subject_id="emp-1")
    await _create_workflow(client, user_headers, subject_id="emp-2", kind="offboarding")
    await client.post(f"/workflows/{first['workflow_id']}/activate", headers=user_headers)

    drafts = await client.get("/workflows", params={"status": "draft"}, headers=user_headers)
    active = await client.get("/workflows", params={"status": "active"}, headers=user_headers)

    assert [w["subject_id"] for w in drafts.json()["workflows"]] == ["emp-2"]
    assert [w["subject_id"] for w in active.json()["workflows"]] == ["emp-1"]
