from uuid import uuid4

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_quote_tiers(client: AsyncClient):
    individual = await client.get("/credits/quote", params={"quantity": 10})
    bulk = await client.get("/credits/quote", params={"quantity": 2500})
    invalid = await client.get("/credits/quote", params={"quantity": 0})

    assert individual.json()["unit_price"] == "150.00"
    assert individual.json()["total"] == "1500.00"
    assert bulk.json()["pricing_tier"] == "bulk_tier_2"
    assert bulk.json()["unit_price"] == "105.00"
    assert invalid.status_code == 400


@pytest.mark.asyncio
async def test_purchase_and_read_balance(
    client: AsyncClient, tenant_id, user_headers, superuser_headers
):
    """Purchase credits

    Given I am a tenant superuser
    When I buy 500 credits
    Then the bulk tier 1 price applies
    And any user of my tenant sees 500 available credits
    """
    response = await client.post(
        "/credits/purchase", json={"amount": 500}, headers=superuser_headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["transaction"]["pricing_tier"] == "bulk_tier_1"
    assert data["transaction"]["unit_price"] == "112.50"
    assert data["transaction"]["total_amount"] == "56250.00"
    assert data["balance"]["available"] == 500

    balance = await client.get("/credits/balance", headers=user_headers)
    assert balance.status_code == 200
    assert balance.json() == {
        "tenant_id": str(tenant_id),
        "purchased": 500,
        "used": 0,
        "reserved": 0,
        "current": 500,
        "available": 500,
        "balance_status": "healthy",
    }

    history = await client.get("/credits/transactions", headers=user_headers)
    assert [tx["kind"] for tx in history.json()["transactions"]] == ["purchase"]


@pytest.mark.asyncio
async def test_plain_user_cannot_purchase(client: AsyncClient, user_headers):
    response = await client.post("/credits/purchase", json={"amount": 5}, headers=user_headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "AUTHORIZATION_DENIED"


@pytest.mark.asyncio
async def test_tenant_callers_cannot_read_other_tenants(
    client: AsyncClient, tenant_id, headers_for, superuser_headers
):
    await client.post("/credits/purchase", json={"amount": 7}, headers=superuser_headers)

    # A tenant_id in the request is ignored for tenant callers
    other = await client.get(
        "/credits/balance", params={"tenant_id": str(tenant_id)}, headers=headers_for(uuid4())
    )

    assert other.status_code == 200
    assert other.json()["purchased"] == 0


@pytest.mark.asyncio
async def test_reserve_and_release(client: AsyncClient, superuser_headers):
    await client.post("/credits/purchase", json={"amount": 5}, headers=superuser_headers)

    too_many = await client.post(
        "/credits/reserve", json={"amount": 6}, headers=superuser_headers
    )
    assert too_many.status_code == 402
    assert too_many.json()["error"]["code"] == "INSUFFICIENT_CREDIT"

    reserved = await client.post("/credits/reserve", json={"amount": 3}, headers=superuser_headers)
    assert reserved.status_code == 200
    assert reserved.json()["reserved"] == 3
    assert reserved.json()["available"] == 2
    assert reserved.json()["current"] == 5

    over_release = await client.post(
        "/credits/release", json={"amount": 4}, headers=superuser_headers
    )
    assert over_release.status_code == 400

    released = await client.post("/credits/release", json={"amount": 3}, headers=superuser_headers)
    assert released.json()["available"] == 5


@pytest.mark.asyncio
async def test_operator_adjustment(client: AsyncClient, tenant_id, operator_headers, superuser_headers):
    denied = await client.post(
        f"/admin/tenants/{tenant_id}/credits/adjust",
        json={"amount": 10, "reason": "goodwill"},
        headers=superuser_headers,
    )
    assert denied.status_code == 403

    added = await client.post(
        f"/admin/tenants/{tenant_id}/credits/adjust",
        json={"amount": 10, "reason": "goodwill"},
        headers=operator_headers,
    )
    assert added.status_code == 200
    assert added.json()["balance"]["available"] == 10
    assert added.json()["transaction"]["kind"] == "adjustment"

    too_far = await client.post(
        f"/admin/tenants/{tenant_id}/credits/adjust",
        json={"amount": -11, "reason": "correction"},
        headers=operator_headers,
    )
    assert too_far.status_code == 402

    balance = await client.get(
        "/credits/balance", params={"tenant_id": str(tenant_id)}, headers=operator_headers
    )
    assert balance.json()["available"] == 10


@pytest.mark.asyncio
async def test_operator_must_name_tenant(client: AsyncClient, operator_headers):
    response = await client.get("/credits/balance", headers=operator_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "TENANT_REQUIRED"


@pytest.mark.asyncio
async def test_invalid_admin_key(client: AsyncClient):
    response = await client.get("/credits/balance", headers={"X-Admin-API-Key": "wrong"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_API_KEY"


@pytest.mark.asyncio
async def test_malformed_body_uses_error_envelope(client: AsyncClient, superuser_headers):
    response = await client.post(
        "/credits/purchase", json={"amount": "lots"}, headers=superuser_headers
    )

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "amount" in error["message"]
    assert "lots" not in error["message"]


@pytest.mark.asyncio
async def test_balance_status_follows_alert_thresholds(
    client: AsyncClient, user_headers, superuser_headers
):
    """Low-balance alerts

    Given my tenant holds 11 credits
    When credits are reserved down to 10 and then 5 available
    Then the balance reports low and then critical
    """
    await client.post("/credits/purchase", json={"amount": 11}, headers=superuser_headers)
    balance = await client.get("/credits/balance", headers=user_headers)
    assert balance.json()["balance_status"] == "healthy"

    low = await client.post("/credits/reserve", json={"amount": 1}, headers=superuser_headers)
    assert (low.json()["available"], low.json()["balance_status"]) == (10, "low")

    critical = await client.post("/credits/reserve", json={"amount": 5}, headers=superuser_headers)
    assert (critical.json()["available"], critical.json()["balance_status"]) == (5, "critical")
