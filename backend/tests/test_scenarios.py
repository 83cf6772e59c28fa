"""
tests/test_scenarios.py

End-to-end flows through the HTTP API against an in-memory SQLite database:
a consumer completing verification, and a merchant replacing a rejected document.
"""

from collections.abc import Generator
from typing import Any

import pytest
from fastapi import status
from httpx import AsyncClient

from kycgate.core.dependencies import get_current_user
from kycgate.core.schemas import CurrentUser
from kycgate.main import app


@pytest.fixture
def act_as() -> Generator[Any, None, None]:
    """Switch the authenticated caller mid-test."""

    def _act_as(user: CurrentUser) -> None:
        app.dependency_overrides[get_current_user] = lambda: user

    yield _act_as
    app.dependency_overrides.pop(get_current_user, None)


async def upload(client: AsyncClient, doc_type: str) -> dict[str, Any]:
    response = await client.post(
        "/kyc/documents", json={"type": doc_type, "evidence_refs": [f"s3://kyc/{doc_type}.jpg"]}
    )
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


@pytest.mark.asyncio
async def test_consumer_verification_flow(
    async_client: AsyncClient,
    override_get_db_sqlite: None,
    act_as: Any,
    fake_user: CurrentUser,
    fake_admin_user: CurrentUser,
    personal_info_payload: dict[str, Any],
) -> None:
    act_as(fake_user)
    response = await async_client.put("/kyc/personal-info", json=personal_info_payload)
    assert response.status_code == status.HTTP_200_OK

    identity = await upload(async_client, "identity")

    response = await async_client.post("/kyc/consumer/submit")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"]["error"] == "ValidationError"

    address = await upload(async_client, "address")

    response = await async_client.get("/kyc/consumer/status")
    assert response.json()["completion_percentage"] == 100
    assert response.json()["status"] == "INCOMPLETE"

    response = await async_client.post("/kyc/consumer/submit")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "PENDING"

    act_as(fake_admin_user)
    response = await async_client.get("/admin/kyc/pending")
    assert response.json()["total_count"] == 2
    for document in (identity, address):
        response = await async_client.put(f"/admin/kyc/documents/{document['id']}/approve")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "APPROVED"

    act_as(fake_user)
    data = (await async_client.get("/kyc/consumer/status")).json()
    assert data["status"] == "VERIFIED"
    assert data["verification_level"] == "BASIC"
    assert data["stale"] is False

    response = await async_client.post("/roles/switch", json={"role": "driver"})
    assert response.status_code == status.HTTP_403_FORBIDDEN
    detail = response.json()["detail"]
    assert detail["error"] == "AuthorizationError"
    assert detail["reason"] == "NotRegistered"
    assert (await async_client.get("/roles/current")).json()["current_role"] is None

    response = await async_client.post("/roles/switch", json={"role": "consumer"})
    assert response.status_code == status.HTTP_200_OK
    assert (await async_client.get("/roles/current")).json()["current_role"] == "consumer"


@pytest.mark.asyncio
async def test_merchant_replaces_rejected_document(
    async_client: AsyncClient,
    override_get_db_sqlite: None,
    act_as: Any,
    fake_user: CurrentUser,
    fake_admin_user: CurrentUser,
    personal_info_payload: dict[str, Any],
) -> None:
    act_as(fake_user)
    await async_client.put("/kyc/personal-info", json=personal_info_payload)
    response = await async_client.post("/roles/merchant/register")
    assert response.status_code == status.HTTP_201_CREATED
    for doc_type in ("identity", "address"):
        await upload(async_client, doc_type)
    business = await upload(async_client, "business")

    act_as(fake_admin_user)
    response = await async_client.put(
        f"/admin/kyc/documents/{business['id']}/reject", json={"reason": "illegible"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["rejection_reason"] == "illegible"

    act_as(fake_user)
    data = (await async_client.get("/kyc/merchant/status")).json()
    assert data["status"] == "REJECTED"
    business_step = next(s for s in data["steps"] if s["step_id"] == "business")
    assert business_step["rejection_reason"] == "illegible"

    await upload(async_client, "business")

    data = (await async_client.get("/kyc/merchant/status")).json()
    assert data["status"] == "INCOMPLETE"
    assert data["completion_percentage"] == 100
    documents = (await async_client.get("/kyc/documents")).json()
    assert [d["status"] for d in documents if d["type"] == "business"] == ["REJECTED", "PENDING"]

    roles = (await async_client.get("/roles")).json()
    assert {r["role"]: r["status"] for r in roles} == {"consumer": "INCOMPLETE", "merchant": "INCOMPLETE"}
