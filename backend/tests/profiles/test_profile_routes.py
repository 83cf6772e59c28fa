"""
tests/profiles/test_profile_routes.py

Unit tests for profiles/routes.py:
- Reading and saving personal, business and driver details
- Payload validation
- Verification status, including the backend-unavailable response
"""

from datetime import date, datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from httpx import AsyncClient

from kycgate.core.exceptions import AuthorizationError, TransientError
from kycgate.core.schemas import CurrentUser
from kycgate.database.enums import ProfileStatus, Role, VerificationLevel
from kycgate.profiles import services as profile_services
from kycgate.profiles.models import BusinessInfo, DriverInfo, PersonalInfo
from kycgate.roles import services as role_services
from kycgate.verification import services as verification_services
from kycgate.verification.schemas import EvaluationRead


# --- Personal Details ---
@pytest.mark.asyncio
@patch.object(profile_services.PersonalInfoStore, "get", new_callable=AsyncMock)
async def test_get_personal_info_missing(
    mock_get: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_get.return_value = None

    response = await async_client.get("/kyc/personal-info")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"]["error"] == "NotFoundError"


@pytest.mark.asyncio
@patch.object(profile_services.PersonalInfoStore, "get", new_callable=AsyncMock)
async def test_get_personal_info(
    mock_get: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
    personal_info_data: dict[str, Any],
) -> None:
    mock_get.return_value = PersonalInfo(
        user_id=mock_current_user.id, updated_at=datetime.now(timezone.utc), **personal_info_data
    )

    response = await async_client.get("/kyc/personal-info")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["user_id"] == str(mock_current_user.id)
    assert data["first_name"] == "Ada"
    mock_get.assert_awaited_once_with(mock_current_user.id)


@pytest.mark.asyncio
@patch.object(role_services.RoleAuthorizer, "save_personal_info", new_callable=AsyncMock)
async def test_save_personal_info(
    mock_save: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
    personal_info_data: dict[str, Any],
    personal_info_payload: dict[str, Any],
) -> None:
    mock_save.return_value = PersonalInfo(
        user_id=mock_current_user.id, updated_at=datetime.now(timezone.utc), **personal_info_data
    )

    response = await async_client.put("/kyc/personal-info", json=personal_info_payload)

    assert response.status_code == status.HTTP_200_OK
    user_id, saved = mock_save.await_args.args
    assert user_id == mock_current_user.id
    assert saved["date_of_birth"] == date(1990, 5, 17)
    assert saved["street"] == personal_info_data["street"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, value",
    [
        ("first_name", "A"),
        ("last_name", "Okafor99"),
        ("date_of_birth", "2020-01-01"),
        ("street", "Short"),
        ("city", "   "),
    ],
)
@patch.object(role_services.RoleAuthorizer, "save_personal_info", new_callable=AsyncMock)
async def test_save_personal_info_invalid(
    mock_save: AsyncMock,
    field: str,
    value: str,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
    personal_info_payload: dict[str, Any],
) -> None:
    response = await async_client.put(
        "/kyc/personal-info", json={**personal_info_payload, field: value}
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"][0]["loc"] == ["body", field]
    mock_save.assert_not_awaited()


# --- Business and Driver Details ---
@pytest.mark.asyncio
@patch.object(role_services.RoleAuthorizer, "save_business_info", new_callable=AsyncMock)
async def test_save_business_info(
    mock_save: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
    business_info_data: dict[str, Any],
) -> None:
    mock_save.return_value = BusinessInfo(
        user_id=mock_current_user.id, updated_at=datetime.now(timezone.utc), **business_info_data
    )

    response = await async_client.put(
        "/kyc/business-info", json={**business_info_data, "tax_id": " tin-20394857 "}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["business_name"] == "Okafor Provisions Ltd"
    user_id, saved = mock_save.await_args.args
    assert user_id == mock_current_user.id
    assert saved["tax_id"] == "TIN-20394857"


@pytest.mark.asyncio
@patch.object(role_services.RoleAuthorizer, "save_business_info", new_callable=AsyncMock)
async def test_save_business_info_requires_merchant(
    mock_save: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
    business_info_data: dict[str, Any],
) -> None:
    mock_save.side_effect = AuthorizationError("NotRegistered", "Register as merchant first.", hint="register")

    response = await async_client.put("/kyc/business-info", json=business_info_data)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"]["reason"] == "NotRegistered"
    assert response.json()["detail"]["hint"] == "register"


@pytest.mark.asyncio
@patch.object(profile_services.BusinessInfoStore, "get", new_callable=AsyncMock)
async def test_get_business_info_missing(
    mock_get: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_get.return_value = None

    response = await async_client.get("/kyc/business-info")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    mock_get.assert_awaited_once_with(mock_current_user.id)


@pytest.mark.asyncio
@patch.object(profile_services.DriverInfoStore, "get", new_callable=AsyncMock)
async def test_get_driver_info(
    mock_get: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
    driver_info_data: dict[str, Any],
) -> None:
    mock_get.return_value = DriverInfo(
        user_id=mock_current_user.id, updated_at=datetime.now(timezone.utc), **driver_info_data
    )

    response = await async_client.get("/kyc/driver-info")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["plate_number"] == "KJA-123-XY"
    assert data["license_expiry"] == "2099-01-31"


@pytest.mark.asyncio
@patch.object(role_services.RoleAuthorizer, "save_driver_info", new_callable=AsyncMock)
async def test_save_driver_info(
    mock_save: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
    driver_info_data: dict[str, Any],
) -> None:
    mock_save.return_value = DriverInfo(
        user_id=mock_current_user.id, updated_at=datetime.now(timezone.utc), **driver_info_data
    )
    payload = {**driver_info_data, "license_expiry": "2099-01-31", "plate_number": "kja-123-xy"}

    response = await async_client.put("/kyc/driver-info", json=payload)

    assert response.status_code == status.HTTP_200_OK
    _, saved = mock_save.await_args.args
    assert saved["license_expiry"] == date(2099, 1, 31)
    assert saved["plate_number"] == "KJA-123-XY"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, value",
    [
        ("license_expiry", "2001-01-01"),
        ("vehicle_year", 1920),
        ("license_number", "A!"),
        ("plate_number", "$$$$"),
    ],
)
@patch.object(role_services.RoleAuthorizer, "save_driver_info", new_callable=AsyncMock)
async def test_save_driver_info_invalid(
    mock_save: AsyncMock,
    field: str,
    value: Any,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
    driver_info_data: dict[str, Any],
) -> None:
    payload = {**driver_info_data, "license_expiry": "2099-01-31", field: value}

    response = await async_client.put("/kyc/driver-info", json=payload)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"][0]["loc"] == ["body", field]
    mock_save.assert_not_awaited()


# --- Verification Status ---
@pytest.mark.asyncio
@patch.object(verification_services.VerificationService, "get_status", new_callable=AsyncMock)
async def test_get_verification_status(
    mock_status: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_status.return_value = EvaluationRead(
        role=Role.CONSUMER,
        steps=[],
        completion_percentage=100,
        verification_level=VerificationLevel.BASIC,
        status=ProfileStatus.VERIFIED,
        user_id=mock_current_user.id,
        evaluated_at=datetime.now(timezone.utc),
        stale=True,
    )

    response = await async_client.get("/kyc/consumer/status")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "VERIFIED"
    assert data["stale"] is True
    mock_status.assert_awaited_once_with(mock_current_user.id, "consumer")


@pytest.mark.asyncio
@patch.object(verification_services.VerificationService, "get_status", new_callable=AsyncMock)
async def test_get_verification_status_unavailable(
    mock_status: AsyncMock,
    mock_current_user: CurrentUser,
    async_client: AsyncClient,
    override_get_db: None,
) -> None:
    mock_status.side_effect = TransientError("Verification backend unavailable.")

    response = await async_client.get("/kyc/driver/status")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.headers["Retry-After"] == "5"
    assert response.json()["detail"] == {
        "error": "TransientError",
        "message": "Verification backend unavailable.",
    }
