"""
backend/kycgate/profiles/routes.py

Profile Routes
Personal, business and driver details of the authenticated user and the
verification status of each of their roles.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.core.dependencies import get_current_user
from kycgate.core.exceptions import NotFoundError
from kycgate.core.limiter import limiter
from kycgate.core.schemas import CurrentUser
from kycgate.database.session import get_db
from kycgate.profiles.schemas import (
    BusinessInfoRead,
    BusinessInfoWrite,
    DriverInfoRead,
    DriverInfoWrite,
    PersonalInfoRead,
    PersonalInfoWrite,
)
from kycgate.profiles.services import BusinessInfoStore, DriverInfoStore, PersonalInfoStore
from kycgate.roles.services import RoleAuthorizer
from kycgate.verification.cache import EvaluationCache, get_evaluation_cache
from kycgate.verification.schemas import EvaluationRead
from kycgate.verification.services import VerificationService

router = APIRouter(prefix="/kyc", tags=["KYC"])
logger = logging.getLogger(__name__)

DBDep = Annotated[AsyncSession, Depends(get_db)]
CacheDep = Annotated[EvaluationCache, Depends(get_evaluation_cache)]
AuthenticatedUserDep = Annotated[CurrentUser, Depends(get_current_user)]


# ----------------------------------------------------
# Personal Details
# ----------------------------------------------------
@router.get(
    "/personal-info",
    response_model=PersonalInfoRead,
    status_code=status.HTTP_200_OK,
    summary="Get My Personal Details",
    description="Retrieve the personal details of the authenticated user.",
)
@limiter.limit("30/minute")
async def get_my_personal_info(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> PersonalInfoRead:
    info = await PersonalInfoStore(db).get(current_user.id)
    if info is None:
        raise NotFoundError("No personal details on record.")
    return PersonalInfoRead.model_validate(info)


@router.put(
    "/personal-info",
    response_model=PersonalInfoRead,
    status_code=status.HTTP_200_OK,
    summary="Save My Personal Details",
    description=(
        "Create or replace the personal details of the authenticated user. "
        "A user holding no role yet is registered as a consumer."
    ),
)
@limiter.limit("10/minute")
async def save_my_personal_info(
    request: Request,
    payload: PersonalInfoWrite,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedUserDep,
) -> PersonalInfoRead:
    info = await RoleAuthorizer(db, cache).save_personal_info(current_user.id, payload.model_dump())
    return PersonalInfoRead.model_validate(info)


# ----------------------------------------------------
# Business Details
# ----------------------------------------------------
@router.get(
    "/business-info",
    response_model=BusinessInfoRead,
    status_code=status.HTTP_200_OK,
    summary="Get My Business Details",
    description="Retrieve the business details of the authenticated merchant.",
)
@limiter.limit("30/minute")
async def get_my_business_info(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> BusinessInfoRead:
    info = await BusinessInfoStore(db).get(current_user.id)
    if info is None:
        raise NotFoundError("No business details on record.")
    return BusinessInfoRead.model_validate(info)


@router.put(
    "/business-info",
    response_model=BusinessInfoRead,
    status_code=status.HTTP_200_OK,
    summary="Save My Business Details",
    description="Create or replace the business details. Requires a merchant registration.",
)
@limiter.limit("10/minute")
async def save_my_business_info(
    request: Request,
    payload: BusinessInfoWrite,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedUserDep,
) -> BusinessInfoRead:
    info = await RoleAuthorizer(db, cache).save_business_info(current_user.id, payload.model_dump())
    return BusinessInfoRead.model_validate(info)


# ----------------------------------------------------
# Driver Details
# ----------------------------------------------------
@router.get(
    "/driver-info",
    response_model=DriverInfoRead,
    status_code=status.HTTP_200_OK,
    summary="Get My Driver Details",
    description="Retrieve the license and vehicle details of the authenticated driver.",
)
@limiter.limit("30/minute")
async def get_my_driver_info(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> DriverInfoRead:
    info = await DriverInfoStore(db).get(current_user.id)
    if info is None:
        raise NotFoundError("No driver details on record.")
    return DriverInfoRead.model_validate(info)


@router.put(
    "/driver-info",
    response_model=DriverInfoRead,
    status_code=status.HTTP_200_OK,
    summary="Save My Driver Details",
    description="Create or replace the license and vehicle details. Requires a driver registration.",
)
@limiter.limit("10/minute")
async def save_my_driver_info(
    request: Request,
    payload: DriverInfoWrite,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedUserDep,
) -> DriverInfoRead:
    info = await RoleAuthorizer(db, cache).save_driver_info(current_user.id, payload.model_dump())
    return DriverInfoRead.model_validate(info)


# ----------------------------------------------------
# Verification Status
# ----------------------------------------------------
@router.get(
    "/{role}/status",
    response_model=EvaluationRead,
    status_code=status.HTTP_200_OK,
    summary="Get My Verification Status",
    description=(
        "Derive completion, level and status of a role for the authenticated user. "
        "While the backend is unavailable the last known result is served with `stale: true`."
    ),
)
@limiter.limit("30/minute")
async def get_my_verification_status(
    request: Request,
    role: str,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedUserDep,
) -> EvaluationRead:
    return await VerificationService(db, cache).get_status(current_user.id, role)
