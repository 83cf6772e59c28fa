"""
backend/kycgate/roles/routes.py

Role Routes
Registration of capability roles, access checks and switching the role the
current session acts as.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.core.dependencies import get_current_user
from kycgate.core.limiter import limiter
from kycgate.core.schemas import CurrentUser
from kycgate.database.session import get_db
from kycgate.profiles.schemas import AvailableRoleRead, RoleProfileRead
from kycgate.roles.models import UserSession
from kycgate.roles.schemas import AccessDecision, CurrentRoleRead, SwitchRoleRequest, SwitchRoleResponse
from kycgate.roles.services import RoleAuthorizer, SessionStore
from kycgate.verification.cache import EvaluationCache, get_evaluation_cache

router = APIRouter(prefix="/roles", tags=["Roles"])
logger = logging.getLogger(__name__)

DBDep = Annotated[AsyncSession, Depends(get_db)]
CacheDep = Annotated[EvaluationCache, Depends(get_evaluation_cache)]
AuthenticatedUserDep = Annotated[CurrentUser, Depends(get_current_user)]


async def get_current_session(db: DBDep, current_user: AuthenticatedUserDep) -> UserSession:
    """Resolve (or open) the session the access token belongs to."""
    return await SessionStore(db).get_or_create(current_user.session_id, current_user.id)


SessionDep = Annotated[UserSession, Depends(get_current_session)]


# ----------------------------------------------------
# Registration
# ----------------------------------------------------
@router.get(
    "",
    response_model=list[AvailableRoleRead],
    status_code=status.HTTP_200_OK,
    summary="List My Roles",
    description="Every role the authenticated user registered for, with its verification status.",
)
@limiter.limit("30/minute")
async def list_my_roles(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> list[AvailableRoleRead]:
    profiles = await RoleAuthorizer(db).get_available_roles(current_user.id)
    return [AvailableRoleRead.model_validate(p) for p in profiles]


@router.get(
    "/current",
    response_model=CurrentRoleRead,
    status_code=status.HTTP_200_OK,
    summary="Get Current Role",
    description="The role the current session acts as, if any.",
)
@limiter.limit("60/minute")
async def get_current_role(
    request: Request,
    db: DBDep,
    session: SessionDep,
) -> CurrentRoleRead:
    return CurrentRoleRead(session_id=session.id, current_role=RoleAuthorizer(db).get_current_role(session))


@router.post(
    "/switch",
    response_model=SwitchRoleResponse,
    status_code=status.HTTP_200_OK,
    summary="Switch Role",
    description="Act as another registered role. Only verified roles can be switched to.",
)
@limiter.limit("10/minute")
async def switch_role(
    request: Request,
    payload: SwitchRoleRequest,
    db: DBDep,
    cache: CacheDep,
    session: SessionDep,
) -> SwitchRoleResponse:
    return await RoleAuthorizer(db, cache).switch_role(session, payload.role)


@router.post(
    "/{role}/register",
    response_model=RoleProfileRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register Role",
    description="Register the authenticated user for a role. Shared approved documents count right away.",
)
@limiter.limit("5/minute")
async def register_role(
    request: Request,
    role: str,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedUserDep,
) -> RoleProfileRead:
    profile = await RoleAuthorizer(db, cache).register_role(current_user.id, role)
    return RoleProfileRead.model_validate(profile)


@router.get(
    "/{role}/access",
    response_model=AccessDecision,
    status_code=status.HTTP_200_OK,
    summary="Check Role Access",
    description="Whether the authenticated user may act as a role, and what is missing if not.",
)
@limiter.limit("30/minute")
async def check_role_access(
    request: Request,
    role: str,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedUserDep,
) -> AccessDecision:
    return await RoleAuthorizer(db, cache).check_access(current_user.id, role)
