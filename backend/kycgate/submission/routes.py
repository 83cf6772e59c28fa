"""
backend/kycgate/submission/routes.py

Submission Routes
Submits a completed role profile for reviewer attention.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.core.dependencies import get_current_user
from kycgate.core.limiter import limiter
from kycgate.core.schemas import CurrentUser
from kycgate.database.session import get_db
from kycgate.profiles.schemas import RoleProfileRead
from kycgate.submission.gate import SubmissionGate
from kycgate.verification.cache import EvaluationCache, get_evaluation_cache

router = APIRouter(prefix="/kyc", tags=["Submission"])
logger = logging.getLogger(__name__)

DBDep = Annotated[AsyncSession, Depends(get_db)]
CacheDep = Annotated[EvaluationCache, Depends(get_evaluation_cache)]
AuthenticatedUserDep = Annotated[CurrentUser, Depends(get_current_user)]


@router.post(
    "/{role}/submit",
    response_model=RoleProfileRead,
    status_code=status.HTTP_200_OK,
    summary="Submit Role Profile For Review",
    description="Submit a fully completed role profile. Refused when already submitted or incomplete.",
)
@limiter.limit("5/minute")
async def submit_role_profile(
    request: Request,
    role: str,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedUserDep,
) -> RoleProfileRead:
    logger.info(f"[KYC] User {current_user.id} submitting {role} profile")
    profile = await SubmissionGate(db, cache).submit(current_user.id, role)
    return RoleProfileRead.model_validate(profile)
