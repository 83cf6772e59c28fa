"""
backend/kycgate/core/dependencies.py

Authentication and Authorization Dependencies

Provides authentication and account-based access control for FastAPI routes:
- Validates JWT tokens from Bearer header OR HttpOnly cookie
- Resolves the authenticated caller and their session id
- Restricts reviewer endpoints to ADMIN accounts

Pagination Dependency:
- Provides reusable dependency for pagination (skip, limit).
"""

import logging
from typing import Annotated

from fastapi import Cookie, Depends, Query, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError as PydanticValidationError

from kycgate.core.exceptions import APIError
from kycgate.core.schemas import CurrentUser
from kycgate.core.tokens import decode_access_token
from kycgate.database.enums import AccountType

# ---------------------------------------------------
# Logger Configuration
# ---------------------------------------------------
logger = logging.getLogger(__name__)

# ---------------------------------------------------
# OAuth2 Configuration
# ---------------------------------------------------
# auto_error disabled so the cookie fallback is still checked when the header is missing
oauth2_scheme: OAuth2PasswordBearer = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


# ---------------------------------------------------
# Pagination Dependency
# ---------------------------------------------------
class PaginationParams:
    """
    Dependency that provides pagination parameters from query parameters.
    """

    def __init__(
        self,
        skip: int = Query(0, ge=0, description="Number of records to skip for pagination"),
        limit: int = Query(100, ge=1, le=500, description="Maximum number of records to return"),
    ):
        self.skip = skip
        self.limit = limit


# ---------------------------------------------------
# Authentication Functions
# ---------------------------------------------------
async def get_current_user(
    token_header: Annotated[str | None, Depends(oauth2_scheme)] = None,
    token_cookie: Annotated[str | None, Cookie(alias="access_token")] = None,
) -> CurrentUser:
    """
    Authenticate the current user based on the provided JWT access token,
    checking Bearer header first, then HttpOnly cookie.

    Raises:
        APIError: 401 Unauthorized if authentication fails.
    """
    token = token_header or token_cookie

    if token is None:
        logger.debug("[AUTH] No token found in Authorization header or access_token cookie.")
        raise APIError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            message="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
    except (ValueError, PydanticValidationError) as e:
        logger.warning(f"[AUTH] JWT decoding/validation failed: {e}")
        raise APIError(
            status_code=status.HTTP_401_UNAUTHORIZED, message="Could not validate credentials"
        )

    user = CurrentUser(id=payload.sub, account=payload.account, session_id=payload.sid or payload.jti)
    logger.debug(
        f"[AUTH] User {user.id} authenticated via {'Header' if token_header else 'Cookie'}."
    )
    return user


# ---------------------------------------------------
# Authorization Functions (Account-Based)
# ---------------------------------------------------
async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """
    Dependency to restrict access to reviewer (ADMIN) accounts.
    """
    if user.account != AccountType.ADMIN:
        logger.warning(f"[RBAC] Access denied: User {user.id} account={user.account}, required=ADMIN")
        raise APIError(
            status_code=status.HTTP_403_FORBIDDEN,
            message=f"Access denied for account: {user.account.value}",
        )
    return user
