"""
core/exceptions.py

Description:
Defines the verification error taxonomy and the standard error response format for the API.

Every error carries a machine-readable `code` plus structured extras (conflict reason,
authorization status, remediation hint) so callers can branch on the specific kind.
"""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Custom exception with standardized error response."""

    def __init__(self, status_code: int, message: str, headers: dict[str, Any] | None = None):
        super().__init__(status_code=status_code, detail={"error": message}, headers=headers)


# ---------------------------------------------------
# Domain Errors
# ---------------------------------------------------
class KYCError(Exception):
    """Base class for every error raised by the verification core."""

    code = "KYCError"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def extra(self) -> dict[str, Any]:
        return {}

    def to_detail(self) -> dict[str, Any]:
        """Serializable error body preserving the error kind."""
        return {"error": self.code, "message": self.message, **self.extra()}


class ValidationError(KYCError):
    """Input rejected before any state was touched."""

    code = "ValidationError"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field

    def extra(self) -> dict[str, Any]:
        return {"field": self.field} if self.field else {}


class UnknownRoleError(ValidationError):
    code = "UnknownRoleError"

    def __init__(self, role: Any) -> None:
        super().__init__(f"Unknown role: {role!r}", field="role")
        self.role = role


class NotFoundError(KYCError):
    code = "NotFoundError"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(KYCError):
    """
    State conflict with the owning store.

    Reasons: AlreadySubmitted, AlreadyReviewed, AlreadyRegistered,
    AwaitingReview, AlreadyApproved.
    """

    code = "ConflictError"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, reason: str, message: str | None = None) -> None:
        super().__init__(message or reason)
        self.reason = reason

    def extra(self) -> dict[str, Any]:
        return {"reason": self.reason}


class AuthorizationError(KYCError):
    """
    Role authorization refused.

    `reason` is NotRegistered or NotVerified; `status` carries the profile status
    for NotVerified and `hint` names the remediation route.
    """

    code = "AuthorizationError"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        reason: str,
        message: str | None = None,
        status: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message or reason)
        self.reason = reason
        self.status = status
        self.hint = hint

    def extra(self) -> dict[str, Any]:
        data: dict[str, Any] = {"reason": self.reason}
        if self.status is not None:
            data["status"] = self.status
        if self.hint is not None:
            data["hint"] = self.hint
        return data


class TransientError(KYCError):
    """Backend unavailable; authoritative state is unknown, not empty."""

    code = "TransientError"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


# ---------------------------------------------------
# Exception Handler Registration
# ---------------------------------------------------
async def kyc_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Renders a KYCError into the standard `{"detail": {...}}` body."""
    if not isinstance(exc, KYCError):
        raise exc
    log_fn = logger.error if isinstance(exc, TransientError) else logger.info
    log_fn(f"[ERROR] {request.method} {request.url.path} -> {exc.code}: {exc.message}")
    headers = {"Retry-After": "5"} if isinstance(exc, TransientError) else None
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.to_detail()}, headers=headers
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain error handler to the application."""
    app.add_exception_handler(KYCError, kyc_error_handler)
