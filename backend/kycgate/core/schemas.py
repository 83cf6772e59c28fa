"""
backend/kycgate/core/schemas.py

Core Schemas

Defines core Pydantic models used across the application, including:
- Generic paginated response schema.
- Generic message response schema.
- Decoded access token payload and the authenticated caller.
"""

from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

from kycgate.database.enums import AccountType

# Define a type variable for the items in the paginated response
T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Generic schema for paginated list responses.
    """

    total_count: int = Field(..., description="Total number of items available")
    has_next_page: bool = Field(..., description="Indicates if there are more items available")
    items: list[T] = Field(..., description="List of items for the current page")


class MessageResponse(BaseModel):
    """
    Generic response schema for simple success or informational messages.
    """

    detail: str = Field(..., description="Response message detail")


class TokenPayload(BaseModel):
    """
    Decoded JWT payload structure issued by the identity provider.
    """

    sub: UUID = Field(..., description="Subject (user ID)")
    account: AccountType = Field(AccountType.USER, description="Account type encoded in the token")
    exp: int = Field(..., description="Expiration timestamp of the token")
    jti: str = Field(..., description="JWT ID")
    sid: str | None = Field(None, description="Session identifier, defaults to the JWT ID")


class CurrentUser(BaseModel):
    """
    The authenticated caller resolved from the access token.
    """

    id: UUID = Field(..., description="User ID")
    account: AccountType = Field(..., description="Account type (USER or ADMIN)")
    session_id: str = Field(..., description="Session this request belongs to")
