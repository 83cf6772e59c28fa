"""
backend/kycgate/roles/schemas.py

Role Schemas
Defines Pydantic models for role switching, the session's current role and
role access decisions.
"""

from pydantic import BaseModel, Field

from kycgate.database.enums import ProfileStatus, Role


class SwitchRoleRequest(BaseModel):
    """Body of a role switch request."""

    role: str = Field(..., description="Role to act as (consumer, merchant, driver)")


class SwitchRoleResponse(BaseModel):
    """Acknowledgement of a role switch."""

    previous_role: Role | None = Field(default=None, description="Role the session acted as before")
    current_role: Role = Field(..., description="Role the session acts as now")
    switched: bool = Field(..., description="False when the session already acted as this role")
    detail: str = Field(..., description="Human readable outcome")


class CurrentRoleRead(BaseModel):
    session_id: str = Field(..., description="Session identifier")
    current_role: Role | None = Field(default=None, description="Role the session acts as")


class AccessDecision(BaseModel):
    """Structured answer to "may this user act as this role?"."""

    role: Role = Field(..., description="Role that was checked")
    has_access: bool = Field(..., description="Whether the user may act as the role")
    reason: str | None = Field(default=None, description="NotRegistered or NotVerified when refused")
    requires_registration: bool = Field(..., description="The user must register the role first")
    requires_verification: bool = Field(..., description="The role profile must be verified first")
    status: ProfileStatus | None = Field(default=None, description="Current profile status")
