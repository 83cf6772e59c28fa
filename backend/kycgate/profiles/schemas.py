"""
backend/kycgate/profiles/schemas.py

Profile Schemas
Defines Pydantic models for the personal details step, the business and
driver details of merchants and drivers, and per-role profile views.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kycgate.database.enums import ProfileStatus, Role, VerificationLevel
from kycgate.profiles.validators import (
    date_of_birth_validator,
    identifier_validator,
    license_expiry_validator,
    name_validator,
    street_validator,
    vehicle_year_validator,
)


# -----------------------------------------------------
# Base Schema for Personal Details
# -----------------------------------------------------
class PersonalInfoBase(BaseModel):
    """Fields shared across personal detail schemas."""

    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    date_of_birth: date = Field(..., description="Date of birth")
    nationality: str = Field(..., min_length=2, max_length=64, description="Nationality")
    occupation: str | None = Field(default=None, max_length=100, description="Occupation")
    street: str = Field(..., description="Street address")
    city: str = Field(..., min_length=1, max_length=100, description="City")
    state: str = Field(..., min_length=1, max_length=100, description="State")
    country: str | None = Field(default=None, max_length=100, description="Country")
    postal_code: str | None = Field(default=None, max_length=20, description="Postal code")


# -----------------------------------------------------
# Schema for Writing Personal Details
# -----------------------------------------------------
class PersonalInfoWrite(PersonalInfoBase):
    """Schema for creating or replacing the caller's personal details."""

    @field_validator("first_name", "last_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return name_validator(value)

    @field_validator("date_of_birth")
    @classmethod
    def _check_date_of_birth(cls, value: date) -> date:
        return date_of_birth_validator(value)

    @field_validator("street")
    @classmethod
    def _check_street(cls, value: str) -> str:
        return street_validator(value)

    @field_validator("nationality", "city", "state")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This field is required.")
        return value


# -----------------------------------------------------
# Schema for Reading Personal Details
# -----------------------------------------------------
class PersonalInfoRead(PersonalInfoBase):
    user_id: UUID = Field(..., description="User the details belong to")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


# -----------------------------------------------------
# Schemas for Role Profiles
# -----------------------------------------------------
class RoleProfileRead(BaseModel):
    """Stored verification state of one role profile."""

    id: UUID = Field(..., description="Unique identifier of the role profile")
    user_id: UUID = Field(..., description="Owning user")
    role: Role = Field(..., description="Role this profile gates")
    status: ProfileStatus = Field(..., description="Verification status")
    completion_percentage: int = Field(..., description="Share of completed requirement steps")
    verification_level: VerificationLevel = Field(..., description="Derived trust tier")
    is_submitted: bool = Field(..., description="Whether a submission is on record")
    submitted_at: datetime | None = Field(default=None, description="Last submission timestamp")
    verified_at: datetime | None = Field(default=None, description="Verification timestamp")
    version: int = Field(..., description="Write version of the profile")

    model_config = ConfigDict(from_attributes=True)


class AvailableRoleRead(BaseModel):
    """Summary of a registered role, as shown in a role picker."""

    role: Role = Field(..., description="Registered role")
    status: ProfileStatus = Field(..., description="Verification status")
    verification_level: VerificationLevel = Field(..., description="Derived trust tier")

    model_config = ConfigDict(from_attributes=True)


# -----------------------------------------------------
# Schemas for Business Details
# -----------------------------------------------------
class BusinessInfoBase(BaseModel):
    business_name: str = Field(..., min_length=2, max_length=150, description="Registered business name")
    business_type: str = Field(..., min_length=2, max_length=100, description="Kind of business")
    registration_number: str = Field(..., max_length=64, description="Business registration number")
    tax_id: str = Field(..., max_length=64, description="Tax identification number")
    street: str = Field(..., description="Business street address")
    city: str = Field(..., min_length=1, max_length=100, description="City")
    state: str = Field(..., min_length=1, max_length=100, description="State")
    country: str | None = Field(default=None, max_length=100, description="Country")
    postal_code: str | None = Field(default=None, max_length=20, description="Postal code")


class BusinessInfoWrite(BusinessInfoBase):
    """Schema for creating or replacing a merchant's business details."""

    @field_validator("registration_number", "tax_id")
    @classmethod
    def _check_number(cls, value: str) -> str:
        return identifier_validator(value)

    @field_validator("street")
    @classmethod
    def _check_street(cls, value: str) -> str:
        return street_validator(value)

    @field_validator("business_name", "business_type", "city", "state")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This field is required.")
        return value


class BusinessInfoRead(BusinessInfoBase):
    user_id: UUID = Field(..., description="Merchant the details belong to")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


# -----------------------------------------------------
# Schemas for Driver Details
# -----------------------------------------------------
class DriverInfoBase(BaseModel):
    license_number: str = Field(..., max_length=64, description="Driver's license number")
    license_expiry: date = Field(..., description="Driver's license expiry date")
    vehicle_make: str = Field(..., min_length=2, max_length=50, description="Vehicle make")
    vehicle_model: str = Field(..., min_length=1, max_length=50, description="Vehicle model")
    vehicle_year: int = Field(..., description="Vehicle model year")
    plate_number: str = Field(..., max_length=20, description="License plate number")
    vehicle_registration_number: str = Field(..., max_length=64, description="Vehicle registration number")


class DriverInfoWrite(DriverInfoBase):
    """Schema for creating or replacing a driver's license and vehicle details."""

    @field_validator("license_number", "plate_number", "vehicle_registration_number")
    @classmethod
    def _check_number(cls, value: str) -> str:
        return identifier_validator(value)

    @field_validator("license_expiry")
    @classmethod
    def _check_expiry(cls, value: date) -> date:
        return license_expiry_validator(value)

    @field_validator("vehicle_year")
    @classmethod
    def _check_year(cls, value: int) -> int:
        return vehicle_year_validator(value)


class DriverInfoRead(DriverInfoBase):
    user_id: UUID = Field(..., description="Driver the details belong to")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)
