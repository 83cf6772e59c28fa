"""
profiles/models.py

Defines SQLAlchemy models for the profiles module:
- PersonalInfo: The personal details step shared by every role
- RoleProfile: Per-user, per-role registration and verification record
- BusinessInfo: Business details held by a merchant
- DriverInfo: License and vehicle details held by a driver
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Enum, Integer, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from kycgate.database.base import Base
from kycgate.database.enums import ProfileStatus, Role, VerificationLevel


# ------------------------------------------------------
# PersonalInfo Model
# ------------------------------------------------------
class PersonalInfo(Base):
    """
    Personal details supplied by the user. Completes on presence alone;
    it is not reviewer-gated.
    """

    __tablename__ = "personal_info"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, comment="User the details belong to"
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False, comment="First name")
    last_name: Mapped[str] = mapped_column(String(50), nullable=False, comment="Last name")
    date_of_birth: Mapped[date | None] = mapped_column(
        Date, nullable=True, comment="Date of birth"
    )
    nationality: Mapped[str | None] = mapped_column(
        String(64), nullable=True, comment="Nationality"
    )
    occupation: Mapped[str | None] = mapped_column(
        String(100), nullable=True, comment="Occupation (optional)"
    )
    street: Mapped[str | None] = mapped_column(String(200), nullable=True, comment="Street address")
    city: Mapped[str | None] = mapped_column(String(100), nullable=True, comment="City")
    state: Mapped[str | None] = mapped_column(String(100), nullable=True, comment="State")
    country: Mapped[str | None] = mapped_column(String(100), nullable=True, comment="Country")
    postal_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True, comment="Postal code"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        comment="Timestamp when the details were last updated",
    )


# ------------------------------------------------------
# RoleProfile Model
# ------------------------------------------------------
class RoleProfile(Base):
    """
    Verification state of one user for one role. Status, completion and level
    are written only from a committed evaluation; `version` guards each write.
    """

    __tablename__ = "role_profiles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_role_profiles_user_role"),)

    # -------------------------------------
    # Fields
    # -------------------------------------
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier for the role profile",
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, comment="Owning user")
    role: Mapped[Role] = mapped_column(Enum(Role), nullable=False, comment="Role this profile gates")
    status: Mapped[ProfileStatus] = mapped_column(
        Enum(ProfileStatus),
        default=ProfileStatus.UNREGISTERED,
        nullable=False,
        comment="Verification status",
    )
    completion_percentage: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False, comment="Share of completed requirement steps"
    )
    verification_level: Mapped[VerificationLevel] = mapped_column(
        Enum(VerificationLevel),
        default=VerificationLevel.NONE,
        nullable=False,
        comment="Derived trust tier",
    )
    is_submitted: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, comment="Whether a submission is on record"
    )
    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="Timestamp of the last submission"
    )
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="Timestamp when the profile became verified"
    )
    version: Mapped[int] = mapped_column(
        Integer, default=1, nullable=False, comment="Incremented on every status write"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        comment="Timestamp when the profile was created",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        comment="Timestamp when the profile was last updated",
    )


# ------------------------------------------------------
# BusinessInfo Model
# ------------------------------------------------------
class BusinessInfo(Base):
    """Business details of a merchant, backing the business registration document."""

    __tablename__ = "business_info"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, comment="Merchant the business belongs to"
    )
    business_name: Mapped[str] = mapped_column(String(150), nullable=False, comment="Registered business name")
    business_type: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Kind of business (e.g. retail, food)"
    )
    registration_number: Mapped[str] = mapped_column(
        String(64), nullable=False, comment="Business registration number"
    )
    tax_id: Mapped[str] = mapped_column(String(64), nullable=False, comment="Tax identification number")
    street: Mapped[str] = mapped_column(String(200), nullable=False, comment="Business street address")
    city: Mapped[str] = mapped_column(String(100), nullable=False, comment="City")
    state: Mapped[str] = mapped_column(String(100), nullable=False, comment="State")
    country: Mapped[str | None] = mapped_column(String(100), nullable=True, comment="Country")
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True, comment="Postal code")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        comment="Timestamp when the details were last updated",
    )


# ------------------------------------------------------
# DriverInfo Model
# ------------------------------------------------------
class DriverInfo(Base):
    """License and vehicle details of a driver."""

    __tablename__ = "driver_info"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, comment="Driver the details belong to"
    )
    license_number: Mapped[str] = mapped_column(String(64), nullable=False, comment="Driver's license number")
    license_expiry: Mapped[date] = mapped_column(Date, nullable=False, comment="Driver's license expiry date")
    vehicle_make: Mapped[str] = mapped_column(String(50), nullable=False, comment="Vehicle make")
    vehicle_model: Mapped[str] = mapped_column(String(50), nullable=False, comment="Vehicle model")
    vehicle_year: Mapped[int] = mapped_column(Integer, nullable=False, comment="Vehicle model year")
    plate_number: Mapped[str] = mapped_column(String(20), nullable=False, comment="License plate number")
    vehicle_registration_number: Mapped[str] = mapped_column(
        String(64), nullable=False, comment="Vehicle registration number"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        comment="Timestamp when the details were last updated",
    )
