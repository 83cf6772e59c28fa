"""
backend/kycgate/database/enums.py

Enumerations

Defines enumerations used across the platform:
- AccountType: Account level of the caller (regular user or reviewer/admin)
- Role: Capability roles a user can register for and switch between
- DocumentType: Kinds of identity evidence
- DocumentStatus: Review state of a single document
- ProfileStatus: Verification status of a per-role profile
- VerificationLevel: Coarse trust tier derived from approved requirements
- StepKind: Kind of a requirement step
"""

from enum import Enum

# ---------------------------------------------------
# Account Type Enumeration
# ---------------------------------------------------


class AccountType(str, Enum):
    """
    Enum representing account types for access control.

    Values:
    - USER
    - ADMIN
    """

    USER = "USER"
    ADMIN = "ADMIN"


# ---------------------------------------------------
# Role Enumeration
# ---------------------------------------------------


class Role(str, Enum):
    """
    Enum representing the capability roles gated by verification.
    """

    CONSUMER = "consumer"
    MERCHANT = "merchant"
    DRIVER = "driver"


# ---------------------------------------------------
# Document Enumerations
# ---------------------------------------------------


class DocumentType(str, Enum):
    IDENTITY = "identity"
    ADDRESS = "address"
    BUSINESS = "business"
    DRIVER_LICENSE = "driver_license"
    VEHICLE_REGISTRATION = "vehicle_registration"


class DocumentStatus(str, Enum):
    """
    Enum representing the review status of a document.

    Values:
    - PENDING
    - APPROVED
    - REJECTED
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ReviewDecision(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# ---------------------------------------------------
# Role Profile Enumerations
# ---------------------------------------------------


class ProfileStatus(str, Enum):
    """
    Enum representing the verification status of a role profile.

    Values:
    - UNREGISTERED
    - INCOMPLETE
    - PENDING
    - VERIFIED
    - REJECTED
    """

    UNREGISTERED = "UNREGISTERED"
    INCOMPLETE = "INCOMPLETE"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class VerificationLevel(str, Enum):
    NONE = "NONE"
    BASIC = "BASIC"
    FULL = "FULL"


class StepKind(str, Enum):
    PERSONAL_INFO = "PERSONAL_INFO"
    DOCUMENT = "DOCUMENT"
