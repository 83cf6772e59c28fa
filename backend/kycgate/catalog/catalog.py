"""
catalog/catalog.py

Requirement Catalog

Pure lookup from role to its ordered list of requirement steps. Every role shares
the base steps (personal info, identity document, address document); merchants add
a business document, drivers add a driver's license and a vehicle registration.

The table is checked at import time so a new Role member cannot ship without an entry.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kycgate.core.exceptions import UnknownRoleError
from kycgate.database.enums import DocumentType, Role, StepKind


class Step(BaseModel):
    """One required input before a role profile can be submitted."""

    step_id: str = Field(..., description="Stable identifier of the step")
    kind: StepKind = Field(..., description="PERSONAL_INFO or DOCUMENT")
    document_type: DocumentType | None = Field(
        default=None, description="Required document type for DOCUMENT steps"
    )
    description: str = Field(..., description="What the user has to provide")

    model_config = ConfigDict(frozen=True)


def _personal_info() -> Step:
    return Step(
        step_id="personal_info",
        kind=StepKind.PERSONAL_INFO,
        description="Personal details: full name, date of birth, nationality and residential address",
    )


def _document(document_type: DocumentType, description: str) -> Step:
    return Step(
        step_id=document_type.value,
        kind=StepKind.DOCUMENT,
        document_type=document_type,
        description=description,
    )


BASE_DOCUMENT_TYPES: frozenset[DocumentType] = frozenset(
    {DocumentType.IDENTITY, DocumentType.ADDRESS}
)

_REQUIREMENTS: dict[Role, tuple[Step, ...]] = {
    Role.CONSUMER: (
        _personal_info(),
        _document(
            DocumentType.IDENTITY,
            "Government-issued ID (National ID, Passport, or Driver's License)",
        ),
        _document(
            DocumentType.ADDRESS,
            "Proof of address (Utility bill, Bank statement, or Government correspondence)",
        ),
    ),
    Role.MERCHANT: (
        _personal_info(),
        _document(DocumentType.IDENTITY, "Government-issued ID of business owner"),
        _document(DocumentType.ADDRESS, "Proof of business address"),
        _document(
            DocumentType.BUSINESS, "Business registration certificate and tax identification"
        ),
    ),
    Role.DRIVER: (
        _personal_info(),
        _document(DocumentType.IDENTITY, "Government-issued ID"),
        _document(DocumentType.ADDRESS, "Proof of residential address"),
        _document(DocumentType.DRIVER_LICENSE, "Valid driver's license"),
        _document(
            DocumentType.VEHICLE_REGISTRATION, "Vehicle registration and insurance documents"
        ),
    ),
}

_missing = set(Role) - set(_REQUIREMENTS)
if _missing:
    raise RuntimeError(f"Requirement catalog has no entry for roles: {sorted(r.value for r in _missing)}")
for _role, _steps in _REQUIREMENTS.items():
    if not _steps or _steps[0].kind is not StepKind.PERSONAL_INFO:
        raise RuntimeError(f"Requirement set for {_role.value} must start with personal info")
    if not BASE_DOCUMENT_TYPES <= {s.document_type for s in _steps}:
        raise RuntimeError(f"Requirement set for {_role.value} is missing a base document")


def resolve_role(role: Any) -> Role:
    """Coerce a Role or its string value, raising UnknownRoleError otherwise."""
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except (ValueError, TypeError):
        raise UnknownRoleError(role) from None


def get_steps(role: Role | str) -> list[Step]:
    """Ordered requirement steps for a role."""
    return list(_REQUIREMENTS[resolve_role(role)])


def get_required_document_types(role: Role | str) -> list[DocumentType]:
    return [s.document_type for s in get_steps(role) if s.document_type is not None]


def get_role_extra_types(role: Role | str) -> list[DocumentType]:
    """Document types a role requires beyond the base identity and address documents."""
    return [t for t in get_required_document_types(role) if t not in BASE_DOCUMENT_TYPES]


def known_roles() -> list[Role]:
    return list(_REQUIREMENTS)
