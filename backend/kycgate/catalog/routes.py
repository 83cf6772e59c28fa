"""
backend/kycgate/catalog/routes.py

Requirement Catalog Routes

Public, read-only access to what each role requires before it can be submitted.
"""

from fastapi import APIRouter, Request, status

from kycgate.catalog.catalog import get_steps, resolve_role
from kycgate.catalog.schemas import RequirementsRead
from kycgate.core.limiter import limiter

router = APIRouter(prefix="/kyc/requirements", tags=["Requirements"])


@router.get(
    "/{role}",
    response_model=RequirementsRead,
    status_code=status.HTTP_200_OK,
    summary="Get Role Requirements",
    description="List the ordered requirement steps for a role.",
)
@limiter.limit("60/minute")
async def get_role_requirements(request: Request, role: str) -> RequirementsRead:
    """Return the requirement steps for the given role value."""
    resolved = resolve_role(role)
    return RequirementsRead(role=resolved, steps=get_steps(resolved))
