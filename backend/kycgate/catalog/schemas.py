"""
catalog/schemas.py

Response schemas for the requirement catalog.
"""

from pydantic import BaseModel, Field

from kycgate.catalog.catalog import Step
from kycgate.database.enums import Role


class RequirementsRead(BaseModel):
    """Requirement steps for one role, in display order."""

    role: Role = Field(..., description="Role the requirements apply to")
    steps: list[Step] = Field(..., description="Ordered requirement steps")
