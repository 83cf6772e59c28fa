"""
backend/kycgate/verification/schemas.py

Verification Schemas
Defines the derived evaluation of a role profile and its per-step breakdown.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from kycgate.database.enums import (
    DocumentStatus,
    DocumentType,
    ProfileStatus,
    Role,
    StepKind,
    VerificationLevel,
)


# -----------------------------------------------------
# Per-Step Result
# -----------------------------------------------------
class StepResult(BaseModel):
    """Outcome of one requirement step."""

    step_id: str = Field(..., description="Step identifier from the requirement catalog")
    kind: StepKind = Field(..., description="PERSONAL_INFO or DOCUMENT")
    document_type: DocumentType | None = Field(default=None, description="Required document type")
    completed: bool = Field(..., description="Evidence is in place and not rejected")
    approved: bool = Field(..., description="Evidence has been accepted")
    document_status: DocumentStatus | None = Field(
        default=None, description="Status of the latest document of this type"
    )
    rejection_reason: str | None = Field(
        default=None, description="Reason attached to the latest document when rejected"
    )

    model_config = ConfigDict(frozen=True)


# -----------------------------------------------------
# Evaluation
# -----------------------------------------------------
class Evaluation(BaseModel):
    """Verification state derived from the requirement catalog and a document snapshot."""

    role: Role = Field(..., description="Role that was evaluated")
    steps: list[StepResult] = Field(..., description="Per-step results in display order")
    completion_percentage: int = Field(..., ge=0, le=100, description="Completed share of steps")
    verification_level: VerificationLevel = Field(..., description="Derived trust tier")
    status: ProfileStatus = Field(..., description="Derived profile status")
    next_steps: list[str] = Field(default_factory=list, description="What is still missing")


class EvaluationRead(Evaluation):
    """Evaluation as served to callers, with freshness information."""

    user_id: UUID = Field(..., description="User the evaluation belongs to")
    evaluated_at: datetime = Field(..., description="When the evaluation was derived")
    registered: bool = Field(default=True, description="Whether the user holds a profile for the role")
    stale: bool = Field(
        default=False,
        description="True when served from the last known good copy because a refresh failed",
    )
