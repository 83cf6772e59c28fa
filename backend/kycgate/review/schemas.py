"""
backend/kycgate/review/schemas.py

Review Schemas
Defines Pydantic models for reviewer decisions on documents.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from kycgate.database.enums import DocumentStatus, DocumentType, ReviewDecision


# -----------------------------------------------------
# Schemas for Single Decisions
# -----------------------------------------------------
class RejectRequest(BaseModel):
    """Body of a rejection. The reason is shown to the document owner."""

    reason: str = Field(..., description="Why the document was rejected")


class ReviewActionResponse(BaseModel):
    """
    Schema returned after a reviewer approves or rejects a document.
    """

    document_id: UUID = Field(..., description="Reviewed document")
    owner_id: UUID = Field(..., description="User who submitted the document")
    type: DocumentType = Field(..., description="Kind of evidence")
    status: DocumentStatus = Field(..., description="Status after review (APPROVED or REJECTED)")
    reviewed_at: datetime = Field(..., description="Timestamp of the review")
    rejection_reason: str | None = Field(default=None, description="Reason when rejected")


# -----------------------------------------------------
# Schemas for Batch Decisions
# -----------------------------------------------------
class BatchDecisionItem(BaseModel):
    document_id: UUID = Field(..., description="Document to decide")
    decision: ReviewDecision = Field(..., description="APPROVED or REJECTED")
    reason: str | None = Field(default=None, description="Required when rejecting")


class BatchDecisionRequest(BaseModel):
    items: list[BatchDecisionItem] = Field(
        ..., min_length=1, max_length=100, description="Decisions, applied in order"
    )


class BatchDecisionResult(BaseModel):
    """Outcome of one item of a batch; failures do not abort the batch."""

    document_id: UUID = Field(..., description="Document the item referred to")
    success: bool = Field(..., description="Whether the decision was recorded")
    status: DocumentStatus | None = Field(default=None, description="Document status afterwards")
    error: str | None = Field(default=None, description="Error kind when the item failed")
    reason: str | None = Field(default=None, description="Conflict reason when the item failed")
    message: str | None = Field(default=None, description="Error message when the item failed")
