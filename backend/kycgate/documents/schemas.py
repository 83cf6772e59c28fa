"""
backend/kycgate/documents/schemas.py

Document Schemas
Defines Pydantic models for document upload requests and document views.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kycgate.core.config import settings
from kycgate.database.enums import DocumentStatus, DocumentType


# -----------------------------------------------------
# Schema for Uploading a Document
# -----------------------------------------------------
class DocumentUpload(BaseModel):
    """Schema for registering a new document against already-stored evidence."""

    type: DocumentType = Field(..., description="Kind of evidence being submitted")
    evidence_refs: list[str] = Field(
        ..., min_length=1, description="References to the stored evidence files (front, back, ...)"
    )
    document_number: str | None = Field(
        default=None, max_length=64, description="Number printed on the document"
    )
    expiry_date: date | None = Field(default=None, description="Expiry date printed on the document")

    @field_validator("evidence_refs")
    @classmethod
    def _check_refs(cls, refs: list[str]) -> list[str]:
        cleaned = [ref.strip() for ref in refs]
        if any(not ref for ref in cleaned):
            raise ValueError("Evidence references must not be empty.")
        if len(cleaned) > settings.MAX_EVIDENCE_REFS:
            raise ValueError(f"At most {settings.MAX_EVIDENCE_REFS} evidence references are allowed.")
        return cleaned

    @field_validator("document_number")
    @classmethod
    def _strip_number(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


# -----------------------------------------------------
# Schema for Reading a Document
# -----------------------------------------------------
class DocumentRead(BaseModel):
    """Full view of a document record."""

    id: UUID = Field(..., description="Unique identifier of the document")
    owner_id: UUID = Field(..., description="User who submitted the document")
    type: DocumentType = Field(..., description="Kind of evidence")
    status: DocumentStatus = Field(..., description="Review status (PENDING, APPROVED, REJECTED)")
    document_number: str | None = Field(default=None, description="Document number")
    evidence_refs: list[str] = Field(default_factory=list, description="Evidence references")
    expiry_date: date | None = Field(default=None, description="Expiry date")
    submitted_at: datetime = Field(..., description="Timestamp when the document was submitted")
    reviewed_at: datetime | None = Field(default=None, description="Timestamp of the review")
    reviewed_by: UUID | None = Field(default=None, description="Reviewer who decided it")
    rejection_reason: str | None = Field(default=None, description="Reason for rejection")

    model_config = ConfigDict(from_attributes=True)


# -----------------------------------------------------
# Schema for the Review Queue
# -----------------------------------------------------
class PendingDocumentItem(BaseModel):
    """Item in the reviewer's queue of pending documents."""

    id: UUID = Field(..., description="Document ID")
    owner_id: UUID = Field(..., description="User who submitted the document")
    type: DocumentType = Field(..., description="Kind of evidence")
    submitted_at: datetime = Field(..., description="Timestamp when the document was submitted")

    model_config = ConfigDict(from_attributes=True)
