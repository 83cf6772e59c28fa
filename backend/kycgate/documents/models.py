"""
documents/models.py

Defines SQLAlchemy models for the documents module:
- Document: One piece of identity evidence and its review state

Decided documents are never mutated again; a correction is a new row,
so earlier rows remain as an audit trail.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, Enum, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from kycgate.database.base import Base
from kycgate.database.enums import DocumentStatus, DocumentType


# ------------------------------------------------------
# Document Model
# ------------------------------------------------------
class Document(Base):
    """
    Represents a submitted identity document (identity, address, business,
    driver's license or vehicle registration) and its review outcome.
    """

    __tablename__ = "kyc_documents"
    __table_args__ = (
        Index("ix_kyc_documents_owner_type", "owner_id", "type"),
        Index("ix_kyc_documents_status_submitted", "status", "submitted_at"),
        # At most one document per (owner, type) may await review at a time.
        Index(
            "uq_kyc_documents_one_pending",
            "owner_id",
            "type",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
            sqlite_where=text("status = 'PENDING'"),
        ),
    )

    # -------------------------------------
    # Fields
    # -------------------------------------
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier for the document",
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, comment="User who submitted the document"
    )
    type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType), nullable=False, comment="Kind of evidence"
    )
    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus),
        default=DocumentStatus.PENDING,
        nullable=False,
        comment="Review status (PENDING, APPROVED, REJECTED)",
    )
    document_number: Mapped[str | None] = mapped_column(
        String(64), nullable=True, comment="Number printed on the document (optional)"
    )
    evidence_refs: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list, comment="Opaque references to stored evidence files"
    )
    expiry_date: Mapped[date | None] = mapped_column(
        Date, nullable=True, comment="Document expiry date (optional)"
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, comment="Timestamp when the document was submitted"
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="Timestamp when the document was reviewed"
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, nullable=True, comment="Reviewer who decided the document"
    )
    rejection_reason: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Reason given when the document was rejected"
    )
