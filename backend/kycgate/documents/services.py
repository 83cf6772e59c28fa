"""
backend/kycgate/documents/services.py

Document Store
Owns document records: listing a user's snapshot, registering uploads,
recording reviewer decisions and serving the pending review queue.

Decisions are applied with a single conditional UPDATE so that two concurrent
decisions on one document are serialized by the database: exactly one wins and
the other observes AlreadyReviewed.
"""

import logging
from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.core.exceptions import ConflictError, NotFoundError, ValidationError
from kycgate.database.enums import DocumentStatus, DocumentType, ReviewDecision
from kycgate.database.session import transient_guard
from kycgate.documents.models import Document

logger = logging.getLogger(__name__)


class DocumentStore:
    """Data access for documents. Every connectivity failure surfaces as TransientError."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------------------------------------------
    # Reads
    # ---------------------------------------------
    async def list_for_user(self, user_id: UUID) -> list[Document]:
        """Full document snapshot of a user, oldest first."""
        async with transient_guard(self.db, "listing documents"):
            result = await self.db.execute(
                select(Document)
                .filter(Document.owner_id == user_id)
                .order_by(Document.submitted_at.asc())
            )
            return list(result.scalars().all())

    async def get(self, document_id: UUID) -> Document:
        async with transient_guard(self.db, "loading a document"):
            document = await self.db.get(Document, document_id, populate_existing=True)
        if document is None:
            logger.warning(f"[DOCUMENT] Document not found: id={document_id}")
            raise NotFoundError(f"Document {document_id} not found.")
        return document

    async def _latest_of_type(self, user_id: UUID, document_type: DocumentType) -> Document | None:
        result = await self.db.execute(
            select(Document)
            .filter(Document.owner_id == user_id, Document.type == document_type)
            .order_by(Document.submitted_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def list_pending(self, skip: int = 0, limit: int = 100) -> tuple[list[Document], int]:
        """Pending documents, oldest first, with the total pending count."""
        async with transient_guard(self.db, "listing pending documents"):
            count = (
                await self.db.execute(
                    select(func.count(Document.id)).filter(Document.status == DocumentStatus.PENDING)
                )
            ).scalar_one()
            rows = await self.db.execute(
                select(Document)
                .filter(Document.status == DocumentStatus.PENDING)
                .order_by(Document.submitted_at.asc())
                .offset(skip)
                .limit(limit)
            )
            return list(rows.scalars().all()), count

    # ---------------------------------------------
    # Writes
    # ---------------------------------------------
    async def upload(
        self,
        user_id: UUID,
        document_type: DocumentType,
        evidence_refs: list[str],
        document_number: str | None = None,
        expiry_date: date | None = None,
    ) -> Document:
        """
        Register a new PENDING document.

        A type whose latest record is still PENDING or already APPROVED cannot
        take another upload; a REJECTED or missing type can.
        """
        if not evidence_refs:
            raise ValidationError("At least one evidence reference is required.", field="evidence_refs")
        now = datetime.now(timezone.utc)
        if expiry_date is not None and expiry_date < now.date():
            raise ValidationError("Document has expired.", field="expiry_date")

        async with transient_guard(self.db, "uploading a document"):
            latest = await self._latest_of_type(user_id, document_type)
            if latest is not None and latest.status == DocumentStatus.PENDING:
                raise ConflictError(
                    "AwaitingReview",
                    f"A {document_type.value} document is already awaiting review.",
                )
            if latest is not None and latest.status == DocumentStatus.APPROVED:
                raise ConflictError(
                    "AlreadyApproved", f"A {document_type.value} document is already approved."
                )

            document = Document(
                owner_id=user_id,
                type=document_type,
                status=DocumentStatus.PENDING,
                document_number=document_number,
                evidence_refs=list(evidence_refs),
                expiry_date=expiry_date,
                submitted_at=now,
            )
            self.db.add(document)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise ConflictError(
                    "AwaitingReview",
                    f"A {document_type.value} document is already awaiting review.",
                )
            await self.db.refresh(document)

        logger.info(
            f"[DOCUMENT] Uploaded {document_type.value} document {document.id} for user {user_id}"
        )
        return document

    async def decide(
        self,
        document_id: UUID,
        decision: ReviewDecision,
        reason: str | None = None,
        reviewer_id: UUID | None = None,
    ) -> Document:
        """
        Move a PENDING document to APPROVED or REJECTED.

        Raises:
            NotFoundError: Unknown document.
            ConflictError("AlreadyReviewed"): The document was already decided.
        """
        new_status = DocumentStatus(decision.value)
        values: dict[str, object] = {
            "status": new_status,
            "reviewed_at": datetime.now(timezone.utc),
            "reviewed_by": reviewer_id,
            "rejection_reason": reason if new_status == DocumentStatus.REJECTED else None,
        }

        async with transient_guard(self.db, "recording a review decision"):
            result = await self.db.execute(
                update(Document)
                .where(Document.id == document_id, Document.status == DocumentStatus.PENDING)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()

            if result.rowcount == 0:  # type: ignore[attr-defined]
                existing = await self.db.get(Document, document_id, populate_existing=True)
                if existing is None:
                    raise NotFoundError(f"Document {document_id} not found.")
                logger.info(
                    f"[DOCUMENT] Decision on {document_id} refused, already {existing.status.value}"
                )
                raise ConflictError(
                    "AlreadyReviewed", f"Document already {existing.status.value.lower()}."
                )

            document = await self.db.get(Document, document_id, populate_existing=True)

        if document is None:
            raise NotFoundError(f"Document {document_id} not found.")
        logger.info(f"[DOCUMENT] Document {document_id} -> {new_status.value}")
        return document
