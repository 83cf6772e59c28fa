"""
backend/kycgate/review/services.py

Reviewer Workflow
Reviewer decisions on documents and the pending review queue.

Each decision is committed by the document store first; only then is the
owner's cached evaluation dropped and every role profile of the owner
re-derived from the committed state.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.core.config import settings
from kycgate.core.exceptions import KYCError, ValidationError
from kycgate.database.enums import ReviewDecision
from kycgate.documents.models import Document
from kycgate.documents.services import DocumentStore
from kycgate.review.schemas import BatchDecisionItem, BatchDecisionResult
from kycgate.verification.cache import EvaluationCache
from kycgate.verification.services import VerificationService

logger = logging.getLogger(__name__)


def validate_rejection_reason(reason: str | None) -> str:
    """Return the stripped reason, or raise ValidationError."""
    cleaned = (reason or "").strip()
    if len(cleaned) < settings.MIN_REJECTION_REASON_LENGTH:
        raise ValidationError(
            f"Rejection reason must be at least {settings.MIN_REJECTION_REASON_LENGTH} characters.",
            field="reason",
        )
    if len(cleaned) > settings.MAX_REJECTION_REASON_LENGTH:
        raise ValidationError(
            f"Rejection reason must not exceed {settings.MAX_REJECTION_REASON_LENGTH} characters.",
            field="reason",
        )
    return cleaned


class ReviewerWorkflow:
    """Applies reviewer decisions and serves the review queue."""

    def __init__(self, db: AsyncSession, cache: EvaluationCache | None = None) -> None:
        self.db = db
        self.documents = DocumentStore(db)
        self.verification = VerificationService(db, cache)

    # ---------------------------------------------
    # Queue
    # ---------------------------------------------
    async def list_pending(self, skip: int = 0, limit: int = 100) -> tuple[list[Document], int]:
        return await self.documents.list_pending(skip=skip, limit=limit)

    async def get_document(self, document_id: UUID) -> Document:
        return await self.documents.get(document_id)

    # ---------------------------------------------
    # Decisions
    # ---------------------------------------------
    async def approve(self, document_id: UUID, reviewer_id: UUID | None = None) -> Document:
        document = await self.documents.decide(
            document_id, ReviewDecision.APPROVED, reviewer_id=reviewer_id
        )
        logger.info(f"[REVIEW] Reviewer {reviewer_id} approved document {document_id}")
        await self.verification.after_mutation(document.owner_id)
        return document

    async def reject(
        self, document_id: UUID, reason: str, reviewer_id: UUID | None = None
    ) -> Document:
        """
        Reject a pending document. The reason is validated before anything is
        written.
        """
        cleaned = validate_rejection_reason(reason)
        document = await self.documents.decide(
            document_id, ReviewDecision.REJECTED, reason=cleaned, reviewer_id=reviewer_id
        )
        logger.info(f"[REVIEW] Reviewer {reviewer_id} rejected document {document_id}: {cleaned}")
        await self.verification.after_mutation(document.owner_id)
        return document

    async def batch_decide(
        self, items: list[BatchDecisionItem], reviewer_id: UUID | None = None
    ) -> list[BatchDecisionResult]:
        """Apply decisions one by one; a failing item is reported, not raised."""
        results: list[BatchDecisionResult] = []
        for item in items:
            try:
                if item.decision == ReviewDecision.APPROVED:
                    document = await self.approve(item.document_id, reviewer_id)
                else:
                    document = await self.reject(item.document_id, item.reason or "", reviewer_id)
            except KYCError as e:
                logger.info(f"[REVIEW] Batch item {item.document_id} failed: {e.code} {e.message}")
                results.append(
                    BatchDecisionResult(
                        document_id=item.document_id,
                        success=False,
                        error=e.code,
                        reason=getattr(e, "reason", None),
                        message=e.message,
                    )
                )
                continue
            results.append(
                BatchDecisionResult(document_id=item.document_id, success=True, status=document.status)
            )

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"[REVIEW] Batch by {reviewer_id}: {succeeded}/{len(results)} decisions recorded")
        return results
