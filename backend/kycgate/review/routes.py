"""
backend/kycgate/review/routes.py

Reviewer API Routes

Defines routes for document review:
- Listing the queue of pending documents
- Viewing a single document
- Approving or rejecting documents, one at a time or in a batch

All endpoints require Admin authentication.
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.core.dependencies import PaginationParams, require_admin
from kycgate.core.limiter import limiter
from kycgate.core.schemas import CurrentUser, PaginatedResponse
from kycgate.database.session import get_db
from kycgate.documents.models import Document
from kycgate.documents.schemas import DocumentRead, PendingDocumentItem
from kycgate.review.schemas import (
    BatchDecisionRequest,
    BatchDecisionResult,
    RejectRequest,
    ReviewActionResponse,
)
from kycgate.review.services import ReviewerWorkflow
from kycgate.verification.cache import EvaluationCache, get_evaluation_cache

# ---------------------------------------------------
# Router Configuration
# ---------------------------------------------------
router = APIRouter(prefix="/admin/kyc", tags=["Review"])
logger = logging.getLogger(__name__)

# ---------------------------------------------------
# Dependencies
# ---------------------------------------------------
DBDep = Annotated[AsyncSession, Depends(get_db)]
CacheDep = Annotated[EvaluationCache, Depends(get_evaluation_cache)]
AuthenticatedAdminDep = Annotated[CurrentUser, Depends(require_admin)]


def build_action_response(document: Document) -> ReviewActionResponse:
    if document.reviewed_at is None:
        raise RuntimeError(f"Document {document.id} has no review timestamp")
    return ReviewActionResponse(
        document_id=document.id,
        owner_id=document.owner_id,
        type=document.type,
        status=document.status,
        reviewed_at=document.reviewed_at,
        rejection_reason=document.rejection_reason,
    )


# ---------------------------------------------------
# Queue Endpoints
# ---------------------------------------------------
@router.get(
    "/pending",
    response_model=PaginatedResponse[PendingDocumentItem],
    status_code=status.HTTP_200_OK,
    summary="List Pending Documents",
    description="Documents awaiting review, oldest first. Requires Admin role.",
)
@limiter.limit("30/minute")
async def list_pending_documents(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedAdminDep,
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[PendingDocumentItem]:
    logger.info(f"[REVIEW] Admin {current_user.id} requested the pending queue.")
    documents, total_count = await ReviewerWorkflow(db).list_pending(
        skip=pagination.skip, limit=pagination.limit
    )
    return PaginatedResponse(
        total_count=total_count,
        has_next_page=(pagination.skip + pagination.limit) < total_count,
        items=[PendingDocumentItem.model_validate(d) for d in documents],
    )


@router.get(
    "/documents/{document_id}",
    response_model=DocumentRead,
    status_code=status.HTTP_200_OK,
    summary="Get Document Details",
    description="Full record of a single document. Requires Admin role.",
)
@limiter.limit("60/minute")
async def get_document_details(
    request: Request,
    document_id: UUID,
    db: DBDep,
    current_user: AuthenticatedAdminDep,
) -> DocumentRead:
    document = await ReviewerWorkflow(db).get_document(document_id)
    return DocumentRead.model_validate(document)


# ---------------------------------------------------
# Decision Endpoints
# ---------------------------------------------------
@router.put(
    "/documents/{document_id}/approve",
    response_model=ReviewActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Approve Document",
    description="Approve a pending document. Requires Admin role.",
)
@limiter.limit("30/minute")
async def approve_document(
    request: Request,
    document_id: UUID,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedAdminDep,
) -> ReviewActionResponse:
    """Approve a pending document and re-derive its owner's role profiles."""
    logger.info(f"[REVIEW] Admin {current_user.id} approving document {document_id}.")
    document = await ReviewerWorkflow(db, cache).approve(document_id, reviewer_id=current_user.id)
    return build_action_response(document)


@router.put(
    "/documents/{document_id}/reject",
    response_model=ReviewActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Reject Document",
    description="Reject a pending document with a reason shown to its owner. Requires Admin role.",
)
@limiter.limit("30/minute")
async def reject_document(
    request: Request,
    document_id: UUID,
    payload: RejectRequest,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedAdminDep,
) -> ReviewActionResponse:
    """Reject a pending document and re-derive its owner's role profiles."""
    logger.info(f"[REVIEW] Admin {current_user.id} rejecting document {document_id}.")
    document = await ReviewerWorkflow(db, cache).reject(
        document_id, payload.reason, reviewer_id=current_user.id
    )
    return build_action_response(document)


@router.post(
    "/documents/batch",
    response_model=list[BatchDecisionResult],
    status_code=status.HTTP_200_OK,
    summary="Decide Documents In Batch",
    description="Apply several decisions in order; each item reports its own outcome. Requires Admin role.",
)
@limiter.limit("10/minute")
async def batch_decide_documents(
    request: Request,
    payload: BatchDecisionRequest,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedAdminDep,
) -> list[BatchDecisionResult]:
    logger.info(f"[REVIEW] Admin {current_user.id} submitted {len(payload.items)} batch decisions.")
    return await ReviewerWorkflow(db, cache).batch_decide(payload.items, reviewer_id=current_user.id)
