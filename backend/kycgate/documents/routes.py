"""
backend/kycgate/documents/routes.py

Document Routes
Lets the authenticated user list their documents and register new evidence.
The evidence files themselves live in external storage; only references are
submitted here.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.core.dependencies import get_current_user
from kycgate.core.limiter import limiter
from kycgate.core.schemas import CurrentUser
from kycgate.database.session import get_db
from kycgate.documents.schemas import DocumentRead, DocumentUpload
from kycgate.documents.services import DocumentStore
from kycgate.verification.cache import EvaluationCache, get_evaluation_cache
from kycgate.verification.services import VerificationService

router = APIRouter(prefix="/kyc/documents", tags=["Documents"])
logger = logging.getLogger(__name__)

DBDep = Annotated[AsyncSession, Depends(get_db)]
CacheDep = Annotated[EvaluationCache, Depends(get_evaluation_cache)]
AuthenticatedUserDep = Annotated[CurrentUser, Depends(get_current_user)]


@router.get(
    "",
    response_model=list[DocumentRead],
    status_code=status.HTTP_200_OK,
    summary="List My Documents",
    description="Every document the authenticated user submitted, oldest first, including superseded ones.",
)
@limiter.limit("30/minute")
async def list_my_documents(
    request: Request,
    db: DBDep,
    current_user: AuthenticatedUserDep,
) -> list[DocumentRead]:
    documents = await DocumentStore(db).list_for_user(current_user.id)
    return [DocumentRead.model_validate(d) for d in documents]


@router.post(
    "",
    response_model=DocumentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Document",
    description=(
        "Register a new document for review. Refused while the latest document of "
        "the same type is awaiting review or already approved."
    ),
)
@limiter.limit("10/minute")
async def upload_document(
    request: Request,
    payload: DocumentUpload,
    db: DBDep,
    cache: CacheDep,
    current_user: AuthenticatedUserDep,
) -> DocumentRead:
    """
    Register a document, then re-derive every role profile of the caller.
    """
    document = await DocumentStore(db).upload(
        current_user.id,
        payload.type,
        payload.evidence_refs,
        document_number=payload.document_number,
        expiry_date=payload.expiry_date,
    )
    await VerificationService(db, cache).after_mutation(current_user.id)
    return DocumentRead.model_validate(document)
