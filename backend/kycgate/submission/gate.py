"""
backend/kycgate/submission/gate.py

Submission Gate
Decides whether a role profile may be submitted for review and records the
submission. The decision is always taken on a fresh evaluation from the
database, never on a cached one.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.catalog.catalog import resolve_role
from kycgate.core.exceptions import ConflictError, NotFoundError, ValidationError
from kycgate.database.enums import DocumentStatus, ProfileStatus, Role
from kycgate.profiles.models import RoleProfile
from kycgate.verification.cache import EvaluationCache
from kycgate.verification.schemas import Evaluation
from kycgate.verification.services import VerificationService

logger = logging.getLogger(__name__)


def can_submit(role: Role | str, evaluation: Evaluation) -> bool:
    """True when every step of `role` is complete and nothing is pending or decided."""
    resolved = resolve_role(role)
    if evaluation.role != resolved:
        return False
    return evaluation.completion_percentage == 100 and evaluation.status == ProfileStatus.INCOMPLETE


class SubmissionGate:
    def __init__(self, db: AsyncSession, cache: EvaluationCache | None = None) -> None:
        self.verification = VerificationService(db, cache)

    async def submit(self, user_id: UUID, role: Role | str) -> RoleProfile:
        """
        Submit the `role` profile of `user_id` for review.

        Raises:
            NotFoundError: The role is not registered.
            ConflictError("AlreadySubmitted"): The profile is PENDING or VERIFIED.
            ValidationError: Steps are missing or a document was rejected.
        """
        resolved = resolve_role(role)
        profile, evaluation = await self.verification.evaluate_fresh(user_id, resolved)
        if profile is None:
            raise NotFoundError(f"Register as {resolved.value} before submitting.")

        if profile.status in (ProfileStatus.PENDING, ProfileStatus.VERIFIED):
            logger.info(
                f"[KYC] Submission refused for user {user_id} role {resolved.value}: "
                f"profile is {profile.status.value}"
            )
            raise ConflictError(
                "AlreadySubmitted", f"The {resolved.value} profile is already {profile.status.value.lower()}."
            )

        if not can_submit(resolved, evaluation):
            if evaluation.status == ProfileStatus.REJECTED:
                rejected = [s.step_id for s in evaluation.steps if s.document_status == DocumentStatus.REJECTED]
                message = f"Replace the rejected documents before submitting: {', '.join(rejected)}."
            else:
                message = f"Complete all required steps before submitting: {'; '.join(evaluation.next_steps)}."
            raise ValidationError(message, field="steps")

        submitted = await self.verification.profiles.submit(user_id, resolved)
        await self.verification.cache.invalidate(user_id)
        return submitted
