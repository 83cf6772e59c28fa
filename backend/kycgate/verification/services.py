"""
backend/kycgate/verification/services.py

Verification Service Layer
Loads the authoritative snapshot for a user, runs the evaluator over it and keeps
stored role profiles in step with the result.

- Gates call `evaluate_fresh`, which always reads the database.
- Mutations call `after_mutation` once their own commit succeeded: the cached
  evaluations of the owner are dropped, then every profile of the owner is
  re-derived, persisted and cached again.
- Status reads go through `get_status`, which falls back to the last known good
  evaluation (marked stale) when the backend is unavailable.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.catalog.catalog import resolve_role
from kycgate.core.exceptions import TransientError
from kycgate.database.enums import ProfileStatus, Role
from kycgate.documents.services import DocumentStore
from kycgate.profiles.models import RoleProfile
from kycgate.profiles.services import PersonalInfoStore, RoleProfileStore
from kycgate.verification.cache import EvaluationCache
from kycgate.verification.evaluator import evaluator
from kycgate.verification.schemas import Evaluation, EvaluationRead

logger = logging.getLogger(__name__)


class VerificationService:
    """Runs evaluations against the authoritative store and persists their outcome."""

    def __init__(self, db: AsyncSession, cache: EvaluationCache | None = None) -> None:
        self.db = db
        self.cache = cache or EvaluationCache()
        self.documents = DocumentStore(db)
        self.personal_info = PersonalInfoStore(db)
        self.profiles = RoleProfileStore(db)

    # ---------------------------------------------
    # Fresh Evaluation
    # ---------------------------------------------
    async def _snapshot(self, user_id: UUID) -> tuple[Any, list[Any]]:
        personal_info = await self.personal_info.get(user_id)
        documents = await self.documents.list_for_user(user_id)
        return personal_info, documents

    async def evaluate_fresh(
        self, user_id: UUID, role: Role | str
    ) -> tuple[RoleProfile | None, Evaluation]:
        """
        Derive the current evaluation of `role` for `user_id` from the database
        and bring the stored profile in line with it.

        Returns the stored profile (None when the role is not registered) and
        the evaluation.
        """
        resolved = resolve_role(role)
        profile = await self.profiles.get(user_id, resolved)
        personal_info, documents = await self._snapshot(user_id)
        evaluation = evaluator.evaluate(
            resolved,
            personal_info,
            documents,
            submitted=profile.is_submitted if profile is not None else False,
        )
        if profile is not None:
            profile = await self.profiles.apply_evaluation(profile, evaluation)
        return profile, evaluation

    def _to_read(
        self, user_id: UUID, evaluation: Evaluation, registered: bool
    ) -> EvaluationRead:
        data = evaluation.model_dump()
        if not registered:
            data["status"] = ProfileStatus.UNREGISTERED
        return EvaluationRead(
            **data,
            user_id=user_id,
            evaluated_at=datetime.now(timezone.utc),
            registered=registered,
        )

    # ---------------------------------------------
    # Post-Mutation Refresh
    # ---------------------------------------------
    async def refresh_profiles(self, user_id: UUID) -> list[RoleProfile]:
        """Re-derive and persist every profile of `user_id`. Idempotent."""
        profiles = await self.profiles.list_for_user(user_id)
        if not profiles:
            return []
        personal_info, documents = await self._snapshot(user_id)

        refreshed: list[RoleProfile] = []
        for profile in profiles:
            evaluation = evaluator.evaluate(
                profile.role, personal_info, documents, submitted=profile.is_submitted
            )
            stored = await self.profiles.apply_evaluation(profile, evaluation)
            await self.cache.store(self._to_read(user_id, evaluation, registered=True))
            refreshed.append(stored)
        return refreshed

    async def after_mutation(self, user_id: UUID) -> None:
        """
        Called once a mutation affecting `user_id` has committed.

        A refresh that cannot reach the backend is logged; the next status read
        or gate check derives the state again from the database.
        """
        await self.cache.invalidate(user_id)
        try:
            refreshed = await self.refresh_profiles(user_id)
        except TransientError as e:
            logger.error(f"[KYC] Profile refresh deferred for user {user_id}: {e.message}")
            return
        logger.debug(f"[KYC] Refreshed {len(refreshed)} profile(s) for user {user_id}")

    # ---------------------------------------------
    # Status Read
    # ---------------------------------------------
    async def get_status(self, user_id: UUID, role: Role | str) -> EvaluationRead:
        """
        Fresh evaluation of `role`, stored as the last known good copy.

        Raises:
            TransientError: The backend is down and no earlier evaluation is cached.
        """
        resolved = resolve_role(role)
        try:
            profile, evaluation = await self.evaluate_fresh(user_id, resolved)
        except TransientError:
            cached = await self.cache.get(user_id, resolved)
            if cached is None:
                raise
            logger.warning(
                f"[KYC] Serving stale {resolved.value} evaluation for user {user_id} "
                f"from {cached.evaluated_at.isoformat()}"
            )
            return cached.model_copy(update={"stale": True})

        result = self._to_read(user_id, evaluation, registered=profile is not None)
        await self.cache.store(result)
        return result
