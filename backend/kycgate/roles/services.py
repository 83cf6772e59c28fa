"""
backend/kycgate/roles/services.py

Role Service Layer
Registration of capability roles, the session's active role and access decisions.

The active role of a session is only ever changed here, and only to a role whose
freshly derived status is VERIFIED. The switch is committed before the in-memory
session is updated, so a failed switch leaves the previous role in place.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.catalog.catalog import resolve_role
from kycgate.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from kycgate.database.enums import ProfileStatus, Role
from kycgate.database.session import transient_guard
from kycgate.profiles.models import BusinessInfo, DriverInfo, PersonalInfo, RoleProfile
from kycgate.profiles.services import BusinessInfoStore, DriverInfoStore
from kycgate.roles.models import UserSession
from kycgate.roles.schemas import AccessDecision, SwitchRoleResponse
from kycgate.verification.cache import EvaluationCache
from kycgate.verification.services import VerificationService

logger = logging.getLogger(__name__)

# Where a user is sent when a role is not yet usable.
REMEDIATION_HINTS: dict[ProfileStatus, str] = {
    ProfileStatus.PENDING: "await_review",
    ProfileStatus.REJECTED: "resubmit",
    ProfileStatus.INCOMPLETE: "complete_profile",
    ProfileStatus.UNREGISTERED: "register",
}


# ---------------------------------------------
# Session Store
# ---------------------------------------------
class SessionStore:
    """Persists the explicit session context that holds the active role."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_or_create(self, session_id: str, user_id: UUID) -> UserSession:
        async with transient_guard(self.db, "loading a session"):
            session = await self.db.get(UserSession, session_id, populate_existing=True)
            if session is None:
                session = UserSession(id=session_id, user_id=user_id)
                self.db.add(session)
                try:
                    await self.db.commit()
                except IntegrityError:
                    # Created concurrently by another request of the same session.
                    await self.db.rollback()
                    session = await self.db.get(UserSession, session_id, populate_existing=True)
                    if session is None:
                        raise NotFoundError(f"Session {session_id} not found.")
                else:
                    await self.db.refresh(session)
                    logger.debug(f"[ROLE] Opened session {session_id} for user {user_id}")

        if session.user_id != user_id:
            logger.warning(f"[ROLE] Session {session_id} presented by non-owner {user_id}")
            raise AuthorizationError("SessionMismatch", "Session does not belong to this user.")
        return session

    async def switch_current_role(self, session_id: str, user_id: UUID, role: Role) -> UserSession:
        async with transient_guard(self.db, "switching the session role"):
            result = await self.db.execute(
                update(UserSession)
                .where(UserSession.id == session_id, UserSession.user_id == user_id)
                .values(current_role=role)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            if result.rowcount == 0:  # type: ignore[attr-defined]
                raise NotFoundError(f"Session {session_id} not found.")
            session = await self.db.get(UserSession, session_id, populate_existing=True)

        if session is None:
            raise NotFoundError(f"Session {session_id} not found.")
        return session


# ---------------------------------------------
# Role Authorizer
# ---------------------------------------------
class RoleAuthorizer:
    """Registers roles, answers access questions and switches the active role."""

    def __init__(self, db: AsyncSession, cache: EvaluationCache | None = None) -> None:
        self.db = db
        self.verification = VerificationService(db, cache)
        self.profiles = self.verification.profiles
        self.sessions = SessionStore(db)
        self.business_info = BusinessInfoStore(db)
        self.driver_info = DriverInfoStore(db)

    # ---------------------------------------------
    # Registration
    # ---------------------------------------------
    async def register_role(self, user_id: UUID, role: Role | str) -> RoleProfile:
        """
        Register `user_id` for `role` and derive its status right away, so that
        already approved shared documents count towards it.
        """
        resolved = resolve_role(role)
        await self.profiles.register(user_id, resolved)
        profile, _ = await self.verification.evaluate_fresh(user_id, resolved)
        await self.verification.cache.invalidate(user_id)
        if profile is None:
            raise NotFoundError(f"No {resolved.value} profile for user {user_id}.")
        logger.info(f"[ROLE] {resolved.value} profile of user {user_id} is {profile.status.value}")
        return profile

    async def save_personal_info(self, user_id: UUID, data: dict[str, Any]) -> PersonalInfo:
        """
        Store personal details. A user without any role profile is registered
        as a consumer by supplying them.
        """
        info = await self.verification.personal_info.upsert(user_id, data)
        if not await self.profiles.list_for_user(user_id):
            try:
                await self.profiles.register(user_id, Role.CONSUMER)
            except ConflictError:
                logger.debug(f"[ROLE] Consumer profile of user {user_id} registered concurrently")
        await self.verification.after_mutation(user_id)
        return info

    async def save_business_info(self, user_id: UUID, data: dict[str, Any]) -> BusinessInfo:
        """Store the business details of a registered merchant."""
        await self._require_registered(user_id, Role.MERCHANT)
        return await self.business_info.upsert(user_id, data)

    async def save_driver_info(self, user_id: UUID, data: dict[str, Any]) -> DriverInfo:
        """Store the license and vehicle details of a registered driver."""
        await self._require_registered(user_id, Role.DRIVER)
        return await self.driver_info.upsert(user_id, data)

    async def _require_registered(self, user_id: UUID, role: Role) -> None:
        if await self.profiles.get(user_id, role) is None:
            raise AuthorizationError(
                "NotRegistered", f"Register as {role.value} first.", hint=REMEDIATION_HINTS[ProfileStatus.UNREGISTERED]
            )

    async def get_available_roles(self, user_id: UUID) -> list[RoleProfile]:
        """Registered roles of `user_id` with their stored status."""
        return await self.profiles.list_for_user(user_id)

    # ---------------------------------------------
    # Access Decisions
    # ---------------------------------------------
    async def check_access(self, user_id: UUID, role: Role | str) -> AccessDecision:
        resolved = resolve_role(role)
        profile, evaluation = await self.verification.evaluate_fresh(user_id, resolved)
        if profile is None:
            return AccessDecision(
                role=resolved,
                has_access=False,
                reason="NotRegistered",
                requires_registration=True,
                requires_verification=True,
                status=ProfileStatus.UNREGISTERED,
            )
        if evaluation.status != ProfileStatus.VERIFIED:
            return AccessDecision(
                role=resolved,
                has_access=False,
                reason="NotVerified",
                requires_registration=False,
                requires_verification=True,
                status=evaluation.status,
            )
        return AccessDecision(
            role=resolved,
            has_access=True,
            requires_registration=False,
            requires_verification=False,
            status=ProfileStatus.VERIFIED,
        )

    async def _require_verified(self, user_id: UUID, role: Role) -> None:
        decision = await self.check_access(user_id, role)
        if decision.has_access:
            return
        if decision.requires_registration:
            raise AuthorizationError(
                "NotRegistered", f"Register as {role.value} first.", hint=REMEDIATION_HINTS[ProfileStatus.UNREGISTERED]
            )
        current = decision.status or ProfileStatus.INCOMPLETE
        raise AuthorizationError(
            "NotVerified",
            f"The {role.value} profile is {current.value.lower()}.",
            status=current.value,
            hint=REMEDIATION_HINTS.get(current),
        )

    # ---------------------------------------------
    # Session Role
    # ---------------------------------------------
    async def switch_role(self, session: UserSession, target_role: Role | str) -> SwitchRoleResponse:
        """
        Make `target_role` the active role of `session`.

        Raises:
            AuthorizationError("NotRegistered"): No profile for the role.
            AuthorizationError("NotVerified"): The profile is not VERIFIED.
        """
        resolved = resolve_role(target_role)
        await self._require_verified(session.user_id, resolved)

        previous = session.current_role
        if previous == resolved:
            return SwitchRoleResponse(
                previous_role=previous,
                current_role=resolved,
                switched=False,
                detail=f"Already acting as {resolved.value}.",
            )

        await self.sessions.switch_current_role(session.id, session.user_id, resolved)
        session.current_role = resolved
        logger.info(
            f"[ROLE] Session {session.id} of user {session.user_id} switched "
            f"{previous.value if previous else None} -> {resolved.value}"
        )
        return SwitchRoleResponse(
            previous_role=previous,
            current_role=resolved,
            switched=True,
            detail=f"Switched to {resolved.value}.",
        )

    def get_current_role(self, session: UserSession) -> Role | None:
        return session.current_role
