"""
backend/kycgate/profiles/services.py

Profile Stores
Owns the personal, business and driver details and the per-role profile records.

RoleProfile status is only ever written from a committed evaluation, through
`RoleProfileStore.apply_evaluation`, and every write is guarded by the version
that was read. Submission uses its own conditional update so that duplicate
retries never record two submissions.
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kycgate.core.exceptions import ConflictError, NotFoundError
from kycgate.database.enums import ProfileStatus, Role
from kycgate.database.session import transient_guard
from kycgate.profiles.models import BusinessInfo, DriverInfo, PersonalInfo, RoleProfile
from kycgate.verification.schemas import Evaluation

logger = logging.getLogger(__name__)

# Stored status transitions a committed evaluation may perform.
# INCOMPLETE -> PENDING is reserved for `RoleProfileStore.submit`.
ALLOWED_TRANSITIONS: dict[ProfileStatus, frozenset[ProfileStatus]] = {
    ProfileStatus.UNREGISTERED: frozenset({ProfileStatus.INCOMPLETE}),
    ProfileStatus.INCOMPLETE: frozenset({ProfileStatus.VERIFIED, ProfileStatus.REJECTED}),
    ProfileStatus.PENDING: frozenset({ProfileStatus.VERIFIED, ProfileStatus.REJECTED}),
    ProfileStatus.REJECTED: frozenset({ProfileStatus.INCOMPLETE}),
    ProfileStatus.VERIFIED: frozenset(),
}


def is_allowed_transition(current: ProfileStatus, target: ProfileStatus) -> bool:
    return target == current or target in ALLOWED_TRANSITIONS[current]


def transition_path(current: ProfileStatus, target: ProfileStatus) -> list[ProfileStatus] | None:
    """
    Stored statuses to write, in order, to move from `current` to `target`.

    Empty when nothing changes, None when `target` is unreachable. Only INCOMPLETE
    may be passed through on the way, e.g. REJECTED -> INCOMPLETE -> VERIFIED
    when the replacement upload was never refreshed on its own.
    """
    if target == current:
        return []
    if target in ALLOWED_TRANSITIONS[current]:
        return [target]
    if (
        ProfileStatus.INCOMPLETE in ALLOWED_TRANSITIONS[current]
        and target in ALLOWED_TRANSITIONS[ProfileStatus.INCOMPLETE]
    ):
        return [ProfileStatus.INCOMPLETE, target]
    return None


# ---------------------------------------------
# Personal, Business and Driver Details
# ---------------------------------------------
class DetailStore:
    """Reads and writes a one-row-per-user details table."""

    model: type[PersonalInfo] | type[BusinessInfo] | type[DriverInfo]
    label: str

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, user_id: UUID):
        async with transient_guard(self.db, f"loading {self.label}"):
            return await self.db.get(self.model, user_id, populate_existing=True)

    async def upsert(self, user_id: UUID, data: dict[str, Any]):
        """Create or replace the details of `user_id`."""
        async with transient_guard(self.db, f"saving {self.label}"):
            info = await self.db.get(self.model, user_id)
            created = info is None
            if info is None:
                info = self.model(user_id=user_id)
                self.db.add(info)
            for field, value in data.items():
                setattr(info, field, value)
            await self.db.commit()
            await self.db.refresh(info)

        logger.info(f"[KYC] {self.label.capitalize()} {'created' if created else 'updated'} for user {user_id}")
        return info


class PersonalInfoStore(DetailStore):
    """Reads and writes the personal details of a user."""

    model = PersonalInfo
    label = "personal details"


class BusinessInfoStore(DetailStore):
    """Reads and writes the business details of a merchant."""

    model = BusinessInfo
    label = "business details"


class DriverInfoStore(DetailStore):
    """Reads and writes the license and vehicle details of a driver."""

    model = DriverInfo
    label = "driver details"


# ---------------------------------------------
# Role Profiles
# ---------------------------------------------
class RoleProfileStore:
    """Data access for role profiles. Connectivity failures surface as TransientError."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_for_user(self, user_id: UUID) -> list[RoleProfile]:
        async with transient_guard(self.db, "listing role profiles"):
            result = await self.db.execute(
                select(RoleProfile)
                .filter(RoleProfile.user_id == user_id)
                .order_by(RoleProfile.created_at.asc())
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())

    async def get(self, user_id: UUID, role: Role) -> RoleProfile | None:
        async with transient_guard(self.db, "loading a role profile"):
            result = await self.db.execute(
                select(RoleProfile)
                .filter(RoleProfile.user_id == user_id, RoleProfile.role == role)
                .execution_options(populate_existing=True)
            )
            return result.scalars().first()

    async def register(self, user_id: UUID, role: Role) -> RoleProfile:
        """
        Create the profile of `user_id` for `role` in INCOMPLETE state.

        Raises:
            ConflictError("AlreadyRegistered"): The user already holds this role.
        """
        async with transient_guard(self.db, "registering a role"):
            existing = await self.get(user_id, role)
            if existing is not None:
                raise ConflictError("AlreadyRegistered", f"Already registered as {role.value}.")

            profile = RoleProfile(user_id=user_id, role=role, status=ProfileStatus.INCOMPLETE)
            self.db.add(profile)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise ConflictError("AlreadyRegistered", f"Already registered as {role.value}.")
            await self.db.refresh(profile)

        logger.info(
            f"[ROLE] User {user_id} registered as {role.value}: "
            f"{ProfileStatus.UNREGISTERED.value} -> {ProfileStatus.INCOMPLETE.value}"
        )
        return profile

    async def submit(self, user_id: UUID, role: Role) -> RoleProfile:
        """
        Record a submission for review: INCOMPLETE -> PENDING.

        Raises:
            NotFoundError: The user holds no profile for `role`.
            ConflictError("AlreadySubmitted"): The profile is no longer INCOMPLETE.
        """
        now = datetime.now(timezone.utc)
        async with transient_guard(self.db, "submitting a role profile"):
            result = await self.db.execute(
                update(RoleProfile)
                .where(
                    RoleProfile.user_id == user_id,
                    RoleProfile.role == role,
                    RoleProfile.status == ProfileStatus.INCOMPLETE,
                )
                .values(
                    status=ProfileStatus.PENDING,
                    is_submitted=True,
                    submitted_at=now,
                    version=RoleProfile.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()

            profile = await self.get(user_id, role)
            if profile is None:
                raise NotFoundError(f"No {role.value} profile for this user.")
            if result.rowcount == 0:  # type: ignore[attr-defined]
                logger.info(
                    f"[KYC] Duplicate submission refused for user {user_id} role {role.value} "
                    f"(status {profile.status.value})"
                )
                raise ConflictError("AlreadySubmitted", f"The {role.value} profile was already submitted.")

        logger.info(f"[KYC] User {user_id} submitted {role.value} profile for review")
        return profile

    async def apply_evaluation(self, profile: RoleProfile, evaluation: Evaluation) -> RoleProfile:
        """
        Persist a committed evaluation onto `profile`.

        The write is skipped when nothing changed, when the derived status is not
        reachable from the stored one, or when another writer bumped the version
        first. A corrected rejection that was never refreshed in between is walked
        through INCOMPLETE, one version-guarded write per step. Returns the stored
        profile as it stands afterwards.
        """
        current = profile.status
        version = profile.version
        target = evaluation.status
        path = transition_path(current, target)
        if path is None:
            logger.warning(
                f"[KYC] Ignoring transition {current.value} -> {target.value} "
                f"for profile {profile.id} ({profile.role.value})"
            )
            return profile

        if (
            not path
            and profile.completion_percentage == evaluation.completion_percentage
            and profile.verification_level == evaluation.verification_level
        ):
            return profile

        profile_id, role = profile.id, profile.role
        stored = profile
        previous = current
        steps = path or [current]
        for index, step in enumerate(steps):
            values: dict[str, Any] = {"status": step, "version": version + 1}
            if index == len(steps) - 1:
                values["completion_percentage"] = evaluation.completion_percentage
                values["verification_level"] = evaluation.verification_level
            if step == ProfileStatus.VERIFIED and previous != ProfileStatus.VERIFIED:
                values["verified_at"] = datetime.now(timezone.utc)
            if step == ProfileStatus.REJECTED:
                values["is_submitted"] = False

            async with transient_guard(self.db, "updating a role profile"):
                result = await self.db.execute(
                    update(RoleProfile)
                    .where(RoleProfile.id == profile_id, RoleProfile.version == version)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                await self.db.commit()
                reloaded = await self.db.get(RoleProfile, profile_id, populate_existing=True)

            if reloaded is None:
                raise NotFoundError(f"Role profile {profile_id} not found.")
            stored = reloaded
            if result.rowcount == 0:  # type: ignore[attr-defined]
                logger.warning(
                    f"[KYC] Stale write dropped for profile {profile_id}: "
                    f"version {version} superseded by {stored.version}"
                )
                return stored

            if step != previous:
                logger.info(f"[KYC] Profile {profile_id} ({role.value}) {previous.value} -> {step.value}")
            previous = step
            version += 1
        return stored
