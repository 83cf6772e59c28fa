"""
verification/evaluator.py

Verification Evaluator

Derives a role profile's per-step completion, completion percentage, verification
level and status from the requirement catalog, the user's personal details and a
snapshot of their documents. Pure and deterministic: no I/O, no clock.

Rules:
- Only the most recent document of each type (by submitted_at) counts.
- A step is `completed` when its evidence is in place: personal details present,
  or the latest document of the type exists and is not REJECTED.
- A step is `approved` when personal details are present, or the latest document
  of the type is APPROVED.
- Level is NONE below 100% completion. At 100% it is BASIC once personal details,
  identity and address are approved, and FULL once every role-specific extra is too.
- Status precedence: REJECTED > VERIFIED > PENDING (submission on record) > INCOMPLETE.
"""

import math
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from kycgate.catalog.catalog import BASE_DOCUMENT_TYPES, Step, get_steps, resolve_role
from kycgate.core.exceptions import TransientError
from kycgate.database.enums import (
    DocumentStatus,
    DocumentType,
    ProfileStatus,
    Role,
    StepKind,
    VerificationLevel,
)
from kycgate.verification.schemas import Evaluation, StepResult

REQUIRED_PERSONAL_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "date_of_birth",
    "nationality",
    "street",
    "city",
    "state",
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def latest_by_type(documents: Iterable[Any]) -> dict[DocumentType, Any]:
    """
    Most recent document per type. On equal timestamps the record that comes
    later in the snapshot wins.
    """
    ordered = sorted(documents, key=lambda d: _as_utc(d.submitted_at))
    latest: dict[DocumentType, Any] = {}
    for doc in ordered:
        latest[DocumentType(doc.type)] = doc
    return latest


def personal_info_complete(personal_info: Any | None) -> bool:
    if personal_info is None:
        return False
    for field in REQUIRED_PERSONAL_FIELDS:
        value = getattr(personal_info, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            return False
    return True


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class VerificationEvaluator:
    """Derives an Evaluation for one role."""

    def evaluate(
        self,
        role: Role | str,
        personal_info: Any | None,
        documents: Sequence[Any] | None,
        submitted: bool = False,
    ) -> Evaluation:
        """
        Evaluate a role against a document snapshot.

        Args:
            role: Role to evaluate.
            personal_info: Object exposing the personal detail fields, or None.
            documents: Every document of the user. None means the snapshot could
                not be fetched and is refused; an empty list means "nothing submitted".
            submitted: Whether a submission for review is on record.

        Raises:
            UnknownRoleError: For a role missing from the catalog.
            TransientError: When no snapshot was supplied.
        """
        resolved = resolve_role(role)
        if documents is None:
            raise TransientError("Document snapshot unavailable; refusing to evaluate without it.")

        steps = get_steps(resolved)
        latest = latest_by_type(documents)
        results = [self._evaluate_step(step, personal_info, latest) for step in steps]

        completed = sum(1 for r in results if r.completed)
        percentage = round_half_up(100 * completed / len(results))
        level = self._level(results, percentage)
        status = self._status(results, percentage, submitted)
        next_steps = [step.description for step, r in zip(steps, results) if not r.completed]

        return Evaluation(
            role=resolved,
            steps=results,
            completion_percentage=percentage,
            verification_level=level,
            status=status,
            next_steps=next_steps,
        )

    def _evaluate_step(
        self, step: Step, personal_info: Any | None, latest: dict[DocumentType, Any]
    ) -> StepResult:
        if step.kind is StepKind.PERSONAL_INFO:
            present = personal_info_complete(personal_info)
            return StepResult(
                step_id=step.step_id, kind=step.kind, completed=present, approved=present
            )

        if step.document_type is None:
            raise RuntimeError(f"Document step {step.step_id} has no document type")
        doc = latest.get(step.document_type)
        doc_status = DocumentStatus(doc.status) if doc is not None else None
        return StepResult(
            step_id=step.step_id,
            kind=step.kind,
            document_type=step.document_type,
            completed=doc_status in (DocumentStatus.PENDING, DocumentStatus.APPROVED),
            approved=doc_status is DocumentStatus.APPROVED,
            document_status=doc_status,
            rejection_reason=doc.rejection_reason if doc_status is DocumentStatus.REJECTED else None,
        )

    def _level(self, results: list[StepResult], percentage: int) -> VerificationLevel:
        if percentage < 100:
            return VerificationLevel.NONE
        base_approved = all(
            r.approved
            for r in results
            if r.kind is StepKind.PERSONAL_INFO or r.document_type in BASE_DOCUMENT_TYPES
        )
        if not base_approved:
            return VerificationLevel.NONE
        extras = [
            r for r in results if r.kind is StepKind.DOCUMENT and r.document_type not in BASE_DOCUMENT_TYPES
        ]
        if extras and all(r.approved for r in extras):
            return VerificationLevel.FULL
        return VerificationLevel.BASIC

    def _status(self, results: list[StepResult], percentage: int, submitted: bool) -> ProfileStatus:
        document_steps = [r for r in results if r.kind is StepKind.DOCUMENT]
        if any(r.document_status is DocumentStatus.REJECTED for r in document_steps):
            return ProfileStatus.REJECTED
        if percentage == 100 and all(r.approved for r in document_steps):
            return ProfileStatus.VERIFIED
        if submitted:
            return ProfileStatus.PENDING
        return ProfileStatus.INCOMPLETE


evaluator = VerificationEvaluator()
