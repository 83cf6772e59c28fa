"""
tests/verification/test_evaluator.py

Unit tests for the verification evaluator: per-step completion, completion
percentage, verification level, derived status and the missing-snapshot refusal.
"""

import itertools
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any

import pytest

from kycgate.core.exceptions import TransientError, UnknownRoleError
from kycgate.database.enums import (
    DocumentStatus,
    DocumentType,
    ProfileStatus,
    Role,
    VerificationLevel,
)
from kycgate.verification.evaluator import latest_by_type, round_half_up, evaluator

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_info(**overrides: Any) -> SimpleNamespace:
    data = {
        "first_name": "Ada",
        "last_name": "Okafor",
        "date_of_birth": date(1990, 5, 17),
        "nationality": "Nigerian",
        "street": "12 Marina Road, Victoria Island",
        "city": "Lagos",
        "state": "Lagos",
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def make_doc(
    doc_type: DocumentType,
    status: DocumentStatus = DocumentStatus.PENDING,
    minutes: int = 0,
    reason: str | None = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        type=doc_type,
        status=status,
        submitted_at=BASE_TIME + timedelta(minutes=minutes),
        rejection_reason=reason,
    )


def approved(*types: DocumentType) -> list[SimpleNamespace]:
    return [make_doc(t, DocumentStatus.APPROVED, minutes=i) for i, t in enumerate(types)]


# --- Completion ---


def test_empty_snapshot_is_incomplete() -> None:
    result = evaluator.evaluate(Role.CONSUMER, None, [])

    assert result.completion_percentage == 0
    assert result.verification_level is VerificationLevel.NONE
    assert result.status is ProfileStatus.INCOMPLETE
    assert len(result.next_steps) == 3


def test_personal_info_counts_on_presence() -> None:
    result = evaluator.evaluate(Role.CONSUMER, make_info(), [])

    assert result.completion_percentage == 33
    assert result.steps[0].completed and result.steps[0].approved


def test_blank_required_field_leaves_personal_info_incomplete() -> None:
    result = evaluator.evaluate(Role.CONSUMER, make_info(city="  "), [])

    assert not result.steps[0].completed
    assert result.completion_percentage == 0


def test_pending_documents_count_as_completed_but_not_approved() -> None:
    docs = [make_doc(DocumentType.IDENTITY), make_doc(DocumentType.ADDRESS)]
    result = evaluator.evaluate(Role.CONSUMER, make_info(), docs)

    assert result.completion_percentage == 100
    assert result.status is ProfileStatus.INCOMPLETE
    assert result.verification_level is VerificationLevel.NONE
    assert not any(s.approved for s in result.steps[1:])
    assert result.next_steps == []


def test_rejected_document_is_excluded_from_completion() -> None:
    docs = [
        make_doc(DocumentType.IDENTITY, DocumentStatus.APPROVED),
        make_doc(DocumentType.ADDRESS, DocumentStatus.REJECTED, reason="Blurry"),
    ]
    result = evaluator.evaluate(Role.CONSUMER, make_info(), docs)

    assert result.completion_percentage == 67
    assert result.status is ProfileStatus.REJECTED
    address = result.steps[2]
    assert not address.completed
    assert address.rejection_reason == "Blurry"


def test_completion_is_order_independent() -> None:
    docs = [
        make_doc(DocumentType.IDENTITY, DocumentStatus.APPROVED, 1),
        make_doc(DocumentType.ADDRESS, DocumentStatus.REJECTED, 2),
        make_doc(DocumentType.ADDRESS, DocumentStatus.PENDING, 3),
        make_doc(DocumentType.DRIVER_LICENSE, DocumentStatus.PENDING, 4),
    ]
    outcomes = {
        (r.completion_percentage, r.status)
        for r in (
            evaluator.evaluate(Role.DRIVER, make_info(), list(p))
            for p in itertools.permutations(docs)
        )
    }
    assert outcomes == {(80, ProfileStatus.INCOMPLETE)}


def test_documents_of_other_types_are_ignored() -> None:
    docs = approved(DocumentType.BUSINESS, DocumentType.DRIVER_LICENSE)
    result = evaluator.evaluate(Role.CONSUMER, make_info(), docs)

    assert result.completion_percentage == 33


# --- Most Recent Wins ---


def test_newer_upload_supersedes_rejection() -> None:
    docs = [
        make_doc(DocumentType.ADDRESS, DocumentStatus.REJECTED, minutes=1),
        make_doc(DocumentType.ADDRESS, DocumentStatus.PENDING, minutes=5),
    ]
    latest = latest_by_type(docs)
    assert latest[DocumentType.ADDRESS].status is DocumentStatus.PENDING


def test_equal_timestamps_keep_the_later_record() -> None:
    first = make_doc(DocumentType.IDENTITY, DocumentStatus.REJECTED)
    second = make_doc(DocumentType.IDENTITY, DocumentStatus.APPROVED)
    assert latest_by_type([first, second])[DocumentType.IDENTITY] is second


def test_naive_timestamps_are_treated_as_utc() -> None:
    aware = make_doc(DocumentType.IDENTITY, DocumentStatus.REJECTED, minutes=1)
    naive = make_doc(DocumentType.IDENTITY, DocumentStatus.PENDING, minutes=2)
    naive.submitted_at = naive.submitted_at.replace(tzinfo=None)
    assert latest_by_type([naive, aware])[DocumentType.IDENTITY] is naive


# --- Level And Status ---


def test_consumer_with_all_approved_is_verified_basic() -> None:
    docs = approved(DocumentType.IDENTITY, DocumentType.ADDRESS)
    result = evaluator.evaluate(Role.CONSUMER, make_info(), docs)

    assert result.completion_percentage == 100
    assert result.verification_level is VerificationLevel.BASIC
    assert result.status is ProfileStatus.VERIFIED


def test_merchant_levels() -> None:
    base = approved(DocumentType.IDENTITY, DocumentType.ADDRESS)
    partial = evaluator.evaluate(Role.MERCHANT, make_info(), base)
    assert partial.completion_percentage == 75
    assert partial.verification_level is VerificationLevel.NONE

    awaiting_extra = evaluator.evaluate(
        Role.MERCHANT, make_info(), base + [make_doc(DocumentType.BUSINESS)]
    )
    assert awaiting_extra.completion_percentage == 100
    assert awaiting_extra.verification_level is VerificationLevel.BASIC

    full = evaluator.evaluate(
        Role.MERCHANT, make_info(), base + approved(DocumentType.BUSINESS)
    )
    assert full.verification_level is VerificationLevel.FULL
    assert full.status is ProfileStatus.VERIFIED


def test_incomplete_driver_has_no_level() -> None:
    docs = approved(DocumentType.IDENTITY, DocumentType.ADDRESS)
    result = evaluator.evaluate(Role.DRIVER, make_info(), docs)

    assert result.completion_percentage == 60
    assert result.verification_level is VerificationLevel.NONE


def test_driver_levels_at_full_completion() -> None:
    base = approved(DocumentType.IDENTITY, DocumentType.ADDRESS)
    extras_pending = [make_doc(DocumentType.DRIVER_LICENSE), make_doc(DocumentType.VEHICLE_REGISTRATION)]

    basic = evaluator.evaluate(Role.DRIVER, make_info(), base + extras_pending)
    assert basic.verification_level is VerificationLevel.BASIC

    full = evaluator.evaluate(
        Role.DRIVER,
        make_info(),
        base + approved(DocumentType.DRIVER_LICENSE, DocumentType.VEHICLE_REGISTRATION),
    )
    assert full.verification_level is VerificationLevel.FULL


def test_extras_alone_do_not_lift_the_level() -> None:
    docs = approved(DocumentType.DRIVER_LICENSE, DocumentType.VEHICLE_REGISTRATION, DocumentType.IDENTITY)
    result = evaluator.evaluate(Role.DRIVER, make_info(), docs)

    assert result.verification_level is VerificationLevel.NONE


def test_submission_on_record_is_pending() -> None:
    docs = [make_doc(DocumentType.IDENTITY), make_doc(DocumentType.ADDRESS)]
    result = evaluator.evaluate(Role.CONSUMER, make_info(), docs, submitted=True)

    assert result.status is ProfileStatus.PENDING


def test_rejection_beats_verification_and_submission() -> None:
    docs = approved(DocumentType.IDENTITY) + [
        make_doc(DocumentType.ADDRESS, DocumentStatus.REJECTED, minutes=9)
    ]
    result = evaluator.evaluate(Role.CONSUMER, make_info(), docs, submitted=True)

    assert result.status is ProfileStatus.REJECTED


def test_status_requires_personal_info_for_verification() -> None:
    docs = approved(DocumentType.IDENTITY, DocumentType.ADDRESS)
    result = evaluator.evaluate(Role.CONSUMER, None, docs)

    assert result.status is not ProfileStatus.VERIFIED
    assert result.verification_level is VerificationLevel.NONE


# --- Refusals ---


def test_missing_snapshot_is_refused() -> None:
    with pytest.raises(TransientError):
        evaluator.evaluate(Role.CONSUMER, make_info(), None)


def test_unknown_role_is_refused() -> None:
    with pytest.raises(UnknownRoleError):
        evaluator.evaluate("pilot", make_info(), [])


@pytest.mark.parametrize("value,expected", [(33.333, 33), (66.666, 67), (62.5, 63), (12.5, 13), (0, 0)])
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected
