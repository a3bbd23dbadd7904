"""Tests for the enrollment state machine and capacity ledger."""

import pytest
from sqlalchemy import select

from offer_tracker.db.enums import CardStatus, EnrollmentStatus
from offer_tracker.db.models import OpenSourceEntry, Partnership, UserPartnership
from offer_tracker.services import capacity_service, enrollment_service
from offer_tracker.services.errors import (
    AlreadyActiveError,
    AlreadyCompletedError,
    CapacityExceededError,
    InvalidSelectionError,
    InvalidStatusError,
    NoActiveEnrollmentError,
    NotFoundError,
    NotInstructorError,
    PartnershipInactiveError,
)


def _count(db, partnership_id: int) -> int:
    return db.get(Partnership, partnership_id).active_user_count


def _cards(db, user_id) -> list[OpenSourceEntry]:
    return list(
        db.execute(select(OpenSourceEntry).where(OpenSourceEntry.user_id == user_id)).scalars()
    )


def _active_rows(db, user_id) -> list[UserPartnership]:
    return list(
        db.execute(
            select(UserPartnership).where(
                UserPartnership.user_id == user_id,
                UserPartnership.status == EnrollmentStatus.ACTIVE.value,
            )
        ).scalars()
    )


# =============================================================================
# Start
# =============================================================================

def test_start_creates_enrollment_cards_and_takes_slot(db, partnerships, test_user):
    enrollment = enrollment_service.start_partnership(
        db, test_user.id, 1, {0: "pull_request"}
    )

    assert enrollment.status == EnrollmentStatus.ACTIVE.value
    assert enrollment.selections == {"0": "pull_request"}
    assert _count(db, 1) == 1

    cards = _cards(db, test_user.id)
    assert sorted(c.criteria_type for c in cards) == ["issue"] * 3 + ["pull_request"] * 2
    for card in cards:
        assert card.enrollment_id == enrollment.id
        assert card.partnership_name == "Typesafe Forms"
        assert card.status == CardStatus.PLAN.value
        assert card.plan_responses == {}
        assert card.selected_extras == []


def test_start_rejects_second_active(db, partnerships, test_user):
    enrollment_service.start_partnership(db, test_user.id, 1)

    with pytest.raises(AlreadyActiveError):
        enrollment_service.start_partnership(db, test_user.id, 2)

    assert _count(db, 1) == 1
    assert _count(db, 2) == 0
    assert len(_active_rows(db, test_user.id)) == 1


def test_start_unknown_partnership(db, partnerships, test_user):
    with pytest.raises(NotFoundError):
        enrollment_service.start_partnership(db, test_user.id, 999)


def test_start_inactive_partnership(db, partnerships, test_user):
    partnerships[2].is_active = False
    db.commit()

    with pytest.raises(PartnershipInactiveError):
        enrollment_service.start_partnership(db, test_user.id, 2)


def test_start_full_partnership(db, partnerships, test_user, other_user):
    partnerships[1].max_users = 1
    db.commit()
    enrollment_service.start_partnership(db, other_user.id, 1)

    with pytest.raises(CapacityExceededError):
        enrollment_service.start_partnership(db, test_user.id, 1)

    assert _count(db, 1) == 1
    assert _active_rows(db, test_user.id) == []
    assert _cards(db, test_user.id) == []


def test_start_invalid_selection_changes_nothing(db, partnerships, test_user):
    with pytest.raises(InvalidSelectionError):
        enrollment_service.start_partnership(db, test_user.id, 1, {0: "feature"})

    assert _count(db, 1) == 0
    assert _active_rows(db, test_user.id) == []


def test_no_recompletion(db, partnerships, test_user):
    enrollment = enrollment_service.start_partnership(db, test_user.id, 1)
    enrollment_service.update_partnership_status(
        db, test_user.id, enrollment.id, EnrollmentStatus.COMPLETED
    )

    with pytest.raises(AlreadyCompletedError):
        enrollment_service.start_partnership(db, test_user.id, 1)
    with pytest.raises(AlreadyCompletedError):
        enrollment_service.start_partnership(db, test_user.id, 1, is_instructor=True)


def test_concurrent_activation_maps_to_already_active(db, partnerships, test_user, monkeypatch):
    enrollment_service.start_partnership(db, test_user.id, 1)

    # Simulate a racing request that did not see the first activation
    monkeypatch.setattr(enrollment_service, "get_active_enrollment", lambda *a, **k: None)
    with pytest.raises(AlreadyActiveError):
        enrollment_service.start_partnership(db, test_user.id, 2)

    assert _count(db, 2) == 0
    assert len(_active_rows(db, test_user.id)) == 1


# =============================================================================
# Capacity ledger
# =============================================================================

def test_completion_keeps_slot_abandon_frees_it(db, partnerships, test_user, other_user):
    first = enrollment_service.start_partnership(db, test_user.id, 1)
    second = enrollment_service.start_partnership(db, other_user.id, 1)
    assert _count(db, 1) == 2

    enrollment_service.update_partnership_status(db, test_user.id, first.id, "completed")
    assert _count(db, 1) == 2

    enrollment_service.update_partnership_status(db, other_user.id, second.id, "abandoned")
    assert _count(db, 1) == 1


def test_decrement_never_goes_negative(db, partnerships):
    capacity_service.decrement_active(db, 1)
    db.commit()
    assert _count(db, 1) == 0


def test_can_enroll_uses_ledger(partnerships):
    p = partnerships[3]
    assert capacity_service.can_enroll(p)
    p.active_user_count = p.max_users
    assert not capacity_service.can_enroll(p)


# =============================================================================
# Status edits
# =============================================================================

def test_completed_sets_completed_at(db, partnerships, test_user):
    enrollment = enrollment_service.start_partnership(db, test_user.id, 1)
    updated = enrollment_service.update_partnership_status(
        db, test_user.id, enrollment.id, "completed"
    )
    assert updated.status == "completed"
    assert updated.completed_at is not None


def test_invalid_status(db, partnerships, test_user):
    enrollment = enrollment_service.start_partnership(db, test_user.id, 1)
    with pytest.raises(InvalidStatusError):
        enrollment_service.update_partnership_status(db, test_user.id, enrollment.id, "paused")


def test_status_edit_scoped_to_owner(db, partnerships, test_user, other_user):
    enrollment = enrollment_service.start_partnership(db, test_user.id, 1)
    with pytest.raises(NotFoundError):
        enrollment_service.update_partnership_status(
            db, other_user.id, enrollment.id, "abandoned"
        )


def test_reactivating_abandoned_takes_slot_and_abandons_other(db, partnerships, test_user):
    first = enrollment_service.start_partnership(db, test_user.id, 1)
    enrollment_service.update_partnership_status(db, test_user.id, first.id, "abandoned")
    second = enrollment_service.start_partnership(db, test_user.id, 2)
    assert (_count(db, 1), _count(db, 2)) == (0, 1)

    enrollment_service.update_partnership_status(db, test_user.id, first.id, "active")

    db.refresh(second)
    assert second.status == EnrollmentStatus.ABANDONED.value
    assert (_count(db, 1), _count(db, 2)) == (1, 0)
    assert [e.id for e in _active_rows(db, test_user.id)] == [first.id]


def test_reactivating_abandoned_respects_capacity(db, partnerships, test_user, other_user):
    partnerships[1].max_users = 1
    db.commit()
    first = enrollment_service.start_partnership(db, test_user.id, 1)
    enrollment_service.update_partnership_status(db, test_user.id, first.id, "abandoned")
    enrollment_service.start_partnership(db, other_user.id, 1)

    with pytest.raises(CapacityExceededError):
        enrollment_service.update_partnership_status(db, test_user.id, first.id, "active")

    db.refresh(first)
    assert first.status == EnrollmentStatus.ABANDONED.value
    assert _count(db, 1) == 1
    assert _count(db, 1) <= db.get(Partnership, 1).max_users


def test_reactivating_abandoned_counts_slot_freed_by_switch(db, partnerships, test_user):
    partnerships[1].max_users = 1
    db.commit()
    first = enrollment_service.start_partnership(db, test_user.id, 1)
    enrollment_service.update_partnership_status(db, test_user.id, first.id, "abandoned")
    second = enrollment_service.start_partnership(db, test_user.id, 1)

    # Reactivating the old row abandons the new one on the same partnership first
    enrollment_service.update_partnership_status(db, test_user.id, first.id, "active")

    db.refresh(second)
    assert second.status == EnrollmentStatus.ABANDONED.value
    assert _count(db, 1) == 1


def test_reactivating_completed_does_not_take_slot(db, partnerships, test_user):
    enrollment = enrollment_service.start_partnership(db, test_user.id, 1)
    enrollment_service.update_partnership_status(db, test_user.id, enrollment.id, "completed")

    reactivated = enrollment_service.update_partnership_status(
        db, test_user.id, enrollment.id, "active"
    )

    assert reactivated.status == "active"
    assert reactivated.completed_at is None
    assert _count(db, 1) == 1


def test_same_status_is_noop(db, partnerships, test_user):
    enrollment = enrollment_service.start_partnership(db, test_user.id, 1)
    enrollment_service.update_partnership_status(db, test_user.id, enrollment.id, "active")
    assert _count(db, 1) == 1


# =============================================================================
# Instructor switch
# =============================================================================

def test_instructor_switch_moves_slot_and_regenerates_cards(db, partnerships, test_user):
    old = enrollment_service.start_partnership(db, test_user.id, 1, {0: "pull_request"})
    assert len(_cards(db, test_user.id)) == 5

    new = enrollment_service.start_partnership(
        db, test_user.id, 3, is_instructor=True
    )

    db.refresh(old)
    assert old.status == EnrollmentStatus.ABANDONED.value
    assert new.status == EnrollmentStatus.ACTIVE.value
    assert (_count(db, 1), _count(db, 3)) == (0, 1)

    cards = _cards(db, test_user.id)
    assert [c.criteria_type for c in cards] == ["documentation", "documentation"]
    assert {c.enrollment_id for c in cards} == {new.id}


def test_instructor_switch_ignores_target_capacity(db, partnerships, test_user, other_user):
    partnerships[2].max_users = 1
    db.commit()
    enrollment_service.start_partnership(db, other_user.id, 2)
    enrollment_service.start_partnership(db, test_user.id, 1)

    enrollment_service.start_partnership(db, test_user.id, 2, is_instructor=True)

    assert _count(db, 2) == 2
    assert _count(db, 1) == 0


def test_instructor_switch_to_same_partnership_resets_in_place(db, partnerships, test_user):
    original = enrollment_service.start_partnership(db, test_user.id, 1, {0: "blog_post"})

    switched = enrollment_service.start_partnership(
        db, test_user.id, 1, {0: "pull_request"}, is_instructor=True
    )

    assert switched.id == original.id
    assert switched.selections == {"0": "pull_request"}
    assert _count(db, 1) == 1
    assert len(_cards(db, test_user.id)) == 5


def test_failed_switch_leaves_everything_in_place(db, partnerships, test_user):
    old = enrollment_service.start_partnership(db, test_user.id, 1)
    cards_before = {c.id for c in _cards(db, test_user.id)}

    with pytest.raises(InvalidSelectionError):
        enrollment_service.start_partnership(
            db, test_user.id, 2, {5: "documentation"}, is_instructor=True
        )

    db.refresh(old)
    assert old.status == EnrollmentStatus.ACTIVE.value
    assert {c.id for c in _cards(db, test_user.id)} == cards_before
    assert (_count(db, 1), _count(db, 2)) == (1, 0)


# =============================================================================
# Instructor clear
# =============================================================================

def test_clear_requires_instructor(db, partnerships, test_user):
    enrollment_service.start_partnership(db, test_user.id, 1)
    with pytest.raises(NotInstructorError):
        enrollment_service.abandon_and_clear_for_instructor(db, test_user.id, is_instructor=False)


def test_clear_without_active(db, partnerships, test_user):
    with pytest.raises(NoActiveEnrollmentError):
        enrollment_service.abandon_and_clear_for_instructor(db, test_user.id, is_instructor=True)


def test_clear_deletes_all_cards_and_frees_slot(db, partnerships, test_user):
    enrollment_service.start_partnership(db, test_user.id, 1, {0: "pull_request"})
    db.add(OpenSourceEntry(user_id=test_user.id, criteria_type="blog_post", status="done"))
    db.commit()

    enrollment, deleted = enrollment_service.abandon_and_clear_for_instructor(
        db, test_user.id, is_instructor=True
    )

    assert deleted == 6
    assert enrollment.status == EnrollmentStatus.ABANDONED.value
    assert _cards(db, test_user.id) == []
    assert _count(db, 1) == 0


def test_fixed_issue_criterion_generates_exact_cards(db, partnerships, test_user):
    enrollment_service.start_partnership(db, test_user.id, 1)

    cards = _cards(db, test_user.id)
    assert [c.criteria_type for c in cards] == ["issue"] * 3
    assert {c.status for c in cards} == {"plan"}
