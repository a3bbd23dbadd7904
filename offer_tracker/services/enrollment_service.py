"""Enrollment state machine for user partnerships.

States: active -> completed | abandoned. Every status change goes through
transition_enrollment(); callers choose the guards by role:

- start (user):        no self-switch, no re-completion
- start (instructor):  switch allowed, no re-completion
- status edit (PUT):   switch allowed, re-completion allowed

Capacity bookkeeping rides along with each transition in the same
transaction (see capacity_service).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Mapping
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from offer_tracker.core.catalog import PartnershipCatalog, get_catalog
from offer_tracker.core.structured_logging import build_log_context
from offer_tracker.db.enums import EnrollmentStatus
from offer_tracker.db.models import OpenSourceEntry, UserPartnership
from offer_tracker.services import capacity_service, card_generator
from offer_tracker.services.errors import (
    AlreadyActiveError,
    AlreadyCompletedError,
    CapacityExceededError,
    InvalidStatusError,
    NoActiveEnrollmentError,
    NotFoundError,
    NotInstructorError,
    PartnershipInactiveError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Queries
# =============================================================================

def get_active_enrollment(
    db: Session, user_id: UUID, *, lock: bool = False
) -> UserPartnership | None:
    stmt = select(UserPartnership).where(
        UserPartnership.user_id == user_id,
        UserPartnership.status == EnrollmentStatus.ACTIVE.value,
    )
    if lock:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalars().first()


def get_enrollment(
    db: Session, user_id: UUID, enrollment_id: UUID, *, lock: bool = False
) -> UserPartnership | None:
    """Get an enrollment by id, scoped to its owner."""
    stmt = select(UserPartnership).where(
        UserPartnership.id == enrollment_id,
        UserPartnership.user_id == user_id,
    )
    if lock:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalar_one_or_none()


def list_completed_enrollments(db: Session, user_id: UUID) -> list[UserPartnership]:
    """Completed enrollments, most recently completed first."""
    return list(
        db.execute(
            select(UserPartnership)
            .where(
                UserPartnership.user_id == user_id,
                UserPartnership.status == EnrollmentStatus.COMPLETED.value,
            )
            .order_by(UserPartnership.completed_at.desc())
        ).scalars()
    )


def has_completed(
    db: Session,
    user_id: UUID,
    partnership_id: int,
    *,
    exclude_id: UUID | None = None,
) -> bool:
    stmt = select(UserPartnership.id).where(
        UserPartnership.user_id == user_id,
        UserPartnership.partnership_id == partnership_id,
        UserPartnership.status == EnrollmentStatus.COMPLETED.value,
    )
    if exclude_id is not None:
        stmt = stmt.where(UserPartnership.id != exclude_id)
    return db.execute(stmt.limit(1)).first() is not None


def delete_user_cards(db: Session, user_id: UUID) -> int:
    """Delete every card the user owns, across all partnerships."""
    result = db.execute(
        delete(OpenSourceEntry)
        .where(OpenSourceEntry.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


# =============================================================================
# Transitions
# =============================================================================

def _coerce_status(value: EnrollmentStatus | str) -> EnrollmentStatus:
    raw = value.value if isinstance(value, EnrollmentStatus) else value
    if not EnrollmentStatus.has_value(raw):
        raise InvalidStatusError(
            "Invalid status. Must be 'active', 'completed', or 'abandoned'"
        )
    return EnrollmentStatus(raw)


def transition_enrollment(
    db: Session,
    enrollment: UserPartnership,
    new_status: EnrollmentStatus | str,
    *,
    allow_self_switch: bool,
    enforce_no_recompletion: bool,
) -> UserPartnership:
    """
    Move an enrollment to new_status, keeping the capacity ledger in step.

    Ledger rules:
    - active -> abandoned frees a slot
    - abandoned -> active takes a slot, and fails with CapacityExceededError
      when the partnership is full
    - completion keeps the slot occupied

    Entering active while another enrollment of the same user is active
    abandons the other one when allow_self_switch is set, otherwise raises
    AlreadyActiveError. Flushes but does not commit.
    """
    target = _coerce_status(new_status)
    current = EnrollmentStatus(enrollment.status)

    if target == current:
        return enrollment

    if target == EnrollmentStatus.ACTIVE:
        if enforce_no_recompletion and (
            current == EnrollmentStatus.COMPLETED
            or has_completed(db, enrollment.user_id, enrollment.partnership_id, exclude_id=enrollment.id)
        ):
            raise AlreadyCompletedError("You have already completed this partnership.")

        other = get_active_enrollment(db, enrollment.user_id, lock=True)
        if other is not None and other.id != enrollment.id:
            if not allow_self_switch:
                raise AlreadyActiveError(
                    "You already have an active partnership. Complete or abandon it first."
                )
            transition_enrollment(
                db,
                other,
                EnrollmentStatus.ABANDONED,
                allow_self_switch=allow_self_switch,
                enforce_no_recompletion=enforce_no_recompletion,
            )

        if current == EnrollmentStatus.ABANDONED:
            # Checked after any switch above so a slot freed on the same partnership counts
            partnership = capacity_service.lock_partnership(db, enrollment.partnership_id)
            if partnership is None or not capacity_service.can_enroll(partnership):
                raise CapacityExceededError(
                    "This partnership is full. Please select a different one."
                )

        enrollment.status = EnrollmentStatus.ACTIVE.value
        enrollment.completed_at = None
        if current == EnrollmentStatus.ABANDONED:
            capacity_service.increment_active(db, enrollment.partnership_id)

    elif target == EnrollmentStatus.COMPLETED:
        enrollment.status = EnrollmentStatus.COMPLETED.value
        enrollment.completed_at = datetime.now(timezone.utc)

    else:
        enrollment.status = EnrollmentStatus.ABANDONED.value
        enrollment.completed_at = None
        if current == EnrollmentStatus.ACTIVE:
            capacity_service.decrement_active(db, enrollment.partnership_id)

    # Flush now so the one-active-per-user index sees the change in order
    db.flush()
    logger.info(
        f"Enrollment {current.value} -> {target.value}",
        extra=build_log_context(
            user_id=enrollment.user_id,
            partnership_id=enrollment.partnership_id,
            enrollment_id=enrollment.id,
        ),
    )
    return enrollment


# =============================================================================
# Operations
# =============================================================================

def start_partnership(
    db: Session,
    user_id: UUID,
    partnership_id: int,
    selections: Mapping | None = None,
    *,
    is_instructor: bool = False,
    catalog: PartnershipCatalog | None = None,
) -> UserPartnership:
    """
    Enroll a user in a partnership and generate its cards.

    An instructor acting for a user who already has an active enrollment
    performs a switch: the user's cards are deleted, the old enrollment is
    abandoned (unless it is the same partnership, in which case it is reset
    in place), and capacity is not checked for the target.

    All checks run before anything is deleted. Commits on success; rolls
    back everything on failure.
    """
    catalog = catalog or get_catalog()

    existing = get_active_enrollment(db, user_id, lock=True)
    lock_ids = [partnership_id]
    if existing is not None and is_instructor:
        lock_ids.append(existing.partnership_id)
    locked = capacity_service.lock_partnerships(db, lock_ids)

    target = locked.get(partnership_id)
    if target is None:
        raise NotFoundError("Partnership not found")
    if not target.is_active:
        raise PartnershipInactiveError("This partnership is no longer available")
    if existing is not None and not is_instructor:
        raise AlreadyActiveError(
            "You already have an active partnership. Complete or abandon it first."
        )
    if has_completed(db, user_id, partnership_id):
        raise AlreadyCompletedError("You have already completed this partnership.")

    definition = catalog.get_partnership(partnership_id)
    if definition is None:
        raise NotFoundError("Partnership is not defined in the catalog")
    normalized = card_generator.validate_selections(definition, selections)

    switching = existing is not None
    if not switching and not capacity_service.can_enroll(target):
        raise CapacityExceededError("This partnership is full. Please select a different one.")

    log_context = build_log_context(
        user_id=user_id, partnership_id=partnership_id, is_instructor=is_instructor
    )
    try:
        enrollment: UserPartnership | None = None
        if switching:
            deleted = delete_user_cards(db, user_id)
            logger.info(f"Switch cleared {deleted} cards", extra=log_context)
            if existing.partnership_id == partnership_id:
                existing.selections = normalized
                enrollment = existing
            else:
                transition_enrollment(
                    db,
                    existing,
                    EnrollmentStatus.ABANDONED,
                    allow_self_switch=True,
                    enforce_no_recompletion=True,
                )

        if enrollment is None:
            enrollment = UserPartnership(
                user_id=user_id,
                partnership_id=partnership_id,
                status=EnrollmentStatus.ACTIVE.value,
                selections=normalized,
            )
            db.add(enrollment)
            db.flush()
            capacity_service.increment_active(db, partnership_id)

        card_generator.generate_cards(
            db,
            user_id=user_id,
            enrollment_id=enrollment.id,
            partnership_name=target.name,
            definition=definition,
            selections=normalized,
            catalog=catalog,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent activation rejected", extra=log_context)
        raise AlreadyActiveError(
            "You already have an active partnership. Complete or abandon it first."
        )
    except Exception:
        db.rollback()
        raise

    db.refresh(enrollment)
    logger.info("Partnership started", extra=log_context)
    return enrollment


def update_partnership_status(
    db: Session,
    user_id: UUID,
    enrollment_id: UUID,
    new_status: EnrollmentStatus | str,
) -> UserPartnership:
    """
    Set an enrollment's status directly (owner's status edit).

    Permissive path: re-activating a completed enrollment is allowed, and
    re-activating while another enrollment is active abandons the other.
    """
    target = _coerce_status(new_status)

    enrollment = get_enrollment(db, user_id, enrollment_id, lock=True)
    if enrollment is None:
        raise NotFoundError("Partnership not found")

    try:
        transition_enrollment(
            db,
            enrollment,
            target,
            allow_self_switch=True,
            enforce_no_recompletion=False,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyActiveError("Another partnership became active concurrently.")
    except Exception:
        db.rollback()
        raise

    db.refresh(enrollment)
    return enrollment


def abandon_and_clear_for_instructor(
    db: Session,
    user_id: UUID,
    *,
    is_instructor: bool,
) -> tuple[UserPartnership, int]:
    """
    Instructor reset: delete all of the user's cards and abandon the active
    enrollment, freeing its slot.

    Returns the abandoned enrollment and the number of cards deleted.
    """
    if not is_instructor:
        raise NotInstructorError("Only instructors can clear a user's partnership")

    enrollment = get_active_enrollment(db, user_id, lock=True)
    if enrollment is None:
        raise NoActiveEnrollmentError("No active partnership found")

    try:
        capacity_service.lock_partnership(db, enrollment.partnership_id)
        deleted = delete_user_cards(db, user_id)
        transition_enrollment(
            db,
            enrollment,
            EnrollmentStatus.ABANDONED,
            allow_self_switch=True,
            enforce_no_recompletion=True,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(enrollment)
    logger.info(
        f"Instructor cleared partnership ({deleted} cards deleted)",
        extra=build_log_context(
            user_id=user_id,
            partnership_id=enrollment.partnership_id,
            enrollment_id=enrollment.id,
            is_instructor=True,
        ),
    )
    return enrollment, deleted
