"""Student progress aggregation for the instructor dashboard.

Read-only. The lights and criteria counts come from open-source cards and
the user's active enrollment; tracker tallies come from one grouped query
per board. The query count does not grow with class size.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from offer_tracker.core.catalog import PartnershipCatalog, get_catalog
from offer_tracker.db.enums import CardStatus, EnrollmentStatus
from offer_tracker.db.models import OpenSourceEntry, User, UserPartnership
from offer_tracker.schemas.student import ActivityCount, StudentProgress
from offer_tracker.services import tracker_service
from offer_tracker.services.card_generator import ResolvedCriterion, resolve_criteria

ISSUE_CRITERIA_TYPE = "issue"

# Activity light: any card touched recently
ACTIVE_GREEN_WINDOW = timedelta(days=7)
ACTIVE_YELLOW_WINDOW = timedelta(days=30)

# Progress light: criteria completed recently
PROGRESS_GREEN_WINDOW = timedelta(days=30)
PROGRESS_GREEN_MIN_TYPES = 2
PROGRESS_YELLOW_WINDOW = timedelta(days=90)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _is_done(card: OpenSourceEntry) -> bool:
    return card.status == CardStatus.DONE.value


def card_criteria_types(card: OpenSourceEntry) -> set[str]:
    """The card's own type plus any extras attached to it."""
    return {card.criteria_type, *(card.selected_extras or [])}


def count_issues_completed(cards: Iterable[OpenSourceEntry]) -> int:
    return sum(
        1 for c in cards if c.criteria_type == ISSUE_CRITERIA_TYPE and _is_done(c)
    )


def compute_active_status(cards: Iterable[OpenSourceEntry], now: datetime) -> int:
    """2 if any card was modified within 7 days, 1 within 30 days, else 0."""
    latest = max((_as_utc(c.date_modified) for c in cards if c.date_modified), default=None)
    if latest is None:
        return 0
    if latest >= now - ACTIVE_GREEN_WINDOW:
        return 2
    if latest >= now - ACTIVE_YELLOW_WINDOW:
        return 1
    return 0


def compute_progress_status(done_cards: Iterable[OpenSourceEntry], now: datetime) -> int:
    """
    2 if at least two distinct criteria types (extras included) were completed
    within 30 days; 1 if an issue was completed within 90 days; else 0.
    """
    recent_types: set[str] = set()
    issue_recent = False
    for card in done_cards:
        modified = _as_utc(card.date_modified)
        types = card_criteria_types(card)
        if modified >= now - PROGRESS_GREEN_WINDOW:
            recent_types |= types
        if ISSUE_CRITERIA_TYPE in types and modified >= now - PROGRESS_YELLOW_WINDOW:
            issue_recent = True

    if len(recent_types) >= PROGRESS_GREEN_MIN_TYPES:
        return 2
    if issue_recent:
        return 1
    return 0


def tally_enrollment_criteria(
    done_cards: Sequence[OpenSourceEntry],
    criteria: Sequence[ResolvedCriterion],
) -> tuple[int, int]:
    """
    (total, completed) for an active enrollment.

    Each resolved criterion contributes its count to the total, and is
    credited with done cards of its type (directly or as an extra), capped
    at its count.
    """
    total = completed = 0
    for criterion in criteria:
        total += criterion.count
        matches = sum(1 for card in done_cards if criterion.type in card_criteria_types(card))
        completed += min(matches, criterion.count)
    return total, completed


def tally_all_cards(cards: Iterable[OpenSourceEntry]) -> tuple[int, int]:
    """(total, completed) without an active enrollment: every card and every extra counts once."""
    total = completed = 0
    for card in cards:
        weight = 1 + len(card.selected_extras or [])
        total += weight
        if _is_done(card):
            completed += weight
    return total, completed


def activity_for(user_id, tallies: dict[str, dict]) -> dict[str, ActivityCount]:
    """Every board for one user, zero where they have completed nothing."""
    activity = {}
    for key, counts in tallies.items():
        this_month, all_time = counts.get(user_id, (0, 0))
        activity[key] = ActivityCount(this_month=this_month, all_time=all_time)
    return activity


def build_student_progress(
    user: User,
    cards: Sequence[OpenSourceEntry],
    active: UserPartnership | None,
    catalog: PartnershipCatalog,
    now: datetime,
    activity: dict[str, ActivityCount] | None = None,
) -> StudentProgress:
    progress_status = 0
    if active is not None:
        enrollment_done = [c for c in cards if c.enrollment_id == active.id and _is_done(c)]
        definition = catalog.get_partnership(active.partnership_id)
        criteria = (
            resolve_criteria(definition, active.selections, catalog) if definition else []
        )
        total, completed = tally_enrollment_criteria(enrollment_done, criteria)
        progress_status = compute_progress_status(enrollment_done, now)
    else:
        total, completed = tally_all_cards(cards)

    return StudentProgress(
        id=user.id,
        name=user.name or "Unknown",
        email=user.email,
        active_status=compute_active_status(cards, now),
        progress_status=progress_status,
        issues_completed_count=count_issues_completed(cards),
        total_criteria_count=total,
        completed_criteria_count=completed,
        active_partnership_id=active.partnership_id if active else None,
        active_partnership_name=active.partnership.name if active else None,
        activity=activity or {},
    )


def get_students_progress(
    db: Session,
    catalog: PartnershipCatalog | None = None,
    now: datetime | None = None,
) -> list[StudentProgress]:
    """Aggregate progress for every user, ordered by name."""
    catalog = catalog or get_catalog()
    now = _as_utc(now) if now else datetime.now(timezone.utc)

    users = db.execute(select(User).order_by(User.name.asc(), User.email.asc())).scalars().all()

    cards_by_user: dict = defaultdict(list)
    for card in db.execute(select(OpenSourceEntry)).scalars():
        cards_by_user[card.user_id].append(card)

    active_by_user = {
        e.user_id: e
        for e in db.execute(
            select(UserPartnership)
            .options(joinedload(UserPartnership.partnership))
            .where(UserPartnership.status == EnrollmentStatus.ACTIVE.value)
        ).scalars()
    }

    tallies = {
        board.key: tracker_service.completed_counts(db, board, now)
        for board in tracker_service.BOARDS
    }

    return [
        build_student_progress(
            user,
            cards_by_user.get(user.id, []),
            active_by_user.get(user.id),
            catalog,
            now,
            activity_for(user.id, tallies),
        )
        for user in users
    ]
