"""Tracker boards - applications, outreach, events, career fairs, LeetCode.

The five boards share one lifecycle: user-scoped CRUD, a status drawn from
the board's enum, and date_modified touched on every change. BOARDS
describes each one; the functions below take a board and do the rest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import and_, case, func, select
from sqlalchemy.orm import Session

from offer_tracker.core.structured_logging import build_log_context
from offer_tracker.db.base import Base
from offer_tracker.db.enums import (
    ApplicationStatus,
    CareerFairStatus,
    EventStatus,
    LeetcodeStatus,
    OutreachStatus,
)
from offer_tracker.db.models import (
    ApplicationWithOutreach,
    CareerFair,
    InPersonEvent,
    LeetcodePractice,
    LinkedinOutreach,
)
from offer_tracker.services.errors import InvalidStatusError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackerBoard:
    """How one board is stored, ordered, and counted."""

    key: str
    label: str
    model: type[Base]
    statuses: type[Enum]
    default_status: str
    # Statuses that count as done in the instructor view
    completed_statuses: frozenset[str]
    # Column that places an entry in a calendar month
    month_field: str
    order_field: str
    # Non-nullable columns; an explicit null in an update leaves them as is
    required_fields: frozenset[str]


APPLICATIONS = TrackerBoard(
    key="applications",
    label="Application",
    model=ApplicationWithOutreach,
    statuses=ApplicationStatus,
    default_status=ApplicationStatus.APPLIED.value,
    completed_statuses=frozenset(
        s.value for s in ApplicationStatus if s != ApplicationStatus.APPLIED
    ),
    month_field="date_created",
    order_field="date_created",
    required_fields=frozenset({"company", "status", "date_created"}),
)

OUTREACH = TrackerBoard(
    key="coffee_chats",
    label="LinkedIn outreach entry",
    model=LinkedinOutreach,
    statuses=OutreachStatus,
    default_status=OutreachStatus.OUTREACH_REQUEST_SENT.value,
    # Every column past the request counts, the request itself included
    completed_statuses=frozenset(s.value for s in OutreachStatus),
    month_field="date_created",
    order_field="date_created",
    required_fields=frozenset({"name", "company", "status", "received_referral", "date_created"}),
)

EVENTS = TrackerBoard(
    key="events",
    label="Event",
    model=InPersonEvent,
    statuses=EventStatus,
    default_status=EventStatus.SCHEDULED.value,
    completed_statuses=frozenset(
        s.value for s in EventStatus if s != EventStatus.SCHEDULED
    ),
    month_field="date",
    order_field="date",
    required_fields=frozenset({"event", "date", "status", "career_fair"}),
)

CAREER_FAIRS = TrackerBoard(
    key="career_fairs",
    label="Career fair",
    model=CareerFair,
    statuses=CareerFairStatus,
    default_status=CareerFairStatus.SCHEDULED.value,
    completed_statuses=frozenset(
        {CareerFairStatus.ATTENDED.value, CareerFairStatus.FOLLOW_UP.value}
    ),
    month_field="date",
    order_field="date",
    required_fields=frozenset({"event", "date", "status"}),
)

LEETCODE = TrackerBoard(
    key="leetcode",
    label="Problem",
    model=LeetcodePractice,
    statuses=LeetcodeStatus,
    default_status=LeetcodeStatus.PLANNED.value,
    completed_statuses=frozenset({LeetcodeStatus.REFLECTED.value}),
    month_field="date_created",
    order_field="date_created",
    required_fields=frozenset({"problem", "status", "date_created"}),
)

BOARDS: tuple[TrackerBoard, ...] = (APPLICATIONS, OUTREACH, EVENTS, CAREER_FAIRS, LEETCODE)


# =============================================================================
# Helpers
# =============================================================================

def check_status(board: TrackerBoard, status: str) -> str:
    if not board.statuses.has_value(status):
        allowed = ", ".join(s.value for s in board.statuses)
        raise InvalidStatusError(f"Invalid status '{status}'. Must be one of: {allowed}")
    return status


def month_range(now: datetime) -> tuple[datetime, datetime]:
    """[first instant of now's UTC month, first instant of the next month)."""
    now = now.astimezone(timezone.utc) if now.tzinfo else now.replace(tzinfo=timezone.utc)
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


# =============================================================================
# CRUD
# =============================================================================

def list_entries(db: Session, board: TrackerBoard, user_id: UUID) -> list:
    """The user's entries on one board, newest first."""
    model = board.model
    return list(
        db.execute(
            select(model)
            .where(model.user_id == user_id)
            .order_by(getattr(model, board.order_field).desc())
        ).scalars()
    )


def get_entry(db: Session, board: TrackerBoard, user_id: UUID, entry_id: UUID):
    """Get an entry by ID (user-scoped). Raises NotFoundError."""
    model = board.model
    entry = db.execute(
        select(model).where(model.id == entry_id, model.user_id == user_id)
    ).scalar_one_or_none()
    if entry is None:
        raise NotFoundError(f"{board.label} not found")
    return entry


def create_entry(db: Session, board: TrackerBoard, user_id: UUID, data: BaseModel):
    values = data.model_dump()
    status = values.pop("status", None) or board.default_status
    check_status(board, status)

    now = datetime.now(timezone.utc)
    if "date_created" in values:
        values["date_created"] = values["date_created"] or now

    entry = board.model(user_id=user_id, status=status, date_modified=now, **values)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info(
        f"{board.label} created",
        extra=build_log_context(user_id=user_id),
    )
    return entry


def update_entry(db: Session, board: TrackerBoard, user_id: UUID, data: BaseModel):
    """
    Apply the fields present in the request.

    Uses exclude_unset=True so only explicitly provided fields are updated.
    None clears optional fields and is ignored for required ones.
    """
    entry = get_entry(db, board, user_id, data.id)
    changes = data.model_dump(exclude_unset=True, exclude={"id"})
    if changes.get("status") is not None:
        check_status(board, changes["status"])

    for field, value in changes.items():
        if value is None and field in board.required_fields:
            continue
        setattr(entry, field, value)

    entry.date_modified = datetime.now(timezone.utc)
    db.commit()
    db.refresh(entry)
    return entry


def move_entry(db: Session, board: TrackerBoard, user_id: UUID, entry_id: UUID, status: str):
    """Change only the entry's column."""
    check_status(board, status)
    entry = get_entry(db, board, user_id, entry_id)
    previous = entry.status
    entry.status = status
    entry.date_modified = datetime.now(timezone.utc)
    db.commit()
    db.refresh(entry)
    logger.info(
        f"{board.label} moved {previous} -> {status}",
        extra=build_log_context(user_id=user_id),
    )
    return entry


def delete_entry(db: Session, board: TrackerBoard, user_id: UUID, entry_id: UUID) -> None:
    entry = get_entry(db, board, user_id, entry_id)
    db.delete(entry)
    db.commit()


# =============================================================================
# Aggregates
# =============================================================================

def completed_counts(
    db: Session,
    board: TrackerBoard,
    now: datetime,
) -> dict[UUID, tuple[int, int]]:
    """
    Completed entries per user as (this_month, all_time).

    One grouped query; users with nothing completed are absent.
    """
    model = board.model
    start, end = month_range(now)
    month_column = getattr(model, board.month_field)
    in_month = case((and_(month_column >= start, month_column < end), 1), else_=0)

    rows = db.execute(
        select(model.user_id, func.sum(in_month), func.count())
        .where(model.status.in_(board.completed_statuses))
        .group_by(model.user_id)
    ).all()
    return {user_id: (int(month or 0), int(total)) for user_id, month, total in rows}
