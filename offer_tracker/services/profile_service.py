"""Onboarding profile, weekly goals, and the projected offer date."""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from offer_tracker.core.structured_logging import build_log_context
from offer_tracker.db.models import User
from offer_tracker.schemas.profile import GoalsCreate, PlanCreate, ProfileCreate
from offer_tracker.services import projection_service
from offer_tracker.services.errors import NotFoundError

logger = logging.getLogger(__name__)

# Goals assumed until the student sets their own
DEFAULT_APPS_WITH_OUTREACH_PER_WEEK = 10
DEFAULT_INFO_INTERVIEW_OUTREACH_PER_WEEK = 10
DEFAULT_IN_PERSON_EVENTS_PER_MONTH = 5
DEFAULT_CAREER_FAIRS_QUOTA = 5

STEP_PROFILE = 1
STEP_GOALS = 2
STEP_PLAN = 3


def get_profile(db: Session, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _advance(user: User, step: int) -> None:
    # Revisiting an earlier step never rewinds progress
    user.onboarding_progress = max(user.onboarding_progress or 0, step)


def _apply(user: User, changes: dict) -> None:
    for field, value in changes.items():
        setattr(user, field, value)


def save_profile(db: Session, user_id: UUID, data: ProfileCreate) -> User:
    user = get_profile(db, user_id)
    _apply(user, data.model_dump())
    _advance(user, STEP_PROFILE)
    db.commit()
    db.refresh(user)
    logger.info("Onboarding profile saved", extra=build_log_context(user_id=user_id))
    return user


def save_goals(db: Session, user_id: UUID, data: GoalsCreate) -> User:
    user = get_profile(db, user_id)
    _apply(user, data.model_dump(exclude_unset=True))
    _advance(user, STEP_GOALS)
    db.commit()
    db.refresh(user)
    return user


def project_offer_date(user: User, reference: datetime | None = None) -> datetime:
    """Offer date implied by the user's goals; unset goals count as zero."""
    return projection_service.estimate_offer_date(
        user.apps_with_outreach_per_week or 0,
        user.info_interview_outreach_per_week or 0,
        user.in_person_events_per_month or 0,
        user.career_fairs_quota or 0,
        reference=reference,
    )


def save_plan(db: Session, user_id: UUID, data: PlanCreate) -> User:
    """Store the final goals and the offer date they project."""
    user = get_profile(db, user_id)
    _apply(user, data.model_dump(exclude_unset=True))
    user.projected_offer_date = project_offer_date(user)
    _advance(user, STEP_PLAN)
    db.commit()
    db.refresh(user)
    logger.info(
        f"Onboarding plan saved, projected offer {user.projected_offer_date:%Y-%m-%d}",
        extra=build_log_context(user_id=user_id),
    )
    return user


def set_projected_offer_date(db: Session, user_id: UUID, value: datetime) -> User:
    user = get_profile(db, user_id)
    user.projected_offer_date = value
    db.commit()
    db.refresh(user)
    return user


def increment_outreach_tracker(db: Session, user_id: UUID) -> tuple[int, int]:
    """
    Count one more application with outreach this week.

    Returns (current, weekly goal). The increment is a single UPDATE so
    concurrent clicks are not lost.
    """
    get_profile(db, user_id)
    db.execute(
        update(User)
        .where(User.id == user_id)
        .values(apps_with_outreach_tracker=User.apps_with_outreach_tracker + 1)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    user = get_profile(db, user_id)
    db.refresh(user)
    goal = user.apps_with_outreach_per_week or DEFAULT_APPS_WITH_OUTREACH_PER_WEEK
    return user.apps_with_outreach_tracker, goal
