"""Student dashboard: this month's activity against the user's goals."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from offer_tracker.db.enums import CareerFairStatus, EventStatus
from offer_tracker.db.models import (
    ApplicationWithOutreach,
    CareerFair,
    InPersonEvent,
    LinkedinOutreach,
)
from offer_tracker.schemas.dashboard import DashboardMetrics, MetricProgress
from offer_tracker.services import profile_service
from offer_tracker.services.tracker_service import month_range

ATTENDED_EVENT_STATUSES = (
    EventStatus.ATTENDED.value,
    EventStatus.LINKEDIN_REQUESTS_SENT.value,
    EventStatus.FOLLOW_UP.value,
)
ATTENDED_FAIR_STATUSES = (CareerFairStatus.ATTENDED.value, CareerFairStatus.FOLLOW_UP.value)


def _filled(column):
    return func.coalesce(func.length(func.trim(column)), 0) > 0


def _count(db: Session, stmt) -> int:
    return db.execute(stmt).scalar_one()


def get_dashboard_metrics(
    db: Session,
    user_id: UUID,
    now: datetime | None = None,
) -> DashboardMetrics:
    """
    Current-month counts for the four outreach trackers.

    An application only counts once both contacts are named and messaged.
    Events and fairs count by the day they happen, and only once attended.
    """
    user = profile_service.get_profile(db, user_id)
    start, end = month_range(now or datetime.now(timezone.utc))

    apps = _count(
        db,
        select(func.count(ApplicationWithOutreach.id)).where(
            ApplicationWithOutreach.user_id == user_id,
            ApplicationWithOutreach.date_created >= start,
            ApplicationWithOutreach.date_created < end,
            _filled(ApplicationWithOutreach.hiring_manager),
            _filled(ApplicationWithOutreach.msg_to_manager),
            _filled(ApplicationWithOutreach.recruiter),
            _filled(ApplicationWithOutreach.msg_to_recruiter),
        ),
    )
    outreach = _count(
        db,
        select(func.count(LinkedinOutreach.id)).where(
            LinkedinOutreach.user_id == user_id,
            LinkedinOutreach.date_created >= start,
            LinkedinOutreach.date_created < end,
        ),
    )
    events = _count(
        db,
        select(func.count(InPersonEvent.id)).where(
            InPersonEvent.user_id == user_id,
            InPersonEvent.date >= start,
            InPersonEvent.date < end,
            InPersonEvent.status.in_(ATTENDED_EVENT_STATUSES),
        ),
    )
    fairs = _count(
        db,
        select(func.count(CareerFair.id)).where(
            CareerFair.user_id == user_id,
            CareerFair.date >= start,
            CareerFair.date < end,
            CareerFair.status.in_(ATTENDED_FAIR_STATUSES),
        ),
    )

    return DashboardMetrics(
        applications_with_outreach=MetricProgress(
            current=apps,
            goal=user.apps_with_outreach_per_week
            or profile_service.DEFAULT_APPS_WITH_OUTREACH_PER_WEEK,
        ),
        linkedin_outreach=MetricProgress(
            current=outreach,
            goal=user.info_interview_outreach_per_week
            or profile_service.DEFAULT_INFO_INTERVIEW_OUTREACH_PER_WEEK,
        ),
        in_person_events=MetricProgress(
            current=events,
            goal=user.in_person_events_per_month
            or profile_service.DEFAULT_IN_PERSON_EVENTS_PER_MONTH,
        ),
        career_fairs=MetricProgress(
            current=fairs,
            goal=user.career_fairs_quota or profile_service.DEFAULT_CAREER_FAIRS_QUOTA,
        ),
    )
