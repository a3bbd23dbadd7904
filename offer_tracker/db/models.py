"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from offer_tracker.db.base import Base
from offer_tracker.db.enums import (
    ApplicationStatus,
    CardStatus,
    CareerFairStatus,
    EnrollmentStatus,
    EventStatus,
    LeetcodeStatus,
    OutreachStatus,
)
from offer_tracker.types import JsonArray, JsonObject


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Identity
# =============================================================================

class User(Base):
    """
    Job seeker tracked by the application.

    Authentication is handled upstream. Besides anchoring ownership, the row
    carries the profile and weekly goals collected during onboarding.
    """
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Profile (onboarding step 1)
    school: Mapped[str | None] = mapped_column(String(255), nullable=True)
    major: Mapped[str | None] = mapped_column(String(255), nullable=True)
    expected_graduation_date: Mapped[date | None] = mapped_column(nullable=True)

    # Goals (onboarding steps 2-3)
    months_to_secure_internship: Mapped[int | None] = mapped_column(Integer, nullable=True)
    commitment: Mapped[int | None] = mapped_column(Integer, nullable=True)  # hours per week
    applications_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    apps_with_outreach_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    info_interview_outreach_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    in_person_events_per_month: Mapped[int | None] = mapped_column(Integer, nullable=True)
    career_fairs_quota: Mapped[int | None] = mapped_column(Integer, nullable=True)  # per year
    onboarding_progress: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    projected_offer_date: Mapped[datetime | None] = mapped_column(nullable=True)
    apps_with_outreach_tracker: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    enrollments: Mapped[list["UserPartnership"]] = relationship(back_populates="user")
    cards: Mapped[list["OpenSourceEntry"]] = relationship(back_populates="user")


class Instructor(Base):
    """Staff account allowed to view and act on behalf of any user."""
    __tablename__ = "instructors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


# =============================================================================
# Partnerships
# =============================================================================

class Partnership(Base):
    """
    Persisted mirror of a catalog partnership plus its capacity ledger.

    active_user_count is denormalized and only changed through
    capacity_service so it stays paired with enrollment transitions.
    """
    __tablename__ = "partnerships"

    # Catalog ids are stable and assigned by the catalog, not the database
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str | None] = mapped_column(String(255), nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    max_users: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    active_user_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    created_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    enrollments: Mapped[list["UserPartnership"]] = relationship(back_populates="partnership")

    @property
    def spots_remaining(self) -> int:
        return max(self.max_users - self.active_user_count, 0)


class UserPartnership(Base):
    """
    A user's enrollment in one partnership.

    Rows are never deleted; status carries the history. At most one row per
    user may be active, enforced by a partial unique index.
    """
    __tablename__ = "user_partnerships"
    __table_args__ = (
        Index(
            "uq_one_active_partnership_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index("ix_user_partnerships_user_status", "user_id", "status"),
        Index("ix_user_partnerships_partnership_status", "partnership_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    partnership_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("partnerships.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EnrollmentStatus.ACTIVE.value
    )
    # Multiple-choice block index (as string) -> chosen criterion type
    selections: Mapped[JsonObject] = mapped_column(nullable=False, default=dict)
    started_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), onupdate=_utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="enrollments")
    partnership: Mapped["Partnership"] = relationship(back_populates="enrollments")
    cards: Mapped[list["OpenSourceEntry"]] = relationship(
        back_populates="enrollment", passive_deletes=True
    )


# =============================================================================
# Cards
# =============================================================================

class OpenSourceEntry(Base):
    """
    One tracked unit of work toward a partnership criterion.

    enrollment_id links the card to the enrollment that generated (or
    adopted) it; partnership_name is kept as a display copy only.
    """
    __tablename__ = "open_source_entries"
    __table_args__ = (
        Index("ix_open_source_entries_user_modified", "user_id", "date_modified"),
        Index("ix_open_source_entries_enrollment", "enrollment_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    enrollment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("user_partnerships.id", ondelete="SET NULL"), nullable=True
    )
    partnership_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    criteria_type: Mapped[str] = mapped_column(String(100), nullable=False)
    metric: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=CardStatus.PLAN.value
    )
    selected_extras: Mapped[JsonArray] = mapped_column(nullable=False, default=list)

    # Per-stage field templates and the user's answers
    plan_fields: Mapped[JsonArray | None] = mapped_column(nullable=True)
    plan_responses: Mapped[JsonObject | None] = mapped_column(nullable=True)
    baby_step_fields: Mapped[JsonArray | None] = mapped_column(nullable=True)
    baby_step_responses: Mapped[JsonObject | None] = mapped_column(nullable=True)
    proof_of_completion: Mapped[JsonArray | None] = mapped_column(nullable=True)
    proof_responses: Mapped[JsonObject | None] = mapped_column(nullable=True)

    date_created: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    date_modified: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="cards")
    enrollment: Mapped["UserPartnership | None"] = relationship(back_populates="cards")


# =============================================================================
# Tracker boards
# =============================================================================
# One row per card on a user's kanban board. date_modified moves on every
# edit and status change; the instructor view and dashboard metrics read it.

class ApplicationWithOutreach(Base):
    """Job application plus the messages sent to its recruiter and hiring manager."""
    __tablename__ = "applications_with_outreach"
    __table_args__ = (
        Index("ix_applications_with_outreach_user_created", "user_id", "date_created"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    hiring_manager: Mapped[str | None] = mapped_column(String(255), nullable=True)
    msg_to_manager: Mapped[str | None] = mapped_column(Text, nullable=True)
    recruiter: Mapped[str | None] = mapped_column(String(255), nullable=True)
    msg_to_recruiter: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(40), nullable=False, default=ApplicationStatus.APPLIED.value
    )
    date_created: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    date_modified: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


class LinkedinOutreach(Base):
    """Informational-interview outreach to one person."""
    __tablename__ = "linkedin_outreach"
    __table_args__ = (
        Index("ix_linkedin_outreach_user_created", "user_id", "date_created"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(40), nullable=False, default=OutreachStatus.OUTREACH_REQUEST_SENT.value
    )
    received_referral: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    date_created: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    date_modified: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


class InPersonEvent(Base):
    """Networking event; counted by the date it happens, not when it was logged."""
    __tablename__ = "in_person_events"
    __table_args__ = (
        Index("ix_in_person_events_user_date", "user_id", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    event: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(40), nullable=False, default=EventStatus.SCHEDULED.value
    )
    num_people_spoken_to: Mapped[int | None] = mapped_column(Integer, nullable=True)
    num_linkedin_requests: Mapped[int | None] = mapped_column(Integer, nullable=True)
    career_fair: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    num_of_interviews: Mapped[int | None] = mapped_column(Integer, nullable=True)
    date_created: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    date_modified: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


class CareerFair(Base):
    __tablename__ = "career_fairs"
    __table_args__ = (
        Index("ix_career_fairs_user_date", "user_id", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    event: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime] = mapped_column(nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(40), nullable=False, default=CareerFairStatus.SCHEDULED.value
    )
    date_created: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    date_modified: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )


class LeetcodePractice(Base):
    __tablename__ = "leetcode_practice"
    __table_args__ = (
        Index("ix_leetcode_practice_user_created", "user_id", "date_created"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    problem: Mapped[str] = mapped_column(String(255), nullable=False)
    problem_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    difficulty: Mapped[str | None] = mapped_column(String(20), nullable=True)
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    reflection: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(40), nullable=False, default=LeetcodeStatus.PLANNED.value
    )
    date_created: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
    date_modified: Mapped[datetime] = mapped_column(
        default=_utcnow, server_default=func.now(), nullable=False
    )
