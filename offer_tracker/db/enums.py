"""Enum definitions for application constants."""

from enum import Enum


class EnrollmentStatus(str, Enum):
    """
    Lifecycle of a user's relationship to a partnership.

    Workflow: active → completed | abandoned
    Completed rows keep their capacity slot; abandoned rows free it.
    """
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid enrollment status."""
        return value in cls._value2member_map_


class CardStatus(str, Enum):
    """Kanban columns for open-source cards, in board order."""
    PLAN = "plan"
    BABY_STEP = "baby_step"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class IdentityKind(str, Enum):
    """Who a session token was issued to."""
    USER = "user"
    INSTRUCTOR = "instructor"


# =============================================================================
# Tracker boards
# =============================================================================

class ApplicationStatus(str, Enum):
    """
    Job application with outreach to the people behind the posting.

    Workflow: applied → messaged_recruiter / messaged_hiring_manager → followed_up → interview
    """
    APPLIED = "applied"
    MESSAGED_RECRUITER = "messaged_recruiter"
    MESSAGED_HIRING_MANAGER = "messaged_hiring_manager"
    FOLLOWED_UP = "followed_up"
    INTERVIEW = "interview"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class OutreachStatus(str, Enum):
    """LinkedIn outreach (coffee chat) columns."""
    OUTREACH_REQUEST_SENT = "outreach_request_sent"
    ACCEPTED = "accepted"
    FOLLOWED_UP = "followed_up"
    LINKEDIN_OUTREACH = "linkedin_outreach"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class EventStatus(str, Enum):
    """In-person networking event columns."""
    SCHEDULED = "scheduled"
    ATTENDED = "attended"
    LINKEDIN_REQUESTS_SENT = "linkedin_requests_sent"
    FOLLOW_UP = "follow_up"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class CareerFairStatus(str, Enum):
    SCHEDULED = "scheduled"
    ATTENDED = "attended"
    FOLLOW_UP = "follow_up"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class LeetcodeStatus(str, Enum):
    """Coding practice: a problem counts once a reflection is written."""
    PLANNED = "planned"
    SOLVED = "solved"
    REFLECTED = "reflected"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_
