"""Pydantic schemas for the instructor's student progress view."""

from uuid import UUID

from pydantic import BaseModel


class ActivityCount(BaseModel):
    """Completed tracker entries for one board."""

    this_month: int = 0
    all_time: int = 0


class StudentProgress(BaseModel):
    """
    Per-student aggregate.

    active_status / progress_status are traffic lights: 2 green, 1 yellow,
    0 red.
    """
    id: UUID
    name: str
    email: str
    active_status: int
    progress_status: int
    issues_completed_count: int
    total_criteria_count: int
    completed_criteria_count: int
    active_partnership_id: int | None = None
    active_partnership_name: str | None = None
    # Keyed by tracker board: applications, coffee_chats, events, career_fairs, leetcode
    activity: dict[str, ActivityCount] = {}


class StudentsResponse(BaseModel):
    students: list[StudentProgress]
