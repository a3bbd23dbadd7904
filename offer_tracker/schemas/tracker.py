"""Pydantic schemas for the tracker boards.

Each board has a read model, a create model, and a partial update model
that carries the row id. Status moves share TrackerStatusMove.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class TrackerStatusMove(BaseModel):
    """Drag-and-drop move between board columns."""

    status: str = Field(..., min_length=1, max_length=40)


class TrackerEntryRead(BaseModel):
    id: UUID
    user_id: UUID
    status: str
    date_created: datetime
    date_modified: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# Applications with outreach
# =============================================================================

class ApplicationRead(TrackerEntryRead):
    company: str
    hiring_manager: str | None = None
    msg_to_manager: str | None = None
    recruiter: str | None = None
    msg_to_recruiter: str | None = None
    notes: str | None = None


class ApplicationCreate(BaseModel):
    company: str = Field(..., min_length=1, max_length=255)
    hiring_manager: str | None = Field(None, max_length=255)
    msg_to_manager: str | None = None
    recruiter: str | None = Field(None, max_length=255)
    msg_to_recruiter: str | None = None
    notes: str | None = None
    status: str | None = None
    date_created: datetime | None = None


class ApplicationUpdate(BaseModel):
    id: UUID
    company: str | None = Field(None, min_length=1, max_length=255)
    hiring_manager: str | None = Field(None, max_length=255)
    msg_to_manager: str | None = None
    recruiter: str | None = Field(None, max_length=255)
    msg_to_recruiter: str | None = None
    notes: str | None = None
    status: str | None = None
    date_created: datetime | None = None


# =============================================================================
# LinkedIn outreach
# =============================================================================

class OutreachRead(TrackerEntryRead):
    name: str
    company: str
    message: str | None = None
    linkedin_url: str | None = None
    notes: str | None = None
    received_referral: bool = False


class OutreachCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    message: str | None = None
    linkedin_url: str | None = Field(None, max_length=500)
    notes: str | None = None
    received_referral: bool = False
    status: str | None = None
    date_created: datetime | None = None


class OutreachUpdate(BaseModel):
    id: UUID
    name: str | None = Field(None, min_length=1, max_length=255)
    company: str | None = Field(None, min_length=1, max_length=255)
    message: str | None = None
    linkedin_url: str | None = Field(None, max_length=500)
    notes: str | None = None
    received_referral: bool | None = None
    status: str | None = None
    date_created: datetime | None = None


# =============================================================================
# In-person events
# =============================================================================

class EventRead(TrackerEntryRead):
    event: str
    date: datetime
    location: str | None = None
    url: str | None = None
    notes: str | None = None
    num_people_spoken_to: int | None = None
    num_linkedin_requests: int | None = None
    career_fair: bool = False
    num_of_interviews: int | None = None


class EventCreate(BaseModel):
    event: str = Field(..., min_length=1, max_length=255)
    date: datetime
    location: str | None = Field(None, max_length=255)
    url: str | None = Field(None, max_length=500)
    notes: str | None = None
    num_people_spoken_to: int | None = Field(None, ge=0)
    num_linkedin_requests: int | None = Field(None, ge=0)
    career_fair: bool = False
    num_of_interviews: int | None = Field(None, ge=0)
    status: str | None = None


class EventUpdate(BaseModel):
    id: UUID
    event: str | None = Field(None, min_length=1, max_length=255)
    date: datetime | None = None
    location: str | None = Field(None, max_length=255)
    url: str | None = Field(None, max_length=500)
    notes: str | None = None
    num_people_spoken_to: int | None = Field(None, ge=0)
    num_linkedin_requests: int | None = Field(None, ge=0)
    career_fair: bool | None = None
    num_of_interviews: int | None = Field(None, ge=0)
    status: str | None = None


# =============================================================================
# Career fairs
# =============================================================================

class CareerFairRead(TrackerEntryRead):
    event: str
    date: datetime
    location: str | None = None
    url: str | None = None
    notes: str | None = None


class CareerFairCreate(BaseModel):
    event: str = Field(..., min_length=1, max_length=255)
    date: datetime
    location: str | None = Field(None, max_length=255)
    url: str | None = Field(None, max_length=500)
    notes: str | None = None
    status: str | None = None


class CareerFairUpdate(BaseModel):
    id: UUID
    event: str | None = Field(None, min_length=1, max_length=255)
    date: datetime | None = None
    location: str | None = Field(None, max_length=255)
    url: str | None = Field(None, max_length=500)
    notes: str | None = None
    status: str | None = None


# =============================================================================
# LeetCode practice
# =============================================================================

class LeetcodeRead(TrackerEntryRead):
    problem: str
    problem_type: str | None = None
    difficulty: str | None = None
    url: str | None = None
    reflection: str | None = None


class LeetcodeCreate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    problem: str = Field(..., min_length=1, max_length=255)
    problem_type: str | None = Field(None, max_length=100)
    difficulty: str | None = Field(None, max_length=20)
    url: str | None = Field(None, max_length=500)
    reflection: str | None = None
    status: str | None = None
    date_created: datetime | None = None


class LeetcodeUpdate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    id: UUID
    problem: str | None = Field(None, min_length=1, max_length=255)
    problem_type: str | None = Field(None, max_length=100)
    difficulty: str | None = Field(None, max_length=20)
    url: str | None = Field(None, max_length=500)
    reflection: str | None = None
    status: str | None = None
    date_created: datetime | None = None
