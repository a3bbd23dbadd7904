"""Pydantic schemas for onboarding and the projected offer date."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ProfileCreate(BaseModel):
    """Onboarding step 1: who the student is."""

    name: str = Field(..., min_length=1, max_length=255)
    school: str | None = Field(None, max_length=255)
    major: str | None = Field(None, max_length=255)
    expected_graduation_date: date | None = None


class GoalsBase(BaseModel):
    commitment: int | None = Field(None, ge=0, le=168)
    applications_per_week: int | None = Field(None, ge=0)
    apps_with_outreach_per_week: int | None = Field(None, ge=0)
    info_interview_outreach_per_week: int | None = Field(None, ge=0)
    in_person_events_per_month: int | None = Field(None, ge=0)
    career_fairs_quota: int | None = Field(None, ge=0)


class GoalsCreate(GoalsBase):
    """Onboarding step 2: timeline plus first-pass goals."""

    months_to_secure_internship: int | None = Field(None, ge=0, le=60)


class PlanCreate(GoalsBase):
    """Onboarding step 3: final goals; the offer date is projected from them."""

    pass


class ProfileRead(BaseModel):
    id: UUID
    email: str
    name: str | None = None
    school: str | None = None
    major: str | None = None
    expected_graduation_date: date | None = None
    months_to_secure_internship: int | None = None
    commitment: int | None = None
    applications_per_week: int | None = None
    apps_with_outreach_per_week: int | None = None
    info_interview_outreach_per_week: int | None = None
    in_person_events_per_month: int | None = None
    career_fairs_quota: int | None = None
    onboarding_progress: int
    projected_offer_date: datetime | None = None

    model_config = {"from_attributes": True}


class ProjectedOfferUpdate(BaseModel):
    projected_offer_date: datetime


class ProjectedOfferResponse(BaseModel):
    id: UUID
    projected_offer_date: datetime | None = None

    model_config = {"from_attributes": True}
