"""Pydantic schemas for the student dashboard."""

from pydantic import BaseModel


class MetricProgress(BaseModel):
    """Count for the current period against the user's goal."""

    current: int
    goal: int


class DashboardMetrics(BaseModel):
    applications_with_outreach: MetricProgress
    linkedin_outreach: MetricProgress
    in_person_events: MetricProgress
    career_fairs: MetricProgress


class OutreachTrackerResponse(BaseModel):
    success: bool = True
    current: int
    total: int
