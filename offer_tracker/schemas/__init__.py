"""Pydantic schemas for API request/response models."""

from offer_tracker.schemas.auth import RequestIdentity
from offer_tracker.schemas.open_source import (
    OpenSourceEntryCreate,
    OpenSourceEntryRead,
    OpenSourceEntryUpdate,
    OpenSourceStatusMove,
)
from offer_tracker.schemas.partnership import (
    AvailablePartnershipsResponse,
    ClearPartnershipResponse,
    EnrollmentRead,
    StartPartnershipRequest,
    UpdatePartnershipStatusRequest,
    UserPartnershipResponse,
)
from offer_tracker.schemas.dashboard import DashboardMetrics, MetricProgress, OutreachTrackerResponse
from offer_tracker.schemas.profile import (
    GoalsCreate,
    PlanCreate,
    ProfileCreate,
    ProfileRead,
    ProjectedOfferResponse,
    ProjectedOfferUpdate,
)
from offer_tracker.schemas.student import ActivityCount, StudentProgress, StudentsResponse
from offer_tracker.schemas.tracker import TrackerEntryRead, TrackerStatusMove

__all__ = [
    # Auth
    "RequestIdentity",
    # Partnership
    "AvailablePartnershipsResponse",
    "EnrollmentRead",
    "UserPartnershipResponse",
    "StartPartnershipRequest",
    "UpdatePartnershipStatusRequest",
    "ClearPartnershipResponse",
    # Open source
    "OpenSourceEntryRead",
    "OpenSourceEntryCreate",
    "OpenSourceEntryUpdate",
    "OpenSourceStatusMove",
    # Trackers
    "TrackerEntryRead",
    "TrackerStatusMove",
    # Onboarding
    "ProfileCreate",
    "GoalsCreate",
    "PlanCreate",
    "ProfileRead",
    "ProjectedOfferUpdate",
    "ProjectedOfferResponse",
    # Dashboard
    "DashboardMetrics",
    "MetricProgress",
    "OutreachTrackerResponse",
    # Students
    "ActivityCount",
    "StudentProgress",
    "StudentsResponse",
]
