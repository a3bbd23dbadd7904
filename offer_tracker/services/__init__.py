"""Service layer modules."""

from offer_tracker.services import (
    capacity_service,
    card_generator,
    dashboard_service,
    enrollment_service,
    open_source_service,
    partnership_service,
    profile_service,
    progress_service,
    projection_service,
    tracker_service,
)

__all__ = [
    "capacity_service",
    "card_generator",
    "dashboard_service",
    "enrollment_service",
    "open_source_service",
    "partnership_service",
    "profile_service",
    "progress_service",
    "projection_service",
    "tracker_service",
]
