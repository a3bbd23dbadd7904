"""API routers."""

from offer_tracker.routers.dashboard import router as dashboard_router
from offer_tracker.routers.instructor import router as instructor_router
from offer_tracker.routers.open_source import router as open_source_router
from offer_tracker.routers.partnerships import router as partnerships_router
from offer_tracker.routers.profile import router as profile_router
from offer_tracker.routers.user_partnership import router as user_partnership_router

__all__ = [
    "dashboard_router",
    "instructor_router",
    "open_source_router",
    "partnerships_router",
    "profile_router",
    "user_partnership_router",
]
