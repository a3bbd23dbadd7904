"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from offer_tracker.core.config import settings
from offer_tracker.db.session import engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logging.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from offer_tracker.core.rate_limit import limiter

# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Offer Tracker API",
    description="Partnership enrollment, open-source progress, and job-search tracking",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
)

# ============================================================================
# Routers
# ============================================================================

from offer_tracker.routers import (
    dashboard,
    instructor,
    open_source,
    partnerships,
    profile,
    trackers,
    user_partnership,
)

app.include_router(partnerships.router, prefix="/partnerships", tags=["partnerships"])
app.include_router(user_partnership.router, prefix="/users/partnership", tags=["enrollment"])
app.include_router(open_source.router, prefix="/open-source", tags=["open-source"])

# Tracker boards
app.include_router(
    trackers.applications_router, prefix="/applications-with-outreach", tags=["trackers"]
)
app.include_router(trackers.outreach_router, prefix="/linkedin-outreach", tags=["trackers"])
app.include_router(trackers.events_router, prefix="/in-person-events", tags=["trackers"])
app.include_router(trackers.career_fairs_router, prefix="/career-fairs", tags=["trackers"])
app.include_router(trackers.leetcode_router, prefix="/leetcode", tags=["trackers"])

# Onboarding and dashboard
app.include_router(profile.router, prefix="/users", tags=["onboarding"])
app.include_router(dashboard.router, tags=["dashboard"])

# Instructor dashboard (instructor session required)
app.include_router(instructor.router, prefix="/instructor", tags=["instructor"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
