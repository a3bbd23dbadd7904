"""Student dashboard endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from offer_tracker.core.deps import get_db, require_csrf_header, resolve_identity
from offer_tracker.schemas.auth import RequestIdentity
from offer_tracker.schemas.dashboard import DashboardMetrics, OutreachTrackerResponse
from offer_tracker.services import dashboard_service, profile_service
from offer_tracker.services.errors import NotFoundError

router = APIRouter()


@router.get("/dashboard-metrics", response_model=DashboardMetrics)
def get_dashboard_metrics(
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """This month's tracker counts against the user's goals."""
    try:
        return dashboard_service.get_dashboard_metrics(db, identity.user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")


@router.post(
    "/applications-outreach/increment",
    response_model=OutreachTrackerResponse,
    dependencies=[Depends(require_csrf_header)],
)
def increment_outreach_tracker(
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    try:
        current, total = profile_service.increment_outreach_tracker(db, identity.user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    return OutreachTrackerResponse(current=current, total=total)
