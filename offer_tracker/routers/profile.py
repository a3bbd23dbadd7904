"""Onboarding and projected-offer endpoints under /users."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from offer_tracker.core.deps import get_db, require_csrf_header, resolve_identity
from offer_tracker.schemas.auth import RequestIdentity
from offer_tracker.schemas.profile import (
    GoalsCreate,
    PlanCreate,
    ProfileCreate,
    ProfileRead,
    ProjectedOfferResponse,
    ProjectedOfferUpdate,
)
from offer_tracker.services import profile_service
from offer_tracker.services.errors import NotFoundError

router = APIRouter()


@router.post(
    "/onboarding1",
    response_model=ProfileRead,
    dependencies=[Depends(require_csrf_header)],
)
def save_profile(
    data: ProfileCreate,
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """Step 1: name, school, major, graduation date."""
    try:
        return profile_service.save_profile(db, identity.user_id, data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")


@router.get("/onboarding2", response_model=ProfileRead)
def get_profile(
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    try:
        return profile_service.get_profile(db, identity.user_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")


@router.post(
    "/onboarding2",
    response_model=ProfileRead,
    dependencies=[Depends(require_csrf_header)],
)
def save_goals(
    data: GoalsCreate,
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """Step 2: internship timeline and first-pass goals."""
    try:
        return profile_service.save_goals(db, identity.user_id, data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")


@router.post(
    "/onboarding3",
    response_model=ProfileRead,
    dependencies=[Depends(require_csrf_header)],
)
def save_plan(
    data: PlanCreate,
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """Step 3: final goals. Responds with the projected offer date."""
    try:
        return profile_service.save_plan(db, identity.user_id, data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")


@router.post(
    "/projected-offer",
    response_model=ProjectedOfferResponse,
    dependencies=[Depends(require_csrf_header)],
)
def set_projected_offer(
    data: ProjectedOfferUpdate,
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    try:
        return profile_service.set_projected_offer_date(
            db, identity.user_id, data.projected_offer_date
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
