"""Partnership catalog endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from offer_tracker.core.deps import get_db
from offer_tracker.schemas.partnership import AvailablePartnershipsResponse
from offer_tracker.services import partnership_service

router = APIRouter()


@router.get("/available", response_model=AvailablePartnershipsResponse)
def list_available(db: Session = Depends(get_db)):
    """Active partnerships, split by whether they still have free slots."""
    return partnership_service.list_available_partnerships(db)
