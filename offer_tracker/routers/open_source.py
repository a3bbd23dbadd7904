"""Open-source board endpoints (card CRUD)."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from offer_tracker.core.deps import get_db, require_csrf_header, resolve_identity
from offer_tracker.schemas.auth import RequestIdentity
from offer_tracker.schemas.open_source import (
    DeleteResponse,
    OpenSourceEntryCreate,
    OpenSourceEntryRead,
    OpenSourceEntryUpdate,
    OpenSourceStatusMove,
)
from offer_tracker.services import open_source_service
from offer_tracker.services.errors import (
    InvalidSelectionError,
    InvalidStatusError,
    NotFoundError,
)

router = APIRouter()


@router.get("", response_model=list[OpenSourceEntryRead])
def list_cards(
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """List the user's cards, newest first."""
    cards = open_source_service.list_cards(db, identity.user_id)
    return [open_source_service.to_card_read(c) for c in cards]


@router.post(
    "",
    response_model=OpenSourceEntryRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_card(
    data: OpenSourceEntryCreate,
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    try:
        card = open_source_service.create_card(db, identity.user_id, data)
    except (InvalidStatusError, InvalidSelectionError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return open_source_service.to_card_read(card)


@router.put(
    "",
    response_model=OpenSourceEntryRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_card(
    data: OpenSourceEntryUpdate,
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    try:
        card = open_source_service.update_card(db, identity.user_id, data)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Card not found")
    except (InvalidStatusError, InvalidSelectionError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return open_source_service.to_card_read(card)


@router.patch(
    "",
    response_model=OpenSourceEntryRead,
    dependencies=[Depends(require_csrf_header)],
)
def move_card(
    data: OpenSourceStatusMove,
    card_id: UUID = Query(..., alias="id"),
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """Status-only update used by drag and drop."""
    try:
        card = open_source_service.move_card(db, identity.user_id, card_id, data.status)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Card not found")
    except InvalidStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return open_source_service.to_card_read(card)


@router.delete(
    "",
    response_model=DeleteResponse,
    dependencies=[Depends(require_csrf_header)],
)
def delete_card(
    card_id: UUID = Query(..., alias="id"),
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    try:
        open_source_service.delete_card(db, identity.user_id, card_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Card not found")
    return DeleteResponse()
