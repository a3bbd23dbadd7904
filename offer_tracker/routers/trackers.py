"""Tracker board endpoints.

Every board exposes the same five routes as the open-source board; the
router for each one is built from its TrackerBoard and schemas.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from offer_tracker.core.deps import get_db, require_csrf_header, resolve_identity
from offer_tracker.schemas.auth import RequestIdentity
from offer_tracker.schemas.open_source import DeleteResponse
from offer_tracker.schemas.tracker import (
    ApplicationCreate,
    ApplicationRead,
    ApplicationUpdate,
    CareerFairCreate,
    CareerFairRead,
    CareerFairUpdate,
    EventCreate,
    EventRead,
    EventUpdate,
    LeetcodeCreate,
    LeetcodeRead,
    LeetcodeUpdate,
    OutreachCreate,
    OutreachRead,
    OutreachUpdate,
    TrackerStatusMove,
)
from offer_tracker.services import tracker_service
from offer_tracker.services.errors import InvalidStatusError, NotFoundError
from offer_tracker.services.tracker_service import TrackerBoard


def build_router(
    board: TrackerBoard,
    read_model: type[BaseModel],
    create_model: type[BaseModel],
    update_model: type[BaseModel],
) -> APIRouter:
    router = APIRouter()
    not_found = f"{board.label} not found"

    @router.get("", response_model=list[read_model])
    def list_entries(
        identity: RequestIdentity = Depends(resolve_identity),
        db: Session = Depends(get_db),
    ):
        return tracker_service.list_entries(db, board, identity.user_id)

    @router.post(
        "",
        response_model=read_model,
        status_code=201,
        dependencies=[Depends(require_csrf_header)],
    )
    def create_entry(
        data: create_model,
        identity: RequestIdentity = Depends(resolve_identity),
        db: Session = Depends(get_db),
    ):
        try:
            return tracker_service.create_entry(db, board, identity.user_id, data)
        except InvalidStatusError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @router.put(
        "",
        response_model=read_model,
        dependencies=[Depends(require_csrf_header)],
    )
    def update_entry(
        data: update_model,
        identity: RequestIdentity = Depends(resolve_identity),
        db: Session = Depends(get_db),
    ):
        try:
            return tracker_service.update_entry(db, board, identity.user_id, data)
        except NotFoundError:
            raise HTTPException(status_code=404, detail=not_found)
        except InvalidStatusError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @router.patch(
        "",
        response_model=read_model,
        dependencies=[Depends(require_csrf_header)],
    )
    def move_entry(
        data: TrackerStatusMove,
        entry_id: UUID = Query(..., alias="id"),
        identity: RequestIdentity = Depends(resolve_identity),
        db: Session = Depends(get_db),
    ):
        """Status-only update used by drag and drop."""
        try:
            return tracker_service.move_entry(db, board, identity.user_id, entry_id, data.status)
        except NotFoundError:
            raise HTTPException(status_code=404, detail=not_found)
        except InvalidStatusError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @router.delete(
        "",
        response_model=DeleteResponse,
        dependencies=[Depends(require_csrf_header)],
    )
    def delete_entry(
        entry_id: UUID = Query(..., alias="id"),
        identity: RequestIdentity = Depends(resolve_identity),
        db: Session = Depends(get_db),
    ):
        try:
            tracker_service.delete_entry(db, board, identity.user_id, entry_id)
        except NotFoundError:
            raise HTTPException(status_code=404, detail=not_found)
        return DeleteResponse()

    return router


applications_router = build_router(
    tracker_service.APPLICATIONS, ApplicationRead, ApplicationCreate, ApplicationUpdate
)
outreach_router = build_router(
    tracker_service.OUTREACH, OutreachRead, OutreachCreate, OutreachUpdate
)
events_router = build_router(tracker_service.EVENTS, EventRead, EventCreate, EventUpdate)
career_fairs_router = build_router(
    tracker_service.CAREER_FAIRS, CareerFairRead, CareerFairCreate, CareerFairUpdate
)
leetcode_router = build_router(
    tracker_service.LEETCODE, LeetcodeRead, LeetcodeCreate, LeetcodeUpdate
)
