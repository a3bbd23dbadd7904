"""User partnership endpoints - start, status change, and instructor reset.

All routes act on the resolved identity: the session user, or the user named
by ?userId= when the caller holds an instructor session.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from offer_tracker.core.deps import get_db, require_csrf_header, resolve_identity
from offer_tracker.core.rate_limit import MUTATION_LIMIT, limiter
from offer_tracker.core.structured_logging import build_log_context
from offer_tracker.schemas.auth import RequestIdentity
from offer_tracker.schemas.partnership import (
    ClearPartnershipResponse,
    EnrollmentRead,
    StartPartnershipRequest,
    UpdatePartnershipStatusRequest,
    UserPartnershipResponse,
)
from offer_tracker.services import enrollment_service, partnership_service
from offer_tracker.services.errors import (
    AlreadyActiveError,
    AlreadyCompletedError,
    CapacityExceededError,
    InvalidSelectionError,
    InvalidStatusError,
    NotFoundError,
    NotInstructorError,
    PartnershipInactiveError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=UserPartnershipResponse)
def get_user_partnership(
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """Active enrollment with its criteria, plus completed history."""
    return partnership_service.get_user_partnership(db, identity.user_id)


@router.post(
    "",
    response_model=EnrollmentRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(MUTATION_LIMIT)
def start_partnership(
    request: Request,
    data: StartPartnershipRequest,
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """
    Start a partnership and generate its cards.

    Instructors acting for a user with an active partnership switch it:
    the old cards are removed and the target's capacity is not checked.
    """
    try:
        enrollment = enrollment_service.start_partnership(
            db,
            identity.user_id,
            data.partnership_id,
            data.selections,
            is_instructor=identity.is_instructor,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (PartnershipInactiveError, InvalidSelectionError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (AlreadyCompletedError, AlreadyActiveError, CapacityExceededError) as e:
        logger.info(
            f"Start rejected: {e}",
            extra=build_log_context(
                user_id=identity.user_id,
                partnership_id=data.partnership_id,
                is_instructor=identity.is_instructor,
                route=request.url.path,
                method=request.method,
            ),
        )
        raise HTTPException(status_code=409, detail=str(e))

    return partnership_service.to_enrollment_read(enrollment, include_criteria=True)


@router.put(
    "",
    response_model=EnrollmentRead,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(MUTATION_LIMIT)
def update_partnership_status(
    request: Request,
    data: UpdatePartnershipStatusRequest,
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """Set an enrollment's status (active, completed, or abandoned)."""
    try:
        enrollment = enrollment_service.update_partnership_status(
            db, identity.user_id, data.id, data.status
        )
    except InvalidStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (AlreadyActiveError, CapacityExceededError) as e:
        raise HTTPException(status_code=409, detail=str(e))

    return partnership_service.to_enrollment_read(enrollment)


@router.delete(
    "",
    response_model=ClearPartnershipResponse,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(MUTATION_LIMIT)
def clear_partnership(
    request: Request,
    identity: RequestIdentity = Depends(resolve_identity),
    db: Session = Depends(get_db),
):
    """Instructor only: abandon the user's active partnership and delete all their cards."""
    try:
        enrollment, deleted = enrollment_service.abandon_and_clear_for_instructor(
            db, identity.user_id, is_instructor=identity.is_instructor
        )
    except NotInstructorError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ClearPartnershipResponse(
        deleted_cards=deleted,
        enrollment=partnership_service.to_enrollment_read(enrollment),
    )
