"""FastAPI dependencies for identity resolution, authorization, and database access."""

from typing import Generator
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from offer_tracker.core.security import decode_session_token
from offer_tracker.db.enums import IdentityKind
from offer_tracker.db.session import SessionLocal
from offer_tracker.schemas.auth import RequestIdentity


# Cookie and header names
COOKIE_NAME = "tracker_session"
INSTRUCTOR_COOKIE_NAME = "instructor_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Get authenticated user from session cookie.

    Raises:
        HTTPException 401: Authentication failed
    """
    # Import here to avoid circular imports
    from offer_tracker.db.models import User

    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_session_token(token, expected_kind=IdentityKind.USER)
        user_id = UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid session")

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def get_optional_instructor(request: Request, db: Session):
    """Return the instructor behind the instructor cookie, or None."""
    from offer_tracker.db.models import Instructor

    token = request.cookies.get(INSTRUCTOR_COOKIE_NAME)
    if not token:
        return None
    try:
        payload = decode_session_token(token, expected_kind=IdentityKind.INSTRUCTOR)
        instructor_id = UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        return None
    return db.get(Instructor, instructor_id)


def require_instructor(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Require a valid instructor session.

    Raises:
        HTTPException 401: No instructor session
    """
    instructor = get_optional_instructor(request, db)
    if not instructor:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return instructor


def resolve_identity(
    request: Request,
    user_id_param: str | None = Query(None, alias="userId"),
    db: Session = Depends(get_db),
) -> RequestIdentity:
    """
    Resolve which user a request acts on.

    - No userId query parameter: the session user, acting for themselves.
    - userId given: the caller must hold an instructor session; the
      instructor acts on behalf of that user.

    Raises:
        HTTPException 401: No user session
        HTTPException 403: userId given without an instructor session
        HTTPException 404: Target user does not exist
    """
    from offer_tracker.db.models import User

    if not user_id_param:
        user = get_current_user(request, db)
        return RequestIdentity(user_id=user.id, is_instructor=False)

    instructor = get_optional_instructor(request, db)
    if not instructor:
        raise HTTPException(
            status_code=403,
            detail="Unauthorized: Only instructors can view other users' data",
        )

    try:
        target_id = UUID(user_id_param)
    except ValueError:
        raise HTTPException(status_code=404, detail="User not found")

    if not db.get(User, target_id):
        raise HTTPException(status_code=404, detail="User not found")

    return RequestIdentity(
        user_id=target_id,
        is_instructor=True,
        instructor_id=instructor.id,
    )


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PUT, PATCH, DELETE).

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'"
        )
