"""Identity-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel


class RequestIdentity(BaseModel):
    """
    Resolved identity for a request.

    user_id is the user the request acts on. is_instructor is True only when
    an instructor is acting on behalf of that user via ?userId=.
    """
    user_id: UUID
    is_instructor: bool = False
    instructor_id: UUID | None = None
