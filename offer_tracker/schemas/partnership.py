"""Pydantic schemas for partnerships and enrollments."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class PartnershipRead(BaseModel):
    """Persisted partnership with its capacity ledger."""
    id: int
    name: str
    company: str | None = None
    role: str | None = None
    linkedin_url: str | None = None
    max_users: int
    active_user_count: int
    is_active: bool

    model_config = {"from_attributes": True}


class AvailablePartnership(BaseModel):
    id: int
    name: str
    linkedin_url: str | None = None
    company: str | None = None
    role: str | None = None
    spots_remaining: int
    max_users: int


class FullPartnership(BaseModel):
    id: int
    name: str
    linkedin_url: str | None = None
    company: str | None = None
    role: str | None = None


class AvailablePartnershipsResponse(BaseModel):
    available: list[AvailablePartnership]
    full: list[FullPartnership]


class CriterionRead(BaseModel):
    """A resolved criterion of the user's active partnership."""
    type: str
    count: int
    metric: str
    is_primary: bool
    # True when the criterion came from a multiple-choice block
    is_from_choice: bool = False
    choice_index: int | None = None


class EnrollmentRead(BaseModel):
    id: UUID
    user_id: UUID
    partnership_id: int
    partnership_name: str
    status: str
    selections: dict[str, str] = {}
    started_at: datetime
    completed_at: datetime | None = None
    partnership: PartnershipRead
    criteria: list[CriterionRead] = []


class UserPartnershipResponse(BaseModel):
    active: EnrollmentRead | None
    completed: list[EnrollmentRead]


class StartPartnershipRequest(BaseModel):
    """Request to start (or, for instructors, switch to) a partnership."""
    partnership_id: int = Field(..., ge=1)
    # Multiple-choice block index -> chosen criterion type
    selections: dict[int, str] = Field(default_factory=dict)


class UpdatePartnershipStatusRequest(BaseModel):
    id: UUID
    # Validated by the service so unknown values map to a 400
    status: str = Field(..., min_length=1, max_length=20)


class ClearPartnershipResponse(BaseModel):
    success: bool = True
    deleted_cards: int
    enrollment: EnrollmentRead
