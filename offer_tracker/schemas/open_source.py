"""Pydantic schemas for open-source cards."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class OpenSourceEntryRead(BaseModel):
    """Card response."""

    id: UUID
    user_id: UUID
    enrollment_id: UUID | None = None
    partnership_name: str | None = None
    criteria_type: str
    metric: str | None = None
    status: str
    selected_extras: list[str] = []
    plan_fields: list[Any] | None = None
    plan_responses: dict[str, Any] | None = None
    baby_step_fields: list[Any] | None = None
    baby_step_responses: dict[str, Any] | None = None
    proof_of_completion: list[Any] | None = None
    proof_responses: dict[str, Any] | None = None
    date_created: datetime
    date_modified: datetime

    model_config = {"from_attributes": True}


class OpenSourceEntryCreate(BaseModel):
    """Request to add a card by hand."""

    partnership_name: str | None = Field(None, max_length=255)
    criteria_type: str = Field(..., min_length=1, max_length=100)
    metric: str | None = Field(None, max_length=255)
    status: str = "plan"
    selected_extras: list[str] = Field(default_factory=list)
    plan_fields: list[Any] | None = None
    plan_responses: dict[str, Any] | None = None
    baby_step_fields: list[Any] | None = None
    baby_step_responses: dict[str, Any] | None = None
    proof_of_completion: list[Any] | None = None
    proof_responses: dict[str, Any] | None = None
    date_created: datetime | None = None


class OpenSourceEntryUpdate(BaseModel):
    """Partial card update. Only fields present in the request are applied."""

    id: UUID
    partnership_name: str | None = Field(None, max_length=255)
    criteria_type: str | None = Field(None, min_length=1, max_length=100)
    metric: str | None = Field(None, max_length=255)
    status: str | None = None
    selected_extras: list[str] | None = None
    plan_fields: list[Any] | None = None
    plan_responses: dict[str, Any] | None = None
    baby_step_fields: list[Any] | None = None
    baby_step_responses: dict[str, Any] | None = None
    proof_of_completion: list[Any] | None = None
    proof_responses: dict[str, Any] | None = None


class OpenSourceStatusMove(BaseModel):
    """Drag-and-drop move between board columns."""

    status: str = Field(..., min_length=1, max_length=30)


class DeleteResponse(BaseModel):
    success: bool = True
