"""Structured logging helpers."""

from typing import Any
from uuid import UUID


def build_log_context(
    *,
    user_id: UUID | str | None = None,
    partnership_id: int | None = None,
    enrollment_id: UUID | str | None = None,
    is_instructor: bool | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict with only the provided fields."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = str(user_id)
    if partnership_id is not None:
        context["partnership_id"] = partnership_id
    if enrollment_id:
        context["enrollment_id"] = str(enrollment_id)
    if is_instructor is not None:
        context["is_instructor"] = is_instructor
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context
