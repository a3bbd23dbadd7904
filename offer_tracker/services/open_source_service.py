"""Open-source card service - the user's kanban board.

Generated cards come from card_generator; this module covers what the user
does with them afterwards. Every query is scoped to the owning user.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from offer_tracker.core.catalog import PartnershipCatalog, get_catalog
from offer_tracker.core.structured_logging import build_log_context
from offer_tracker.db.enums import CardStatus
from offer_tracker.db.models import OpenSourceEntry
from offer_tracker.schemas.open_source import (
    OpenSourceEntryCreate,
    OpenSourceEntryRead,
    OpenSourceEntryUpdate,
)
from offer_tracker.services import enrollment_service
from offer_tracker.services.errors import (
    InvalidSelectionError,
    InvalidStatusError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


def _check_status(status: str) -> str:
    if not CardStatus.has_value(status):
        allowed = ", ".join(s.value for s in CardStatus)
        raise InvalidStatusError(f"Invalid card status '{status}'. Must be one of: {allowed}")
    return status


def _check_extras(
    extras: list[str],
    criteria_type: str,
    catalog: PartnershipCatalog | None = None,
) -> list[str]:
    """
    Extras must be non-primary catalog types other than the card's own.

    Duplicates are dropped, keeping first-seen order.
    """
    allowed = {t.type for t in (catalog or get_catalog()).extra_types()}
    cleaned: list[str] = []
    for extra in extras:
        if extra not in allowed or extra == criteria_type:
            raise InvalidSelectionError(
                f"'{extra}' is not an extra for a {criteria_type} card "
                f"(expected one of: {', '.join(sorted(allowed - {criteria_type}))})"
            )
        if extra not in cleaned:
            cleaned.append(extra)
    return cleaned



def list_cards(db: Session, user_id: UUID) -> list[OpenSourceEntry]:
    """List the user's cards, newest first."""
    return list(
        db.execute(
            select(OpenSourceEntry)
            .where(OpenSourceEntry.user_id == user_id)
            .order_by(OpenSourceEntry.date_created.desc())
        ).scalars()
    )


def get_card(db: Session, user_id: UUID, card_id: UUID) -> OpenSourceEntry:
    """Get a card by ID (user-scoped). Raises NotFoundError."""
    card = db.execute(
        select(OpenSourceEntry).where(
            OpenSourceEntry.id == card_id,
            OpenSourceEntry.user_id == user_id,
        )
    ).scalar_one_or_none()
    if card is None:
        raise NotFoundError("Card not found")
    return card


def create_card(db: Session, user_id: UUID, data: OpenSourceEntryCreate) -> OpenSourceEntry:
    """
    Create a card by hand.

    The card joins the user's active enrollment when its partnership_name
    matches that enrollment's partnership; otherwise it stays unattached.
    """
    _check_status(data.status)
    extras = _check_extras(data.selected_extras, data.criteria_type)
    now = datetime.now(timezone.utc)

    enrollment_id = None
    active = enrollment_service.get_active_enrollment(db, user_id)
    if active is not None and data.partnership_name == active.partnership.name:
        enrollment_id = active.id

    card = OpenSourceEntry(
        user_id=user_id,
        enrollment_id=enrollment_id,
        partnership_name=data.partnership_name,
        criteria_type=data.criteria_type,
        metric=data.metric,
        status=data.status,
        selected_extras=extras,
        plan_fields=data.plan_fields,
        plan_responses=data.plan_responses,
        baby_step_fields=data.baby_step_fields,
        baby_step_responses=data.baby_step_responses,
        proof_of_completion=data.proof_of_completion,
        proof_responses=data.proof_responses,
        date_created=data.date_created or now,
        date_modified=now,
    )
    db.add(card)
    db.commit()
    db.refresh(card)
    logger.info(
        "Card created",
        extra=build_log_context(user_id=user_id, enrollment_id=enrollment_id),
    )
    return card


def update_card(db: Session, user_id: UUID, data: OpenSourceEntryUpdate) -> OpenSourceEntry:
    """Apply the fields present in the request to the user's card."""
    card = get_card(db, user_id, data.id)
    changes = data.model_dump(exclude_unset=True, exclude={"id"})
    if changes.get("status") is not None:
        _check_status(changes["status"])
    extras = changes.get("selected_extras")
    if extras is not None or changes.get("criteria_type"):
        changes["selected_extras"] = _check_extras(
            extras if extras is not None else list(card.selected_extras or []),
            changes.get("criteria_type") or card.criteria_type,
        )

    for field, value in changes.items():
        if field in ("criteria_type", "status", "selected_extras") and value is None:
            # Non-nullable columns: explicit null means "leave as is"
            continue
        setattr(card, field, value)

    card.date_modified = datetime.now(timezone.utc)
    db.commit()
    db.refresh(card)
    return card


def move_card(db: Session, user_id: UUID, card_id: UUID, status: str) -> OpenSourceEntry:
    """Change only the card's column."""
    _check_status(status)
    card = get_card(db, user_id, card_id)
    previous = card.status
    card.status = status
    card.date_modified = datetime.now(timezone.utc)
    db.commit()
    db.refresh(card)
    logger.info(
        f"Card moved {previous} -> {status}",
        extra=build_log_context(user_id=user_id, enrollment_id=card.enrollment_id),
    )
    return card


def delete_card(db: Session, user_id: UUID, card_id: UUID) -> None:
    card = get_card(db, user_id, card_id)
    db.delete(card)
    db.commit()


def to_card_read(card: OpenSourceEntry) -> OpenSourceEntryRead:
    return OpenSourceEntryRead.model_validate(card)
