"""Criteria card generator.

Turns a partnership's criteria list plus the user's multiple-choice
selections into tracked cards. Multiple-choice blocks are addressed by their
position among multiple-choice blocks only: index 0 is the first
multiple_choice entry in the list, whatever fixed criteria precede it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping
from uuid import UUID

from sqlalchemy.orm import Session

from offer_tracker.core.catalog import PartnershipCatalog, PartnershipDefinition
from offer_tracker.db.enums import CardStatus
from offer_tracker.db.models import OpenSourceEntry
from offer_tracker.services.errors import InvalidSelectionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedCriterion:
    """A criterion after multiple-choice blocks have been resolved."""

    type: str
    count: int
    metric: str
    is_primary: bool
    is_from_choice: bool = False
    choice_index: int | None = None


@dataclass(frozen=True)
class CardPlan:
    criteria_type: str
    metric: str
    plan_fields: tuple
    baby_step_fields: tuple
    proof_of_completion: tuple


def normalize_selections(selections: Mapping | None) -> dict[str, str]:
    """Key selections by block index as a string, dropping empty choices."""
    if not selections:
        return {}
    normalized: dict[str, str] = {}
    for key, value in selections.items():
        if value in (None, ""):
            continue
        try:
            index = int(key)
        except (TypeError, ValueError):
            raise InvalidSelectionError(f"Selection key '{key}' is not a block index")
        normalized[str(index)] = str(value)
    return normalized


def validate_selections(
    definition: PartnershipDefinition,
    selections: Mapping | None,
) -> dict[str, str]:
    """
    Check every selection against the partnership's multiple-choice blocks.

    Missing selections are allowed (the block then yields no card); a
    selection pointing at a block that does not exist, or at a type the block
    does not offer, is rejected.
    """
    normalized = normalize_selections(selections)
    blocks = definition.multiple_choice_blocks
    for key, chosen in normalized.items():
        index = int(key)
        if index < 0 or index >= len(blocks):
            raise InvalidSelectionError(
                f"{definition.name} has no multiple-choice block {index}"
            )
        if blocks[index].find_choice(chosen) is None:
            offered = ", ".join(c.type for c in blocks[index].choices)
            raise InvalidSelectionError(
                f"'{chosen}' is not a choice for block {index} (expected one of: {offered})"
            )
    return normalized


def resolve_criteria(
    definition: PartnershipDefinition,
    selections: Mapping | None,
    catalog: PartnershipCatalog,
    include_non_primary: bool = True,
) -> list[ResolvedCriterion]:
    """Walk the criteria list in order, substituting each block's chosen option."""
    chosen_by_block = normalize_selections(selections)
    resolved: list[ResolvedCriterion] = []
    block_index = 0

    for spec in definition.criteria:
        if spec.is_multiple_choice:
            current_block = block_index
            block_index += 1
            chosen = chosen_by_block.get(str(current_block))
            choice = spec.find_choice(chosen) if chosen else None
            if choice is None:
                continue
            criterion_type = catalog.get_type(choice.type)
            if criterion_type is None or not (include_non_primary or criterion_type.is_primary):
                continue
            resolved.append(
                ResolvedCriterion(
                    type=choice.type,
                    count=choice.count,
                    metric=criterion_type.metric,
                    is_primary=criterion_type.is_primary,
                    is_from_choice=True,
                    choice_index=current_block,
                )
            )
            continue

        criterion_type = catalog.get_type(spec.type)
        if criterion_type is None or not (include_non_primary or criterion_type.is_primary):
            continue
        resolved.append(
            ResolvedCriterion(
                type=spec.type,
                count=spec.count,
                metric=criterion_type.metric,
                is_primary=criterion_type.is_primary,
            )
        )

    return resolved


def plan_cards(
    definition: PartnershipDefinition,
    selections: Mapping | None,
    catalog: PartnershipCatalog,
) -> list[CardPlan]:
    """One card per unit of count, for primary criteria only."""
    plans: list[CardPlan] = []
    for criterion in resolve_criteria(
        definition, selections, catalog, include_non_primary=False
    ):
        criterion_type = catalog.get_type(criterion.type)
        for _ in range(criterion.count):
            plans.append(
                CardPlan(
                    criteria_type=criterion.type,
                    metric=criterion.metric,
                    plan_fields=criterion_type.plan_column_fields,
                    baby_step_fields=criterion_type.baby_step_column_fields,
                    proof_of_completion=criterion_type.proof_of_completion_column_fields,
                )
            )
    return plans


def generate_cards(
    db: Session,
    *,
    user_id: UUID,
    enrollment_id: UUID,
    partnership_name: str,
    definition: PartnershipDefinition,
    selections: Mapping | None,
    catalog: PartnershipCatalog,
) -> list[OpenSourceEntry]:
    """Materialize planned cards in the current transaction (flushed, not committed)."""
    now = datetime.now(timezone.utc)
    cards = [
        OpenSourceEntry(
            user_id=user_id,
            enrollment_id=enrollment_id,
            partnership_name=partnership_name,
            criteria_type=plan.criteria_type,
            metric=plan.metric,
            status=CardStatus.PLAN.value,
            selected_extras=[],
            plan_fields=list(plan.plan_fields),
            plan_responses={},
            baby_step_fields=list(plan.baby_step_fields),
            baby_step_responses={},
            proof_of_completion=list(plan.proof_of_completion),
            proof_responses={},
            date_created=now,
            date_modified=now,
        )
        for plan in plan_cards(definition, selections, catalog)
    ]
    db.add_all(cards)
    db.flush()
    logger.info(f"Generated {len(cards)} cards for enrollment {enrollment_id}")
    return cards
