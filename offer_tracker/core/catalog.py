"""Partnership catalog and criterion type registry.

Both are static JSON configuration read once per process into frozen
dataclasses. Nothing in the request path mutates them.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from offer_tracker.core.config import settings

logger = logging.getLogger(__name__)

MULTIPLE_CHOICE = "multiple_choice"


class CatalogError(ValueError):
    """Catalog file is missing or malformed."""


@dataclass(frozen=True)
class CriterionType:
    """Registry entry describing how a criterion type is displayed and tracked."""

    type: str
    metric: str
    is_primary: bool
    plan_column_fields: tuple[Any, ...] = ()
    baby_step_column_fields: tuple[Any, ...] = ()
    proof_of_completion_column_fields: tuple[Any, ...] = ()


@dataclass(frozen=True)
class CriterionChoice:
    type: str
    count: int = 1


@dataclass(frozen=True)
class CriterionSpec:
    """A fixed criterion, or a multiple_choice block holding choices."""

    type: str
    count: int = 1
    choices: tuple[CriterionChoice, ...] = ()

    @property
    def is_multiple_choice(self) -> bool:
        return self.type == MULTIPLE_CHOICE

    def find_choice(self, criterion_type: str) -> CriterionChoice | None:
        for choice in self.choices:
            if choice.type == criterion_type:
                return choice
        return None


@dataclass(frozen=True)
class PartnershipDefinition:
    id: int
    name: str
    company: str | None = None
    role: str | None = None
    linkedin_url: str | None = None
    max_users: int | None = None
    criteria: tuple[CriterionSpec, ...] = ()

    @property
    def multiple_choice_blocks(self) -> tuple[CriterionSpec, ...]:
        return tuple(c for c in self.criteria if c.is_multiple_choice)


@dataclass(frozen=True)
class PartnershipCatalog:
    partnerships: Mapping[int, PartnershipDefinition] = field(default_factory=dict)
    criteria_types: Mapping[str, CriterionType] = field(default_factory=dict)

    def get_partnership(self, partnership_id: int) -> PartnershipDefinition | None:
        return self.partnerships.get(partnership_id)

    def get_type(self, criterion_type: str) -> CriterionType | None:
        return self.criteria_types.get(criterion_type)

    def extra_types(self) -> list[CriterionType]:
        """Non-primary types, attachable to an existing card as extras."""
        return [t for t in self.criteria_types.values() if not t.is_primary]


# =============================================================================
# Parsing
# =============================================================================

def _parse_count(raw: dict, where: str) -> int:
    count = raw.get("count", 1)
    if not isinstance(count, int) or isinstance(count, bool) or count < 1:
        raise CatalogError(f"{where}: count must be a positive integer")
    return count


def _parse_criterion(raw: dict, registry: Mapping[str, CriterionType], where: str) -> CriterionSpec:
    criterion_type = raw.get("type")
    if not criterion_type:
        raise CatalogError(f"{where}: criterion is missing 'type'")

    if criterion_type == MULTIPLE_CHOICE:
        raw_choices = raw.get("choices") or []
        if not raw_choices:
            raise CatalogError(f"{where}: multiple_choice block has no choices")
        choices = []
        for idx, raw_choice in enumerate(raw_choices):
            choice_where = f"{where}.choices[{idx}]"
            choice_type = raw_choice.get("type")
            if choice_type not in registry:
                raise CatalogError(f"{choice_where}: unknown criterion type '{choice_type}'")
            choices.append(CriterionChoice(type=choice_type, count=_parse_count(raw_choice, choice_where)))
        return CriterionSpec(type=MULTIPLE_CHOICE, choices=tuple(choices))

    if criterion_type not in registry:
        raise CatalogError(f"{where}: unknown criterion type '{criterion_type}'")
    return CriterionSpec(type=criterion_type, count=_parse_count(raw, where))


def parse_catalog(raw: dict) -> PartnershipCatalog:
    """Validate raw catalog JSON and build the immutable catalog."""
    raw_types = raw.get("criteria_types")
    if not isinstance(raw_types, dict):
        raise CatalogError("catalog is missing 'criteria_types'")

    registry: dict[str, CriterionType] = {}
    for type_name, spec in raw_types.items():
        registry[type_name] = CriterionType(
            type=type_name,
            metric=spec.get("metric", type_name),
            is_primary=bool(spec.get("is_primary", False)),
            plan_column_fields=tuple(spec.get("plan_column_fields") or ()),
            baby_step_column_fields=tuple(spec.get("baby_step_column_fields") or ()),
            proof_of_completion_column_fields=tuple(
                spec.get("proof_of_completion_column_fields") or ()
            ),
        )

    partnerships: dict[int, PartnershipDefinition] = {}
    for idx, entry in enumerate(raw.get("partnerships") or []):
        where = f"partnerships[{idx}]"
        partnership_id = entry.get("id")
        if not isinstance(partnership_id, int) or not entry.get("name"):
            raise CatalogError(f"{where}: 'id' (int) and 'name' are required")
        if partnership_id in partnerships:
            raise CatalogError(f"{where}: duplicate partnership id {partnership_id}")
        criteria = tuple(
            _parse_criterion(c, registry, f"{where}.criteria[{c_idx}]")
            for c_idx, c in enumerate(entry.get("criteria") or [])
        )
        partnerships[partnership_id] = PartnershipDefinition(
            id=partnership_id,
            name=entry["name"],
            company=entry.get("company"),
            role=entry.get("role"),
            linkedin_url=entry.get("linkedIn"),
            max_users=entry.get("max_users"),
            criteria=criteria,
        )

    return PartnershipCatalog(
        partnerships=MappingProxyType(partnerships),
        criteria_types=MappingProxyType(registry),
    )


def load_catalog(path: str | Path) -> PartnershipCatalog:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"Partnership catalog not found at {path}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Partnership catalog at {path} is not valid JSON: {e}") from e

    catalog = parse_catalog(raw)
    logger.info(
        f"Loaded partnership catalog: {len(catalog.partnerships)} partnerships, "
        f"{len(catalog.criteria_types)} criterion types"
    )
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> PartnershipCatalog:
    """Process-wide catalog, loaded on first use."""
    return load_catalog(settings.PARTNERSHIP_CATALOG_PATH)
