"""Tests for criteria resolution and card planning."""

import pytest

from offer_tracker.services.card_generator import (
    normalize_selections,
    plan_cards,
    resolve_criteria,
    validate_selections,
)
from offer_tracker.services.errors import InvalidSelectionError


def _types(plans):
    return [p.criteria_type for p in plans]


def test_normalize_selections_uses_string_keys():
    assert normalize_selections({0: "blog_post", "1": "pull_request", 2: ""}) == {
        "0": "blog_post",
        "1": "pull_request",
    }
    assert normalize_selections(None) == {}


def test_plan_cards_one_per_count_primary_only(catalog):
    forms = catalog.get_partnership(1)
    plans = plan_cards(forms, {0: "pull_request"}, catalog)
    # linkedin_post is non-primary and never becomes a card
    assert _types(plans) == ["issue"] * 3 + ["pull_request"] * 2


def test_non_primary_choice_yields_no_card(catalog):
    forms = catalog.get_partnership(1)
    assert _types(plan_cards(forms, {0: "blog_post"}, catalog)) == ["issue"] * 3


def test_missing_selection_yields_no_card(catalog):
    forms = catalog.get_partnership(1)
    assert _types(plan_cards(forms, {}, catalog)) == ["issue"] * 3


def test_blocks_indexed_among_multiple_choice_only(catalog):
    queue_runner = catalog.get_partnership(2)
    criteria = resolve_criteria(
        queue_runner, {0: "documentation", 1: "blog_post"}, catalog
    )
    by_type = {c.type: c for c in criteria}

    # Fixed criteria before the first block do not shift block indexes
    assert by_type["documentation"].choice_index == 0
    assert by_type["blog_post"].choice_index == 1
    assert by_type["blog_post"].is_from_choice
    assert not by_type["blog_post"].is_primary
    assert not by_type["issue"].is_from_choice
    assert [c.type for c in criteria] == ["issue", "feature", "documentation", "blog_post"]


def test_plan_cards_is_deterministic(catalog):
    queue_runner = catalog.get_partnership(2)
    selections = {0: "documentation", 1: "pull_request"}
    first = plan_cards(queue_runner, selections, catalog)
    second = plan_cards(queue_runner, dict(selections), catalog)
    assert first == second
    assert _types(first) == ["issue", "issue", "feature", "documentation", "pull_request"]


def test_plans_carry_field_templates(catalog):
    plans = plan_cards(catalog.get_partnership(3), {}, catalog)
    assert _types(plans) == ["documentation", "documentation"]
    assert plans[0].plan_fields == ("Page to document",)
    assert plans[0].proof_of_completion == ("Published page link",)
    assert plans[0].metric == "Documentation page written"


@pytest.mark.parametrize(
    "selections",
    [
        {1: "blog_post"},  # Typesafe Forms has a single block
        {0: "feature"},  # not offered by block 0
        {"first": "blog_post"},
        {-1: "blog_post"},
    ],
)
def test_invalid_selections_rejected(catalog, selections):
    with pytest.raises(InvalidSelectionError):
        validate_selections(catalog.get_partnership(1), selections)


def test_valid_selection_normalized(catalog):
    assert validate_selections(catalog.get_partnership(1), {0: "pull_request"}) == {
        "0": "pull_request"
    }


def test_resolve_criteria_can_drop_non_primary(catalog):
    forms = catalog.get_partnership(1)
    everything = resolve_criteria(forms, {0: "blog_post"}, catalog)
    primary = resolve_criteria(forms, {0: "blog_post"}, catalog, include_non_primary=False)

    assert [c.type for c in everything] == ["issue", "blog_post", "linkedin_post"]
    assert [c.type for c in primary] == ["issue"]
