"""API tests for the open-source board (card CRUD)."""

import pytest

from offer_tracker.db.models import OpenSourceEntry


async def _create(client, **overrides):
    body = {"criteria_type": "issue", "metric": "Issue resolved", "partnership_name": "Side project"}
    body.update(overrides)
    response = await client.post("/open-source", json=body)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_and_list_newest_first(authed_client, partnerships):
    first = await _create(authed_client, date_created="2026-01-01T00:00:00Z")
    second = await _create(authed_client, criteria_type="feature")

    response = await authed_client.get("/open-source")

    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [second["id"], first["id"]]
    assert first["status"] == "plan"
    assert first["enrollment_id"] is None


@pytest.mark.asyncio
async def test_manual_card_joins_matching_active_enrollment(authed_client, partnerships):
    enrollment = (
        await authed_client.post("/users/partnership", json={"partnership_id": 3})
    ).json()

    card = await _create(authed_client, criteria_type="blog_post", partnership_name="Docs Guild")
    stray = await _create(authed_client, partnership_name="Typesafe Forms")

    assert card["enrollment_id"] == enrollment["id"]
    assert stray["enrollment_id"] is None


@pytest.mark.asyncio
async def test_update_applies_given_fields_and_touches_modified(authed_client, partnerships):
    card = await _create(authed_client, plan_responses={"Issue link": "https://example.com/1"})

    response = await authed_client.put(
        "/open-source",
        json={"id": card["id"], "status": "in_progress", "selected_extras": ["blog_post"]},
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "in_progress"
    assert updated["selected_extras"] == ["blog_post"]
    assert updated["plan_responses"] == {"Issue link": "https://example.com/1"}
    assert updated["date_modified"] >= card["date_modified"]


@pytest.mark.asyncio
async def test_move_and_invalid_status(authed_client, partnerships):
    card = await _create(authed_client)

    response = await authed_client.patch(f"/open-source?id={card['id']}", json={"status": "done"})
    assert response.status_code == 200
    assert response.json()["status"] == "done"

    response = await authed_client.patch(f"/open-source?id={card['id']}", json={"status": "shipped"})
    assert response.status_code == 400

    response = await authed_client.post("/open-source", json={"criteria_type": "issue", "status": "later"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete(authed_client, db, partnerships):
    card = await _create(authed_client)

    response = await authed_client.delete(f"/open-source?id={card['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert db.query(OpenSourceEntry).count() == 0

    response = await authed_client.delete(f"/open-source?id={card['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cards_are_scoped_to_owner(authed_client, db, other_user, partnerships):
    foreign = OpenSourceEntry(user_id=other_user.id, criteria_type="issue", status="plan")
    db.add(foreign)
    db.commit()

    assert (await authed_client.get("/open-source")).json() == []
    response = await authed_client.patch(f"/open-source?id={foreign.id}", json={"status": "done"})
    assert response.status_code == 404
    response = await authed_client.put("/open-source", json={"id": str(foreign.id), "metric": "x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_instructor_acts_on_users_board(instructor_client, db, test_user, partnerships):
    db.add(OpenSourceEntry(user_id=test_user.id, criteria_type="issue", status="plan"))
    db.commit()

    response = await instructor_client.get(f"/open-source?userId={test_user.id}")

    assert response.status_code == 200
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_extras_must_be_non_primary_types(authed_client, partnerships):
    for extras in (["pull_request"], ["podcast"], ["issue"]):
        response = await authed_client.post(
            "/open-source", json={"criteria_type": "issue", "selected_extras": extras}
        )
        assert response.status_code == 400, extras

    card = await _create(authed_client, selected_extras=["blog_post", "blog_post", "demo_video"])
    assert card["selected_extras"] == ["blog_post", "demo_video"]

    # Changing the type re-checks the extras already on the card
    response = await authed_client.put(
        "/open-source", json={"id": card["id"], "criteria_type": "blog_post"}
    )
    assert response.status_code == 400

    response = await authed_client.put(
        "/open-source", json={"id": card["id"], "selected_extras": []}
    )
    assert response.status_code == 200
    assert response.json()["selected_extras"] == []
