"""API tests for partnership listing, enrollment endpoints, and the instructor view."""

import pytest
from httpx import ASGITransport, AsyncClient

from offer_tracker.core.deps import get_db
from offer_tracker.db.models import Partnership
from offer_tracker.main import app
from offer_tracker.services import enrollment_service


# =============================================================================
# Listing
# =============================================================================

@pytest.mark.asyncio
async def test_available_partnerships(client, db, partnerships):
    partnerships[2].active_user_count = 2
    partnerships[3].is_active = False
    db.commit()

    response = await client.get("/partnerships/available")

    assert response.status_code == 200
    data = response.json()
    assert [p["id"] for p in data["available"]] == [1]
    assert data["available"][0]["spots_remaining"] == 2
    assert data["available"][0]["linkedin_url"] == "https://www.linkedin.com/company/formwise"
    assert [p["id"] for p in data["full"]] == [2]


# =============================================================================
# Identity resolution
# =============================================================================

@pytest.mark.asyncio
async def test_get_requires_session(client, partnerships):
    response = await client.get("/users/partnership")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_user_id_param_requires_instructor(authed_client, other_user, partnerships):
    response = await authed_client.get(f"/users/partnership?userId={other_user.id}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_instructor_unknown_user(instructor_client, partnerships):
    response = await instructor_client.get(
        "/users/partnership?userId=00000000-0000-0000-0000-000000000000"
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_mutation_requires_csrf_header(db, test_auth, partnerships):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies={test_auth.cookie_name: test_auth.token},
        ) as c:
            response = await c.post("/users/partnership", json={"partnership_id": 1})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 403


# =============================================================================
# Enrollment lifecycle
# =============================================================================

@pytest.mark.asyncio
async def test_start_and_view_partnership(authed_client, partnerships):
    response = await authed_client.post(
        "/users/partnership",
        json={"partnership_id": 1, "selections": {"0": "pull_request"}},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "active"
    assert data["partnership_name"] == "Typesafe Forms"
    assert data["selections"] == {"0": "pull_request"}

    response = await authed_client.get("/users/partnership")
    assert response.status_code == 200
    view = response.json()
    assert view["completed"] == []
    criteria = {c["type"]: c for c in view["active"]["criteria"]}
    assert criteria["pull_request"]["is_from_choice"] is True
    assert criteria["pull_request"]["choice_index"] == 0
    # Non-primary criteria are listed even though they have no cards
    assert criteria["linkedin_post"]["is_primary"] is False
    assert view["active"]["partnership"]["active_user_count"] == 1

    cards = await authed_client.get("/open-source")
    assert len(cards.json()) == 5


@pytest.mark.asyncio
async def test_start_conflicts(authed_client, partnerships):
    await authed_client.post("/users/partnership", json={"partnership_id": 1})

    response = await authed_client.post("/users/partnership", json={"partnership_id": 2})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_start_errors(authed_client, db, partnerships):
    partnerships[2].is_active = False
    db.commit()

    assert (await authed_client.post("/users/partnership", json={"partnership_id": 99})).status_code == 404
    assert (await authed_client.post("/users/partnership", json={"partnership_id": 2})).status_code == 400
    response = await authed_client.post(
        "/users/partnership", json={"partnership_id": 1, "selections": {"0": "feature"}}
    )
    assert response.status_code == 400
    assert (await authed_client.post("/users/partnership", json={"partnership_id": 0})).status_code == 422


@pytest.mark.asyncio
async def test_start_full_partnership(authed_client, db, partnerships):
    partnerships[3].active_user_count = 3
    db.commit()

    response = await authed_client.post("/users/partnership", json={"partnership_id": 3})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_complete_then_restart_rejected(authed_client, partnerships):
    started = (await authed_client.post("/users/partnership", json={"partnership_id": 1})).json()

    response = await authed_client.put(
        "/users/partnership", json={"id": started["id"], "status": "completed"}
    )
    assert response.status_code == 200
    assert response.json()["completed_at"] is not None

    view = (await authed_client.get("/users/partnership")).json()
    assert view["active"] is None
    assert [e["id"] for e in view["completed"]] == [started["id"]]

    response = await authed_client.post("/users/partnership", json={"partnership_id": 1})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_put_validation(authed_client, partnerships):
    started = (await authed_client.post("/users/partnership", json={"partnership_id": 1})).json()

    response = await authed_client.put(
        "/users/partnership", json={"id": started["id"], "status": "paused"}
    )
    assert response.status_code == 400

    response = await authed_client.put(
        "/users/partnership",
        json={"id": "00000000-0000-0000-0000-000000000000", "status": "abandoned"},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reactivate_into_full_partnership_rejected(authed_client, db, other_user, partnerships):
    partnerships[1].max_users = 1
    db.commit()
    started = (await authed_client.post("/users/partnership", json={"partnership_id": 1})).json()
    await authed_client.put("/users/partnership", json={"id": started["id"], "status": "abandoned"})
    enrollment_service.start_partnership(db, other_user.id, 1)

    response = await authed_client.put(
        "/users/partnership", json={"id": started["id"], "status": "active"}
    )

    assert response.status_code == 409
    db.expire_all()
    p = db.get(Partnership, 1)
    assert p.active_user_count <= p.max_users


# =============================================================================
# Instructor actions
# =============================================================================

@pytest.mark.asyncio
async def test_delete_requires_instructor(authed_client, partnerships):
    await authed_client.post("/users/partnership", json={"partnership_id": 1})

    response = await authed_client.delete("/users/partnership")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_instructor_switch_and_clear(instructor_client, authed_client, db, test_user, partnerships):
    await authed_client.post(
        "/users/partnership", json={"partnership_id": 1, "selections": {"0": "pull_request"}}
    )

    response = await instructor_client.post(
        f"/users/partnership?userId={test_user.id}", json={"partnership_id": 3}
    )
    assert response.status_code == 201
    assert response.json()["partnership_name"] == "Docs Guild"

    db.expire_all()
    assert db.get(Partnership, 1).active_user_count == 0
    assert db.get(Partnership, 3).active_user_count == 1

    response = await instructor_client.delete(f"/users/partnership?userId={test_user.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["deleted_cards"] == 2
    assert data["enrollment"]["status"] == "abandoned"

    response = await instructor_client.delete(f"/users/partnership?userId={test_user.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_students_view(instructor_client, authed_client, test_user, other_user, partnerships):
    await authed_client.post("/users/partnership", json={"partnership_id": 3})

    response = await instructor_client.get("/instructor/students")

    assert response.status_code == 200
    students = response.json()["students"]
    assert [s["email"] for s in students] == [other_user.email, test_user.email]
    mine = students[1]
    assert mine["active_partnership_name"] == "Docs Guild"
    assert mine["total_criteria_count"] == 3
    assert mine["completed_criteria_count"] == 0
    assert mine["active_status"] == 2
    assert mine["progress_status"] == 0


@pytest.mark.asyncio
async def test_students_view_requires_instructor(authed_client, partnerships):
    response = await authed_client.get("/instructor/students")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_last_slot_taken_moves_partnership_to_full(authed_client, client, db, partnerships):
    partnerships[1].max_users = 1
    db.commit()

    response = await authed_client.post("/users/partnership", json={"partnership_id": 1})
    assert response.status_code == 201

    listing = (await client.get("/partnerships/available")).json()
    assert 1 not in [p["id"] for p in listing["available"]]
    assert 1 in [p["id"] for p in listing["full"]]
