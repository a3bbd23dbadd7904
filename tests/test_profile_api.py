"""API tests for onboarding and the projected offer date."""

from datetime import datetime, timedelta, timezone

import pytest

from offer_tracker.db.models import User


@pytest.mark.asyncio
async def test_onboarding_flow(authed_client, db, test_user):
    response = await authed_client.post("/users/onboarding1", json={
        "name": "Test Student",
        "school": "State University",
        "major": "Computer Science",
        "expected_graduation_date": "2027-05-15",
    })
    assert response.status_code == 200
    assert response.json()["onboarding_progress"] == 1

    profile = (await authed_client.get("/users/onboarding2")).json()
    assert profile["school"] == "State University"
    assert profile["expected_graduation_date"] == "2027-05-15"

    response = await authed_client.post("/users/onboarding2", json={
        "months_to_secure_internship": 6,
        "commitment": 15,
        "apps_with_outreach_per_week": 5,
    })
    assert response.status_code == 200
    assert response.json()["onboarding_progress"] == 2

    response = await authed_client.post("/users/onboarding3", json={
        "commitment": 12,
        "apps_with_outreach_per_week": 10,
        "info_interview_outreach_per_week": 0,
        "in_person_events_per_month": 0,
        "career_fairs_quota": 0,
    })
    assert response.status_code == 200
    plan = response.json()
    assert plan["onboarding_progress"] == 3
    assert plan["months_to_secure_internship"] == 6
    assert plan["commitment"] == 12

    # Ten applications a week project 43 weeks out
    projected = datetime.fromisoformat(plan["projected_offer_date"]).replace(tzinfo=None)
    expected = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(weeks=43)
    assert abs(projected - expected) < timedelta(hours=1)

    # Going back to step 1 keeps the later progress
    await authed_client.post("/users/onboarding1", json={"name": "Test Student"})
    db.expire_all()
    user = db.get(User, test_user.id)
    assert user.onboarding_progress == 3
    assert user.school is None


@pytest.mark.asyncio
async def test_onboarding_validation(authed_client):
    assert (await authed_client.post("/users/onboarding1", json={"school": "X"})).status_code == 422
    response = await authed_client.post("/users/onboarding2", json={"commitment": -1})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_set_projected_offer(authed_client, test_user):
    response = await authed_client.post(
        "/users/projected-offer", json={"projected_offer_date": "2027-02-01T00:00:00Z"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(test_user.id)
    assert data["projected_offer_date"].startswith("2027-02-01")

    assert (await authed_client.post("/users/projected-offer", json={})).status_code == 422


@pytest.mark.asyncio
async def test_instructor_reads_student_profile(instructor_client, authed_client, test_user):
    await authed_client.post("/users/onboarding1", json={"name": "Test Student", "major": "Math"})

    response = await instructor_client.get(f"/users/onboarding2?userId={test_user.id}")
    assert response.status_code == 200
    assert response.json()["major"] == "Math"
