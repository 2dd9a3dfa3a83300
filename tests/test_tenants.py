"""Farm onboarding, horse records, profile and tenant isolation."""

from __future__ import annotations

import uuid
from datetime import date, timedelta

import pytest_asyncio

from conftest import COOKIE, make_farm, make_user

JSON = {"Accept": "application/json"}


@pytest_asyncio.fixture
async def ana(session_factory, provider, client):
    """Ana owns Sunny Acres and is signed in."""
    async with session_factory() as session:
        user = await make_user(session, name="Ana", external_id="user-test-ana")
        farm = await make_farm(session, user, "Sunny Acres")
    client.cookies.set(COOKIE, provider.start_session("user-test-ana"))
    return user, farm


@pytest_asyncio.fixture
async def neighbour_farm(session_factory):
    async with session_factory() as session:
        bob = await make_user(
            session, name="Bob", email="bob@example.com", external_id="user-test-bob"
        )
        return await make_farm(session, bob, "Windy Ridge")


async def add_horse(client, farm_id, **fields):
    data = {"name": "Sunny", "gender": "mare", "description": "", "date_of_birth": ""}
    data.update(fields)
    response = await client.post(f"/farm/{farm_id}/horse", data=data, headers=JSON)
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------


class TestNewFarm:
    async def test_form_redirects_onboarded_user_to_dashboard(self, client, ana):
        user, farm = ana

        response = await client.get(f"/new/farm/{user.id}")

        assert response.status_code == 303
        assert response.headers["location"] == f"/farm/{farm.id}"

    async def test_resubmitting_keeps_the_first_farm(self, client, provider, session_factory):
        async with session_factory() as session:
            user = await make_user(session, external_id="user-test-cara")
        client.cookies.set(COOKIE, provider.start_session("user-test-cara"))

        first = await client.post(f"/new/farm/{user.id}", data={"name": "X"})
        second = await client.post(f"/new/farm/{user.id}", data={"name": "Y"})

        assert first.status_code == 303
        assert second.headers["location"] == first.headers["location"]
        dashboard = await client.get(first.headers["location"])
        assert "<h2>X</h2>" in dashboard.text

    async def test_blank_farm_name_is_rejected(self, client, provider, session_factory):
        async with session_factory() as session:
            user = await make_user(session, external_id="user-test-cara")
        client.cookies.set(COOKIE, provider.start_session("user-test-cara"))

        response = await client.post(f"/new/farm/{user.id}", data={"name": "  "})

        assert response.status_code == 400

    async def test_cannot_onboard_someone_else(self, client, ana, session_factory):
        async with session_factory() as session:
            other = await make_user(session, name="Dee", email="dee@example.com")

        response = await client.post(f"/new/farm/{other.id}", data={"name": "Stolen"})

        assert response.status_code == 403


# ---------------------------------------------------------------------------
# Horses
# ---------------------------------------------------------------------------


class TestHorses:
    async def test_form_create_redirects_to_dashboard(self, client, ana):
        _, farm = ana

        response = await client.post(
            f"/farm/{farm.id}/horse",
            data={"name": "Sunny", "gender": "mare", "date_of_birth": "2015-04-01"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == f"/farm/{farm.id}"
        dashboard = await client.get(f"/farm/{farm.id}")
        assert "Sunny" in dashboard.text
        assert "Mare" in dashboard.text

    async def test_create_list_and_get(self, client, ana):
        _, farm = ana
        foal_dob = (date.today() - timedelta(days=200)).isoformat()

        created = await add_horse(
            client, farm.id, name="Pip", gender="stallion", date_of_birth=foal_dob
        )
        await add_horse(client, farm.id, name="Blaze", gender="gelding")

        assert created["display_gender"] == "Colt"
        assert created["farm_id"] == str(farm.id)

        listed = await client.get(f"/farm/{farm.id}/horses")
        assert [h["name"] for h in listed.json()] == ["Blaze", "Pip"]

        fetched = await client.get(f"/farm/{farm.id}/horse/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["date_of_birth"] == foal_dob

    async def test_invalid_gender_is_rejected(self, client, ana):
        _, farm = ana

        response = await client.post(
            f"/farm/{farm.id}/horse", data={"name": "Odd", "gender": "unicorn"}, headers=JSON
        )

        assert response.status_code == 400

    async def test_future_birth_date_is_rejected(self, client, ana):
        _, farm = ana
        tomorrow = (date.today() + timedelta(days=1)).isoformat()

        response = await client.post(
            f"/farm/{farm.id}/horse",
            data={"name": "Soon", "gender": "mare", "date_of_birth": tomorrow},
            headers=JSON,
        )

        assert response.status_code == 400

    async def test_update_changes_only_given_fields(self, client, ana):
        _, farm = ana
        horse = await add_horse(client, farm.id, name="Sunny", description="Bay mare")

        response = await client.put(
            f"/farm/{farm.id}/horse/{horse['id']}", json={"name": "Sunny Delight"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Sunny Delight"
        assert body["description"] == "Bay mare"
        assert body["gender"] == "mare"

    async def test_delete_removes_horse(self, client, ana):
        _, farm = ana
        horse = await add_horse(client, farm.id)

        deleted = await client.delete(f"/farm/{farm.id}/horse/{horse['id']}")
        missing = await client.get(f"/farm/{farm.id}/horse/{horse['id']}")

        assert deleted.status_code == 204
        assert missing.status_code == 404

    async def test_unknown_horse_is_404(self, client, ana):
        _, farm = ana

        response = await client.get(f"/farm/{farm.id}/horse/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["detail"]["error_code"] == "HORSE_NOT_FOUND"

    async def test_dashboard_counts_herd(self, client, ana):
        _, farm = ana
        filly_dob = (date.today() - timedelta(days=400)).isoformat()
        await add_horse(client, farm.id, name="Sunny", gender="mare")
        await add_horse(client, farm.id, name="Dot", gender="mare", date_of_birth=filly_dob)
        await add_horse(client, farm.id, name="Blaze", gender="gelding")

        response = await client.get(f"/farm/{farm.id}")

        assert response.status_code == 200
        assert "<strong>3</strong> horses" in response.text
        assert "<strong>2</strong> mares" in response.text
        assert "<strong>1</strong> youngstock" in response.text
        assert "Filly" in response.text


# ---------------------------------------------------------------------------
# Tenant isolation
# ---------------------------------------------------------------------------


class TestTenantIsolation:
    async def test_other_farm_dashboard_is_forbidden(self, client, ana, neighbour_farm):
        response = await client.get(f"/farm/{neighbour_farm.id}")

        assert response.status_code == 403
        assert response.json()["detail"]["error_code"] == "TENANT_ACCESS_DENIED"

    async def test_other_farm_horses_are_forbidden(self, client, ana, neighbour_farm):
        listed = await client.get(f"/farm/{neighbour_farm.id}/horses")
        created = await client.post(
            f"/farm/{neighbour_farm.id}/horse", data={"name": "Sneaky", "gender": "mare"}
        )

        assert listed.status_code == 403
        assert created.status_code == 403

    async def test_horse_ids_do_not_cross_farms(self, client, ana, provider, neighbour_farm):
        _, farm = ana
        horse = await add_horse(client, farm.id)

        client.cookies.clear()
        client.cookies.set(COOKIE, provider.start_session("user-test-bob"))

        response = await client.get(f"/farm/{neighbour_farm.id}/horse/{horse['id']}")

        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class TestProfile:
    async def test_shows_current_details(self, client, ana):
        user, _ = ana

        response = await client.get(f"/user/{user.id}/profile")

        assert response.status_code == 200
        assert 'value="ana@example.com"' in response.text

    async def test_update_saves_and_returns_to_farm(self, client, ana):
        user, farm = ana

        response = await client.post(
            f"/user/{user.id}/profile", data={"name": "Ana Lopez", "email": "ana@sunny.example"}
        )
        page = await client.get(f"/user/{user.id}/profile")

        assert response.status_code == 303
        assert response.headers["location"] == f"/farm/{farm.id}"
        assert 'value="Ana Lopez"' in page.text
        assert 'value="ana@sunny.example"' in page.text

    async def test_invalid_email_is_rejected(self, client, ana):
        user, _ = ana

        response = await client.post(
            f"/user/{user.id}/profile", data={"name": "Ana", "email": "nope"}
        )

        assert response.status_code == 400

    async def test_other_profiles_are_forbidden(self, client, ana, session_factory):
        async with session_factory() as session:
            other = await make_user(session, name="Dee", email="dee@example.com")

        response = await client.get(f"/user/{other.id}/profile")

        assert response.status_code == 403
