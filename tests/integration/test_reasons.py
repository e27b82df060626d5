"""Integration tests for reason scheduling endpoints."""

import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from tests.conftest import day_string, upcoming_sunday
from volunteer_portal.models.account import Account
from volunteer_portal.services.reason_service import ReasonService


def reasons_url(account: Account | uuid.UUID) -> str:
    user_id = account if isinstance(account, uuid.UUID) else account.id
    return f"/api/users/{user_id}/reasons"


def body(date: str, message: str = "") -> dict:
    return {"reasonData": {"date": date, "message": message}}


@pytest.mark.asyncio
class TestReasonLifecycle:
    """Create, read, update and delete a reason over HTTP."""

    async def test_lifecycle(
        self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers
    ):
        headers = auth_headers(owner_account)
        url = reasons_url(volunteer_account)
        date = day_string(upcoming_sunday(clock))

        created = await client.post(url, json=body(date, "Family event"), headers=headers)
        assert created.status_code == 200
        assert created.json() == {"message": "Reason scheduled"}

        fetched = await client.get(url, params={"queryDate": date}, headers=headers)
        assert fetched.status_code == 200
        data = fetched.json()
        assert data["isSet"] is True
        assert data["reason"] == "Family event"
        assert data["userId"] == str(volunteer_account.id)

        listed = await client.get(url, headers=headers)
        assert [r["reason"] for r in listed.json()["reasons"]] == ["Family event"]

        updated = await client.patch(url, json=body(date, "Travel"), headers=headers)
        assert updated.status_code == 200
        assert updated.json() == {"message": "Reason Updated!"}

        fetched = await client.get(url, params={"queryDate": date}, headers=headers)
        assert fetched.json()["reason"] == "Travel"

        deleted = await client.request("DELETE", url, json=body(date), headers=headers)
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Document deleted"}

        fetched = await client.get(url, params={"queryDate": date}, headers=headers)
        assert fetched.json()["isSet"] is False

    async def test_unset_reason_is_200(
        self, client: AsyncClient, clock, admin_account, volunteer_account, auth_headers
    ):
        response = await client.get(
            reasons_url(volunteer_account),
            params={"queryDate": day_string(upcoming_sunday(clock))},
            headers=auth_headers(admin_account),
        )

        assert response.status_code == 200
        assert response.json() == {
            "id": None,
            "reason": "",
            "date": "",
            "userId": "",
            "isSet": False,
        }


@pytest.mark.asyncio
class TestReasonErrors:
    """Each failure carries its numeric error code."""

    async def test_not_sunday(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        monday = day_string(upcoming_sunday(clock) + timedelta(days=1))

        response = await client.post(
            reasons_url(volunteer_account), json=body(monday, "x"), headers=auth_headers(owner_account)
        )

        assert response.status_code == 400
        assert response.json()["detail"]["errorCode"] == 0

    async def test_past_date(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        past = day_string(upcoming_sunday(clock) - timedelta(days=14))

        response = await client.post(
            reasons_url(volunteer_account), json=body(past, "x"), headers=auth_headers(owner_account)
        )

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "message": "You should select a date that is yet to come",
            "errorCode": 7,
        }

    async def test_empty_reason(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        response = await client.post(
            reasons_url(volunteer_account),
            json=body(day_string(upcoming_sunday(clock)), ""),
            headers=auth_headers(owner_account),
        )

        assert response.status_code == 400
        assert response.json()["detail"]["errorCode"] == 6

    async def test_forbidden(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        response = await client.post(
            reasons_url(owner_account),
            json=body(day_string(upcoming_sunday(clock)), "x"),
            headers=auth_headers(volunteer_account),
        )

        assert response.status_code == 403
        assert response.json()["detail"]["errorCode"] == 1

    async def test_user_not_found(self, client: AsyncClient, clock, owner_account, auth_headers):
        response = await client.post(
            reasons_url(uuid.uuid4()),
            json=body(day_string(upcoming_sunday(clock)), "x"),
            headers=auth_headers(owner_account),
        )

        assert response.status_code == 404
        assert response.json()["detail"]["errorCode"] == 2

    async def test_duplicate(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        headers = auth_headers(owner_account)
        payload = body(day_string(upcoming_sunday(clock)), "x")
        await client.post(reasons_url(volunteer_account), json=payload, headers=headers)

        response = await client.post(reasons_url(volunteer_account), json=payload, headers=headers)

        assert response.status_code == 409
        assert response.json()["detail"]["errorCode"] == 3

    async def test_update_missing(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        response = await client.patch(
            reasons_url(volunteer_account),
            json=body(day_string(upcoming_sunday(clock)), "x"),
            headers=auth_headers(owner_account),
        )

        assert response.status_code == 404
        assert response.json()["detail"]["errorCode"] == 4

    async def test_delete_missing(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        response = await client.request(
            "DELETE",
            reasons_url(volunteer_account),
            json=body(day_string(upcoming_sunday(clock))),
            headers=auth_headers(owner_account),
        )

        assert response.status_code == 404
        assert response.json()["detail"]["errorCode"] == 4


@pytest.mark.asyncio
class TestReasonAuthentication:
    """Requests without a valid session credential are rejected."""

    async def test_missing_credential(self, client: AsyncClient, volunteer_account):
        response = await client.get(reasons_url(volunteer_account))

        assert response.status_code in (401, 403)

    async def test_invalid_credential(self, client: AsyncClient, volunteer_account):
        response = await client.get(
            reasons_url(volunteer_account), headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401


@pytest.mark.asyncio
class TestReasonStorageFailures:
    """Storage errors outside the delete step surface as 400 with the error text."""

    @pytest.fixture(autouse=True)
    def storage_down(self, monkeypatch):
        async def failing(self, user_id, stored_date):
            raise OperationalError("SELECT", {}, Exception("db down"))

        monkeypatch.setattr(ReasonService, "_find", failing)

    async def test_create(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        response = await client.post(
            reasons_url(volunteer_account),
            json=body(day_string(upcoming_sunday(clock)), "x"),
            headers=auth_headers(owner_account),
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Error: ")
        assert "db down" in response.json()["detail"]

    async def test_get_by_date(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        response = await client.get(
            reasons_url(volunteer_account),
            params={"queryDate": day_string(upcoming_sunday(clock))},
            headers=auth_headers(owner_account),
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Error: ")

    async def test_update(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        response = await client.patch(
            reasons_url(volunteer_account),
            json=body(day_string(upcoming_sunday(clock)), "x"),
            headers=auth_headers(owner_account),
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Error: ")

    async def test_delete(self, client: AsyncClient, clock, owner_account, volunteer_account, auth_headers):
        response = await client.request(
            "DELETE",
            reasons_url(volunteer_account),
            json=body(day_string(upcoming_sunday(clock))),
            headers=auth_headers(owner_account),
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Error: ")

    async def test_list(self, client: AsyncClient, owner_account, volunteer_account, auth_headers, monkeypatch):
        async def failing(self, requestor, user_id):
            raise OperationalError("SELECT", {}, Exception("db down"))

        monkeypatch.setattr(ReasonService, "list_reasons", failing)

        response = await client.get(reasons_url(volunteer_account), headers=auth_headers(owner_account))

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Error: ")
