"""Integration tests for the profile setup flow.

Tests the complete invitation lifecycle over HTTP: issue, validate,
redeem and the geocoding key gate.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from tests.conftest import create_account, profile_payload
from volunteer_portal.core.security import decode_token
from volunteer_portal.models.account import Account
from volunteer_portal.models.enums import AccountRole
from volunteer_portal.models.invitation_token import InvitationToken
from volunteer_portal.services.token_store import InvitationTokenStore

PREFIX = "/api/profile-setup"


async def issue(client: AsyncClient, email: str = "new@x.org", base_url: str = "https://app.example"):
    return await client.post(
        f"{PREFIX}/issue-invitation", json={"email": email, "baseUrl": base_url}
    )


@pytest.mark.asyncio
class TestProfileSetupFlow:
    """Integration tests for complete profile setup flow."""

    async def test_complete_flow(
        self, client: AsyncClient, db: AsyncSession, settings, notifier, default_project
    ):
        """Issue, validate, redeem, then redeem again."""
        # Step 1: Issue the invitation
        issue_response = await issue(client)

        assert issue_response.status_code == 200
        assert issue_response.headers["content-type"].startswith("text/plain")
        link = issue_response.text
        assert link.startswith("https://app.example/ProfileInitialSetup/")
        token = link.rsplit("/", 1)[-1]

        assert notifier.messages[0]["to"] == "new@x.org"
        assert link in notifier.messages[0]["html"]

        # Step 2: Validate pre-fills the form and keeps the token
        validate_response = await client.post(f"{PREFIX}/validate-invitation", json={"token": token})

        assert validate_response.status_code == 200
        assert validate_response.json()["email"] == "new@x.org"

        # Step 3: Redeem with the profile fields
        redeem_response = await client.post(
            f"{PREFIX}/redeem-invitation", json=profile_payload(token)
        )

        assert redeem_response.status_code == 200
        session_token = redeem_response.json()["token"]
        payload = decode_token(session_token, settings)
        assert payload["role"] == "Volunteer"

        result = await db.execute(select(Account).where(Account.email == "new@x.org"))
        account = result.scalar_one()
        assert payload["userid"] == str(account.id)
        assert account.privacy_settings == {"email": True, "phoneNumber": False}

        result = await db.execute(select(InvitationToken))
        assert result.scalars().all() == []

        # Manager alert queued after the setup link
        assert len(notifier.messages) == 2
        assert notifier.messages[1]["subject"] == "NEW USER REGISTERED: Nora Newcomer"

        # Step 4: The token is single use
        again = await client.post(f"{PREFIX}/redeem-invitation", json=profile_payload(token))

        assert again.status_code == 400
        assert again.json()["detail"] == "Invalid token"

        # The new credential authenticates
        me = await client.get("/api/me", headers={"Authorization": f"Bearer {session_token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "new@x.org"

    async def test_issue_for_existing_account(self, client: AsyncClient, db: AsyncSession):
        await create_account(db, "taken@x.org", AccountRole.VOLUNTEER)

        response = await issue(client, email="taken@x.org")

        assert response.status_code == 400
        assert response.json()["detail"] == "email already in use"

    async def test_issue_rejects_malformed_email(self, client: AsyncClient):
        response = await issue(client, email="not-an-email")

        assert response.status_code == 422

    async def test_reissue_invalidates_previous_link(self, client: AsyncClient):
        first = (await issue(client)).text.rsplit("/", 1)[-1]
        second = (await issue(client)).text.rsplit("/", 1)[-1]

        old = await client.post(f"{PREFIX}/validate-invitation", json={"token": first})
        new = await client.post(f"{PREFIX}/validate-invitation", json={"token": second})

        assert old.status_code == 404
        assert old.json()["detail"] == "Token not found"
        assert new.status_code == 200

    async def test_validate_expired_token(self, client: AsyncClient, clock):
        token = (await issue(client)).text.rsplit("/", 1)[-1]
        clock.advance(timedelta(days=7))

        response = await client.post(f"{PREFIX}/validate-invitation", json={"token": token})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid token"

    async def test_redeem_expired_token(self, client: AsyncClient, clock, default_project):
        token = (await issue(client)).text.rsplit("/", 1)[-1]
        clock.advance(timedelta(days=7, minutes=1))

        response = await client.post(f"{PREFIX}/redeem-invitation", json=profile_payload(token))

        assert response.status_code == 400
        assert response.json()["detail"] == "Token is expired"

    async def test_redeem_unknown_token(self, client: AsyncClient):
        response = await client.post(
            f"{PREFIX}/redeem-invitation", json=profile_payload("no-such-token")
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid token"

    async def test_redeem_when_account_appeared(
        self, client: AsyncClient, db: AsyncSession, default_project
    ):
        token = (await issue(client)).text.rsplit("/", 1)[-1]
        await create_account(db, "new@x.org", AccountRole.VOLUNTEER)

        response = await client.post(f"{PREFIX}/redeem-invitation", json=profile_payload(token))

        assert response.status_code == 400
        assert response.json()["detail"] == "email already in use"

    async def test_redeem_requires_profile_fields(self, client: AsyncClient):
        token = (await issue(client)).text.rsplit("/", 1)[-1]
        payload = profile_payload(token)
        del payload["firstName"]

        response = await client.post(f"{PREFIX}/redeem-invitation", json=payload)

        assert response.status_code == 422


@pytest.mark.asyncio
class TestTimezoneApiKey:
    """Integration tests for POST /profile-setup/get-timezone-api-key."""

    async def test_key_for_outstanding_token(self, client: AsyncClient):
        token = (await issue(client)).text.rsplit("/", 1)[-1]

        response = await client.post(f"{PREFIX}/get-timezone-api-key", json={"token": token})

        assert response.status_code == 200
        assert response.json() == {"userAPIKey": "test-opencage-key"}

    async def test_unknown_token(self, client: AsyncClient):
        response = await client.post(f"{PREFIX}/get-timezone-api-key", json={"token": "nope"})

        assert response.status_code == 403
        assert response.json()["detail"] == "Unauthorized Request"


def _storage_down(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("database is locked"))


@pytest.mark.asyncio
class TestStorageFailures:
    """Storage errors surface as generic responses with the error text."""

    async def test_issue(self, client: AsyncClient, monkeypatch):
        async def failing(self, email):
            _storage_down()

        monkeypatch.setattr(InvitationTokenStore, "delete_by_email", failing)

        response = await issue(client)

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Error: ")
        assert "database is locked" in response.json()["detail"]

    async def test_validate(self, client: AsyncClient, monkeypatch):
        async def failing(self, token):
            _storage_down()

        monkeypatch.setattr(InvitationTokenStore, "find_by_token", failing)

        response = await client.post(f"{PREFIX}/validate-invitation", json={"token": "abc"})

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Error finding token: ")

    async def test_redeem(self, client: AsyncClient, monkeypatch):
        async def failing(self, token):
            _storage_down()

        monkeypatch.setattr(InvitationTokenStore, "find_by_token", failing)

        response = await client.post(f"{PREFIX}/redeem-invitation", json=profile_payload("abc"))

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Error: ")

    async def test_timezone_api_key(self, client: AsyncClient, monkeypatch):
        async def failing(self, token):
            _storage_down()

        monkeypatch.setattr(InvitationTokenStore, "find_by_token", failing)

        response = await client.post(f"{PREFIX}/get-timezone-api-key", json={"token": "abc"})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Error: ")


@pytest.mark.asyncio
async def test_redeem_with_long_password(client: AsyncClient, settings, default_project):
    token = (await issue(client)).text.rsplit("/", 1)[-1]

    response = await client.post(
        f"{PREFIX}/redeem-invitation", json=profile_payload(token, password="p" * 80)
    )

    assert response.status_code == 200
    assert decode_token(response.json()["token"], settings)["role"] == "Volunteer"
