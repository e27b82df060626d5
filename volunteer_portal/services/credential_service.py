"""Session credential issuance."""
from datetime import datetime

from volunteer_portal.core.config import Settings
from volunteer_portal.core.security import create_session_token, session_lifetime
from volunteer_portal.models.account import Account


class CredentialIssuer:
    """Signs time-bound session credentials for accounts."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def claims_for(self, account: Account, now: datetime) -> dict:
        """Claims payload asserting the account's identity and role."""
        expires_at = now + session_lifetime(self.settings)
        return {
            "sub": str(account.id),
            "userid": str(account.id),
            "role": account.role.value,
            "permissions": account.permissions,
            "expiryTimestamp": expires_at.isoformat(),
            "exp": expires_at,
        }

    def issue(self, account: Account, now: datetime) -> str:
        return create_session_token(
            self.claims_for(account, now),
            self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
        )
