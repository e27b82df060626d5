"""Persistence for invitation tokens."""
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from volunteer_portal.models.invitation_token import InvitationToken


class InvitationTokenStore:
    """Token rows keyed by token string, email and identity."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_token(self, token: str) -> InvitationToken | None:
        result = await self.db.execute(
            select(InvitationToken).where(InvitationToken.token == token)
        )
        return result.scalar_one_or_none()

    async def create(self, token: str, email: str, expiration: datetime) -> InvitationToken:
        """Insert a token row and flush it.

        Raises:
            IntegrityError: If a token for the email (or the token string) exists
        """
        record = InvitationToken(token=token, email=email, expiration=expiration)
        self.db.add(record)
        await self.db.flush()
        return record

    async def delete_by_email(self, email: str) -> int:
        """Delete any token issued for ``email``; returns the number removed."""
        result = await self.db.execute(
            delete(InvitationToken)
            .where(InvitationToken.email == email)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def delete_by_id(self, token_id: UUID) -> bool:
        """Conditionally delete one token by identity.

        Returns False when the row was already gone, which is how a second
        concurrent redemption of the same token is detected.
        """
        result = await self.db.execute(
            delete(InvitationToken)
            .where(InvitationToken.id == token_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1
