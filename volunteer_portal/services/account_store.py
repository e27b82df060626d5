"""Persistence for accounts and the project lookup used at setup."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from volunteer_portal.models.account import Account
from volunteer_portal.models.project import Project


class AccountStore:
    """Account lookups and creation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Account | None:
        result = await self.db.execute(select(Account).where(Account.email == email))
        return result.scalar_one_or_none()

    async def get(self, account_id: UUID) -> Account | None:
        return await self.db.get(Account, account_id)

    async def create(self, account: Account) -> Account:
        """Persist a new account.

        Raises:
            IntegrityError: If an account with the same email exists
        """
        self.db.add(account)
        await self.db.flush()
        await self.db.refresh(account)
        return account

    async def find_project_by_name(self, project_name: str) -> Project | None:
        result = await self.db.execute(
            select(Project).where(Project.project_name == project_name)
        )
        return result.scalar_one_or_none()
