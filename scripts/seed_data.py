"""Seed script for development data.

Creates:
- The default project every self-setup account joins
- An owner account "owner@onecommunityglobal.org" (password provided via env)

Prints a session credential for the owner so the reason endpoints can be
exercised. Can be run multiple times safely (skips what exists).
"""
import asyncio
import os

from volunteer_portal.core.clock import get_clock
from volunteer_portal.core.config import get_settings
from volunteer_portal.core.database import get_db
from volunteer_portal.core.security import hash_password
from volunteer_portal.models.account import Account
from volunteer_portal.models.enums import AccountRole
from volunteer_portal.models.project import Project
from volunteer_portal.services.account_store import AccountStore
from volunteer_portal.services.credential_service import CredentialIssuer


async def seed_data():
    """Seed development data."""
    print("Starting database seeding...")

    settings = get_settings()
    owner_email = os.environ.get("SEED_OWNER_EMAIL", "owner@onecommunityglobal.org").lower()
    owner_password = os.environ.get("SEED_OWNER_PASSWORD")
    if not owner_password:
        print("✗ Missing SEED_OWNER_PASSWORD environment variable")
        print("  Example: SEED_OWNER_PASSWORD='change-me' python scripts/seed_data.py")
        return

    async for db in get_db():
        store = AccountStore(db)

        project = await store.find_project_by_name(settings.default_project_name)
        if project:
            print(f"✓ Project '{project.project_name}' already exists (ID: {project.id})")
        else:
            project = Project(project_name=settings.default_project_name, category="Other")
            db.add(project)
            await db.flush()
            print(f"✓ Created project '{project.project_name}' (ID: {project.id})")

        owner = await store.find_by_email(owner_email)
        if owner:
            print(f"✓ Owner account '{owner_email}' already exists (ID: {owner.id})")
        else:
            owner = await store.create(
                Account(
                    email=owner_email,
                    password_hash=hash_password(owner_password),
                    role=AccountRole.OWNER,
                    first_name="Site",
                    last_name="Owner",
                    time_zone=settings.reference_timezone,
                    projects=[project],
                )
            )
            print(f"✓ Created owner account '{owner_email}'")

        await db.commit()

        token = CredentialIssuer(settings).issue(owner, get_clock().now())

    print("\n✓ Database seeding completed successfully!")
    print("\nSession credential for the owner:")
    print(f"  {token}")


if __name__ == "__main__":
    asyncio.run(seed_data())
