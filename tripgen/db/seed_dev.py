"""Dev seeding helper - creates a local account to generate trips with."""

import asyncio
import uuid

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from tripgen.config import get_settings
from tripgen.db.engine import get_async_engine
from tripgen.db.sql_repositories import SqlAccountRepository
from tripgen.models.common import Tier

# Matches the `sub` claim of tokens minted by ui/helpers.py in dev mode
DEV_ACCOUNT_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


async def seed_dev_account(engine: AsyncEngine | None = None) -> None:
    """Seed a dev account with the signup credit grant.

    This function is idempotent - safe to run multiple times.
    """
    settings = get_settings()

    async with AsyncSession(engine or get_async_engine(), expire_on_commit=False) as session:
        accounts = SqlAccountRepository(session)
        account = await accounts.get_account(DEV_ACCOUNT_ID)

        if account is None:
            print(f"Creating dev account with id {DEV_ACCOUNT_ID}...")
            await accounts.create_account(
                DEV_ACCOUNT_ID,
                email="dev@example.com",
                tier=Tier.TRIAL,
                credits=settings.signup_credits,
            )
        else:
            print(f"Dev account already exists: {account.tier.value}, {account.credits} credits")

    print("✅ Dev seeding complete")


if __name__ == "__main__":
    asyncio.run(seed_dev_account())
