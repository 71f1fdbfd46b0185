"""Dev seeding helper: a ready-to-use account with credits."""

import asyncio
import os

from backend.app.accounts.service import AccountService, AuthError
from backend.app.db.engine import get_session_factory
from backend.app.db.sql_repositories import SqlAccountStore, SqlProfileStore

DEV_EMAIL = "dev@example.com"
DEV_PASSWORD = os.environ.get("DEV_PASSWORD", "devpassword")
DEV_CREDITS = 25


async def seed_dev_account() -> None:
    """Seed the dev account.

    This function is idempotent - safe to run multiple times. An existing
    account keeps its documents; its balance is topped back up.
    """
    async with get_session_factory()() as session:
        profiles = SqlProfileStore(session)
        service = AccountService(SqlAccountStore(session), profiles, signup_credits=DEV_CREDITS)

        try:
            identity = await service.sign_up(DEV_EMAIL, DEV_PASSWORD)
            print(f"Created dev account {identity.user_id} ({DEV_EMAIL})")
        except AuthError as e:
            print(f"Dev account already exists: {e.message}")
            session_info = await service.sign_in(DEV_EMAIL, DEV_PASSWORD)
            await profiles.update_credits(session_info.user.user_id, DEV_CREDITS)
            await service.sign_out(session_info.access_token)

        print(f"✅ Dev seeding complete (credits: {DEV_CREDITS})")


if __name__ == "__main__":
    asyncio.run(seed_dev_account())
