"""
Create the default admin account.

Run once after the database exists; does nothing when an admin is already present.
"""
import asyncio
import os

from sqlalchemy import select

from storefront.core.config import get_settings
from storefront.db.models import Account
from storefront.infrastructure.database import get_session, init_db
from storefront.modules.accounts import AccountCreateInput
from storefront.modules.accounts.service import AccountService
from storefront.modules.common import ROLE_ADMIN
from storefront.modules.wallets.service import WalletService


async def create_default_admin():
    await init_db()

    async for db in get_session():
        result = await db.execute(select(Account).where(Account.role == ROLE_ADMIN).limit(1))
        if result.scalar_one_or_none() is not None:
            print("An admin account already exists, nothing to do")
            return

        username = os.environ.get("STOREFRONT_ADMIN_USERNAME", "admin")
        password = os.environ.get("STOREFRONT_ADMIN_PASSWORD", "admin123")
        account = await AccountService.with_session(db).create_account(
            AccountCreateInput(
                username=username,
                password=password,
                role=ROLE_ADMIN,
                email="admin@example.com",
            )
        )
        await WalletService.with_session(db).ensure_wallet(account.id, get_settings().ledger.currency)
        await db.commit()

        print("=" * 50)
        print("Default admin account created")
        print("=" * 50)
        print(f"username: {username}")
        print(f"password: {password}")
        print("=" * 50)
        print("Change the password after the first login")
        print("=" * 50)


if __name__ == "__main__":
    asyncio.run(create_default_admin())
