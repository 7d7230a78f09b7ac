#!/usr/bin/env python3
"""Create the storefront admin user.

Idempotent: an existing admin is left untouched (reset the password in the
database if needed). Afterwards all users are listed with the admin marked.

Usage:
    cd services/api
    ADMIN_PASSWORD=... python -m scripts.create_admin_user

Env vars:
    DATABASE_URL    Postgres connection string
    ADMIN_EMAIL     Admin login (default admin@utrabeauty.com)
    ADMIN_PASSWORD  Required when the admin does not exist yet
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from sqlalchemy import select

from storefront.models import User
from storefront.services.auth import create_user, find_user_by_email, hash_password
from storefront.settings import get_settings
from storefront.stores.postgres import close_db, get_session, init_db

load_dotenv()


async def create_admin_user() -> None:
    settings = get_settings()
    admin_email = settings.admin_email

    async with get_session() as session:
        existing = await find_user_by_email(session, admin_email)
        if existing:
            print("Admin user already exists:")
            print(f"   - ID: {existing.id}")
            print(f"   - Email: {existing.email}")
        else:
            if not settings.admin_password:
                raise RuntimeError("ADMIN_PASSWORD is not set")
            user = await create_user(session, admin_email, hash_password(settings.admin_password))
            print("Admin user created:")
            print(f"   - ID: {user.id}")
            print(f"   - Email: {user.email}")
            print("Change this password after first login.")

        result = await session.execute(select(User).order_by(User.id))
        users = result.scalars().all()

    print("\nAll users in database:")
    for index, user in enumerate(users, start=1):
        marker = " (ADMIN)" if user.email == admin_email else ""
        print(f"   {index}. ID: {user.id}, Email: {user.email}{marker}")


async def main() -> int:
    print("Creating admin user...")
    try:
        await init_db()
        await create_admin_user()
    except Exception as e:
        print(f"\nFailed to create admin user: {e}")
        return 1
    finally:
        await close_db()

    print("\nAdmin user setup completed.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
