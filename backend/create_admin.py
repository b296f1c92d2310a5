"""
Admin bootstrap script.

Admin accounts cannot be self-registered; this creates the first one.
Run it after the database is reachable:

    python -m backend.create_admin --email admin@example.com --name Admin

The password is read from --password or the ADMIN_PASSWORD environment
variable, or prompted for.
"""

import argparse
import asyncio
import getpass
import os
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from backend.app.db.session import AsyncSessionLocal, Base, engine
# Import models to ensure they are registered with Base
from backend.app.models.user import User
from backend.app.models.trip_request import TripRequest
from backend.app.models.audit_log import AuditLog
from backend.app.models.enums import UserRole
from backend.app.core.security import get_password_hash


async def create_admin(
    name: str,
    email: str,
    password: str,
    session_factory: async_sessionmaker = AsyncSessionLocal
) -> Optional[User]:
    """
    Create an admin account unless one with this email already exists.

    Returns:
        The new User, or None when the email is already taken
    """
    email = email.strip().lower()
    async with session_factory() as db:
        result = await db.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none():
            print(f"ℹ️  User {email} already exists, skipping")
            return None

        admin = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=UserRole.ADMIN,
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)

    print(f"✅ Created ADMIN user {email}")
    print("⚠️  Change this password after first login!")
    return admin


async def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create the first admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default="Admin")
    parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"))
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Admin password: ")
    if len(password) < 6:
        print("❌ Password must be at least 6 characters")
        return 1

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await create_admin(args.name, args.email, password)
    await engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
