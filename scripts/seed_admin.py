"""
Seed Admin User

Creates the initial administrator account for the School Admin API.
Run this script once after the first migration.

Usage:
    SEED_ADMIN_EMAIL=admin@school.ao SEED_ADMIN_PASSWORD=... python scripts/seed_admin.py
"""

import asyncio
import os
import sys

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

import school_admin.models  # noqa: F401 - needed for relationship resolution
from school_admin.core.config import settings
from school_admin.core.security import hash_password
from school_admin.modules.users.models import UserRole
from school_admin.modules.users.repository import UserRepository


async def seed_admin() -> None:
    """Create the admin user if it doesn't exist."""

    email = os.environ.get("SEED_ADMIN_EMAIL", "").strip().lower()
    password = os.environ.get("SEED_ADMIN_PASSWORD", "")
    first_name = os.environ.get("SEED_ADMIN_FIRST_NAME", "System")
    last_name = os.environ.get("SEED_ADMIN_LAST_NAME", "Administrator")

    if not email or len(password) < 8:
        print("Set SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD (8+ characters).")
        sys.exit(1)

    engine = create_async_engine(settings.database_url, echo=False)
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as db:
        existing_user = await UserRepository.get_by_email(db, email)

        if existing_user:
            print(f"Admin already exists: {email}")
            print(f"  ID: {existing_user.id}")
            print(f"  Role: {existing_user.role.value}")
            return

        admin_user = await UserRepository.create(
            db,
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=UserRole.ADMIN,
        )
        await db.commit()

        print("Admin created successfully!")
        print(f"  Email: {email}")
        print(f"  Name: {first_name} {last_name}")
        print(f"  ID: {admin_user.id}")
        print(f"  Role: {admin_user.role.value}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_admin())
