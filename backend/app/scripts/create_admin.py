"""
Create Admin User Script
Creates an administrator account if one with the given email does not exist.
Usage: python -m app.scripts.create_admin

Reads ADMIN_EMAIL and ADMIN_PASSWORD (required), ADMIN_FIRST_NAME and
ADMIN_LAST_NAME (optional).
"""

import asyncio
import os
import sys
from typing import Optional

from app.database import AsyncSessionLocal
from app.models.user import User
from app.repositories.user_repository import SQLAlchemyUserRepository
from app.schemas.user import UserCreate
from app.schemas.validation import validate_schema
from app.services.user_service import UserService


async def create_admin(
    service: UserService,
    email: str,
    password: str,
    first_name: str = "Admin",
    last_name: str = "User",
) -> Optional[User]:
    validation = validate_schema(UserCreate, {
        "email": email,
        "password": password,
        "first_name": first_name,
        "last_name": last_name,
        "role": "admin",
    })
    if not validation.success:
        print("Admin account does not meet the user rules:")
        for field, messages in validation.errors.items():
            for message in messages:
                print(f"- {field}: {message}")
        return None

    existing = await service.get_user_by_email(validation.data.email)
    if existing:
        print(f"User {existing.email} already exists.")
        return existing

    admin = await service.create_user(validation.data)
    print(f"Successfully created admin user: {admin.email}")
    return admin


async def main() -> int:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD are required to create the admin user.")
        return 1

    async with AsyncSessionLocal() as db:
        service = UserService(SQLAlchemyUserRepository(db))
        admin = await create_admin(
            service,
            email,
            password,
            first_name=os.getenv("ADMIN_FIRST_NAME", "Admin"),
            last_name=os.getenv("ADMIN_LAST_NAME", "User"),
        )
    return 0 if admin else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
