"""
User Service
Orchestrates repository calls for the user resource.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from starlette.concurrency import run_in_threadpool

from app.errors import ConflictError, NotFoundError
from app.models.user import User, UserRole
from app.repositories.user_repository import DUPLICATE_EMAIL_MESSAGE, UserRepository
from app.schemas.common import Pagination
from app.schemas.user import UserCreate
from app.services import auth_service

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def create_user(self, data: UserCreate) -> User:
        """
        Create a user after checking the email is free.

        The returned record still carries the password digest; callers strip
        it before sending anything out.
        """
        if await self.repository.get_by_email(data.email):
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        hashed_password = await run_in_threadpool(auth_service.get_password_hash, data.password)
        user = await self.repository.create(
            email=data.email,
            password=hashed_password,
            first_name=data.first_name,
            last_name=data.last_name,
            role=UserRole(data.role),
        )
        logger.info(f"Created user {user.id}")
        return user

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return await self.repository.get_by_id(user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self.repository.get_by_email(email)

    async def list_users(self, page: int, limit: int) -> Tuple[List[User], Pagination]:
        """Newest first. ``page`` is 1-based."""
        users, total = await self.repository.list(skip=(page - 1) * limit, take=limit)
        pagination = Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
        )
        return users, pagination

    async def update_user(self, user_id: str, changes: Dict[str, Any]) -> User:
        user = await self._require(user_id)

        email = changes.get("email")
        if email and email != user.email:
            existing = await self.repository.get_by_email(email)
            if existing and existing.id != user.id:
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        changes = dict(changes)
        if changes.get("password"):
            changes["password"] = await run_in_threadpool(
                auth_service.get_password_hash, changes["password"]
            )
        if "role" in changes:
            changes["role"] = UserRole(changes["role"])

        user = await self.repository.update(user, changes)
        logger.info(f"Updated user {user.id} ({', '.join(sorted(changes)) or 'no changes'})")
        return user

    async def delete_user(self, user_id: str) -> None:
        affected = await self.repository.delete(user_id)
        if affected == 0:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        logger.info(f"Deleted user {user_id}")

    async def toggle_user_status(self, user_id: str) -> User:
        user = await self._require(user_id)
        user = await self.repository.update(user, {"is_active": not user.is_active})
        logger.info(f"User {user.id} is_active={user.is_active}")
        return user

    async def _require(self, user_id: str) -> User:
        user = await self.repository.get_by_id(user_id)
        if not user:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return user
