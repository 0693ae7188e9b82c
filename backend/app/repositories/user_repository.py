"""
User Repository
Storage access for user records. Handlers and services depend on the
``UserRepository`` protocol; ``SQLAlchemyUserRepository`` is the production
implementation.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError
from app.models.user import User

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"


class UserRepository(Protocol):
    """Protocol defining the interface for user data access."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        ...

    async def list(self, skip: int, take: int) -> Tuple[List[User], int]:
        """Return one page ordered newest first, plus the total row count."""
        ...

    async def create(self, **fields: Any) -> User:
        """Insert a user. Raise ConflictError on a duplicate email."""
        ...

    async def update(self, user: User, changes: Dict[str, Any]) -> User:
        """Apply changes to a stored user. Raise ConflictError on a duplicate email."""
        ...

    async def delete(self, user_id: str) -> int:
        """Delete by id and return the number of affected rows."""
        ...


class SQLAlchemyUserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list(self, skip: int, take: int) -> Tuple[List[User], int]:
        result = await self.session.execute(
            select(User).order_by(User.created_at.desc()).offset(skip).limit(take)
        )
        users = list(result.scalars().all())
        total = await self.session.scalar(select(func.count()).select_from(User))
        return users, total or 0

    async def create(self, **fields: Any) -> User:
        user = User(**fields)
        self.session.add(user)
        await self._commit()
        await self.session.refresh(user)
        return user

    async def update(self, user: User, changes: Dict[str, Any]) -> User:
        for key, value in changes.items():
            setattr(user, key, value)
        await self._commit()
        await self.session.refresh(user)
        return user

    async def delete(self, user_id: str) -> int:
        result = await self.session.execute(delete(User).where(User.id == user_id))
        await self._commit()
        return result.rowcount

    async def _commit(self):
        # The unique index on email is the real guard against concurrent duplicates
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if not _is_duplicate_email(e):
                raise
            logger.warning(f"Duplicate email rejected by unique index: {e.orig}")
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE) from e


def _is_duplicate_email(exc: IntegrityError) -> bool:
    # PostgreSQL names the index, SQLite names the column
    detail = str(exc.orig)
    return "ix_users_email" in detail or "users.email" in detail
