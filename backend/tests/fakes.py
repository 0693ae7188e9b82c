"""In-memory implementation of UserRepository for testing."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from app.errors import ConflictError
from app.models.user import User, UserRole
from app.repositories.user_repository import DUPLICATE_EMAIL_MESSAGE


class FakeUserRepository:
    def __init__(self):
        self.store: Dict[str, User] = {}
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        # Strictly increasing so newest-first ordering is deterministic
        self._clock += timedelta(seconds=1)
        return self._clock

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return any(u.email == email and u.id != exclude_id for u in self.store.values())

    # ── write operations ─────────────────────────────────────

    async def create(self, **fields: Any) -> User:
        if self._email_taken(fields["email"]):
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

        now = self._now()
        user = User(
            id=str(uuid.uuid4()),
            role=UserRole.USER,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        for key, value in fields.items():
            setattr(user, key, value)
        self.store[user.id] = user
        return user

    async def update(self, user: User, changes: Dict[str, Any]) -> User:
        if "email" in changes and self._email_taken(changes["email"], exclude_id=user.id):
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = self._now()
        return user

    async def delete(self, user_id: str) -> int:
        return 1 if self.store.pop(user_id, None) else 0

    # ── read operations ──────────────────────────────────────

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return self.store.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        for user in self.store.values():
            if user.email == email:
                return user
        return None

    async def list(self, skip: int, take: int) -> Tuple[List[User], int]:
        ordered = sorted(self.store.values(), key=lambda u: u.created_at, reverse=True)
        return ordered[skip:skip + take], len(ordered)
