"""Tests for the SQLAlchemy user repository against in-memory SQLite."""

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.errors import ConflictError
from app.models.user import UserRole
from app.repositories.user_repository import SQLAlchemyUserRepository


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def repo(session):
    return SQLAlchemyUserRepository(session)


async def _create(repo, email="jane@example.com", **fields):
    return await repo.create(
        email=email,
        password="hashed",
        first_name=fields.pop("first_name", "Jane"),
        last_name=fields.pop("last_name", "Doe"),
        **fields,
    )


@pytest.mark.asyncio
async def test_create_applies_storage_defaults(repo):
    user = await _create(repo)

    assert len(user.id) == 36
    assert user.role is UserRole.USER
    assert user.is_active is True
    assert user.created_at is not None
    assert user.updated_at is not None


@pytest.mark.asyncio
async def test_lookup_by_id_and_email(repo):
    user = await _create(repo)

    assert (await repo.get_by_id(user.id)).email == "jane@example.com"
    assert (await repo.get_by_email("jane@example.com")).id == user.id
    assert await repo.get_by_email("nobody@example.com") is None


@pytest.mark.asyncio
async def test_unique_index_rejects_duplicate_email(repo):
    await _create(repo)

    with pytest.raises(ConflictError):
        await _create(repo, first_name="Other")

    # Session is usable again after the rollback
    assert await repo.get_by_email("jane@example.com") is not None


@pytest.mark.asyncio
async def test_other_integrity_errors_are_not_reported_as_duplicates(repo):
    with pytest.raises(IntegrityError):
        await _create(repo, first_name=None)

    assert await repo.get_by_email("jane@example.com") is None


@pytest.mark.asyncio
async def test_list_pages_newest_first(repo):
    for i in range(7):
        await _create(repo, email=f"user{i}@example.com")

    users, total = await repo.list(skip=5, take=5)

    assert total == 7
    assert [u.email for u in users] == ["user1@example.com", "user0@example.com"]


@pytest.mark.asyncio
async def test_update_changes_fields(repo):
    user = await _create(repo)

    updated = await repo.update(user, {"first_name": "Janet", "role": UserRole.ADMIN})

    assert updated.first_name == "Janet"
    assert updated.role is UserRole.ADMIN
    assert updated.updated_at >= updated.created_at


@pytest.mark.asyncio
async def test_delete_reports_affected_rows(repo):
    user = await _create(repo)

    assert await repo.delete(user.id) == 1
    assert await repo.delete(user.id) == 0
    assert await repo.get_by_id(user.id) is None
