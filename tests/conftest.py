"""
LibraryHub Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for failure-path tests
    ├── db_engine:       in-memory SQLite (aiosqlite) with every table created
    ├── db_session:      AsyncSession bound to db_engine
    ├── library:         LibraryBuilder that seeds rows through db_session
    └── test_client:     HTTPX AsyncClient whose requests share db_session
"""

import os

# Settings are read at import time, so the environment must be set before
# anything from libraryhub is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date, timedelta
from typing import Iterable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libraryhub.database import Base, get_db_session
from libraryhub.models import (
    Author,
    AuthorsPerBook,
    Book,
    CategoriesPerBook,
    Category,
    Loan,
    LoanState,
    Reserve,
    User,
)


# ══════════════════════════════════════════════════════════════════════════
# Seed helpers
# ══════════════════════════════════════════════════════════════════════════

class LibraryBuilder:
    """
    Inserts catalogue and circulation rows with sensible defaults.

    Every method flushes, so returned objects already carry their ids.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._sequence = 0

    def _next(self) -> int:
        self._sequence += 1
        return self._sequence

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def author(self, first_name: Optional[str], last_name: Optional[str]) -> Author:
        return await self._save(Author(first_name=first_name, last_name=last_name))

    async def category(
        self,
        name: str,
        parent: Optional[Category] = None,
        enabled: bool = True,
        icon: Optional[str] = None,
    ) -> Category:
        return await self._save(
            Category(
                name=name,
                parent_category_id=parent.id if parent else None,
                enabled=enabled,
                icon=icon,
            )
        )

    async def book(
        self,
        title: str,
        authors: Iterable[Author] = (),
        categories: Iterable[Category] = (),
        edition: int = 1,
        units_available: Optional[int] = 1,
        entry_date: Optional[date] = None,
        isbn: Optional[str] = None,
    ) -> Book:
        book = await self._save(
            Book(
                title=title,
                isbn=isbn or f"978-0-00-{self._next():06d}",
                edition=edition,
                total_amount=units_available or 0,
                units_available=units_available,
                entry_date=entry_date,
            )
        )
        for author in authors:
            self.session.add(AuthorsPerBook(book_id=book.id, author_id=author.id))
        for category in categories:
            self.session.add(CategoriesPerBook(book_id=book.id, category_id=category.id))
        await self.session.flush()
        return book

    async def user(self, account_number: str, first_name: str = "Lucía", reputation: int = 2) -> User:
        return await self._save(
            User(
                first_name=first_name,
                first_surname="Pérez",
                email=f"{account_number}@alumnos.test",
                account_number=account_number,
                reputation=reputation,
            )
        )

    async def reserve(self, user: User, book: Book, status: str = "active") -> Reserve:
        return await self._save(Reserve(book_id=book.id, user_id=user.id, status=status))

    async def loan(
        self,
        user: User,
        book: Book,
        loaned_at: Optional[date] = None,
        expires_on: Optional[date] = None,
        state: LoanState = LoanState.ACTIVE,
    ) -> Loan:
        loaned_at = loaned_at or date.today()
        reserve = await self.reserve(user, book)
        return await self._save(
            Loan(
                reserve_id=reserve.id,
                loaned_at=loaned_at,
                expires_on=expires_on or loaned_at + timedelta(days=14),
                state=state.value,
            )
        )


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("x", {}, None)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    # StaticPool keeps the single in-memory connection alive across sessions.
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def library(db_session):
    return LibraryBuilder(db_session)


@pytest_asyncio.fixture
async def test_client(db_session):
    """
    HTTPX AsyncClient talking to the app in-process.

    Every request reuses db_session, so rows seeded through `library` are
    visible to the routes without committing.
    """
    from libraryhub.main import app

    async def override_session():
        yield db_session

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
