from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

from leave_ledger.db import build_engine, build_session_factory, get_session, get_session_factory
from leave_ledger.main import app
from leave_ledger.models import SQLModel
from leave_ledger.services.employee import InMemoryEmployeeService, get_employee_service, set_employee_service
from tests.helpers import SEED_EMPLOYEES

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """A fresh file-backed SQLite database per test.

    A file rather than ``:memory:`` so that concurrent sessions get their own
    connections and really contend for the write lock.
    """
    _engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """A single session for service-level tests.

    SQLite holds the write lock until the transaction ends, so tests that also
    open other sessions commit or roll back this one first.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def employee_service() -> Iterator[InMemoryEmployeeService]:
    """The in-memory employee directory, seeded and installed for the test."""
    previous = get_employee_service()
    svc = InMemoryEmployeeService()
    for employee in SEED_EMPLOYEES:
        svc.seed(employee)
    set_employee_service(svc)
    yield svc
    set_employee_service(previous)


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    employee_service: InMemoryEmployeeService,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database dependencies pointed at the test database."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
