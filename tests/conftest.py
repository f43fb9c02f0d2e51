"""
tests.conftest

Shared fixtures: in-memory SQLite engines, context factories, and a
controllable clock.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy import Engine, create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studenda.db import models  # noqa: F401  # registers tables on Base.metadata
from studenda.db.base import Base
from studenda.db.context import AsyncDataContext, DataContext
from studenda.db.init_db import init_db
from studenda.db.session import create_async_context_factory, create_context_factory

T1 = datetime(2024, 9, 1, 9, 0, 0)


class FakeClock:
    """Returns `now` and counts how many times it was read."""

    def __init__(self, now: datetime = T1) -> None:
        self.now = now
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def contexts(engine: Engine, clock: FakeClock) -> sessionmaker[DataContext]:
    return create_context_factory(engine, clock=clock)


@pytest_asyncio.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def async_contexts(
    async_engine: AsyncEngine, clock: FakeClock
) -> async_sessionmaker[AsyncDataContext]:
    return create_async_context_factory(async_engine, clock=clock)
