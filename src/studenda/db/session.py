"""
studenda.db.session

Engine and data-context factory helpers.

Responsibilities:
- Create sync and async engines from settings.
- Create context factories producing `DataContext` / `AsyncDataContext`.
- Provide a context scope helper that rolls back on failure.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy import Engine
from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlalchemy.ext.asyncio import create_async_engine as sa_create_async_engine
from sqlalchemy.orm import sessionmaker

from studenda.db.context import AsyncDataContext, DataContext
from studenda.settings import Settings


def create_engine(settings: Settings) -> Engine:
    # pool_pre_ping helps detect stale connections in long-lived processes.
    return sa_create_engine(
        settings.database_url,
        pool_pre_ping=True,
        echo=settings.echo_sql,
    )


def create_async_engine(settings: Settings) -> AsyncEngine:
    return sa_create_async_engine(
        settings.async_database_url,
        pool_pre_ping=True,
        echo=settings.echo_sql,
    )


def create_context_factory(
    engine: Engine, *, clock: Callable[[], datetime] | None = None
) -> sessionmaker[DataContext]:
    # expire_on_commit=False avoids surprising lazy loads after commits.
    return sessionmaker(
        bind=engine,
        class_=DataContext,
        expire_on_commit=False,
        autoflush=False,
        clock=clock,
    )


def create_async_context_factory(
    engine: AsyncEngine, *, clock: Callable[[], datetime] | None = None
) -> async_sessionmaker[AsyncDataContext]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncDataContext,
        expire_on_commit=False,
        autoflush=False,
        clock=clock,
    )


@asynccontextmanager
async def context_scope(
    context_factory: async_sessionmaker[AsyncDataContext],
) -> AsyncIterator[AsyncDataContext]:
    """
    One data context per logical transaction. Saving is left to the caller;
    anything still pending when the body raises is rolled back.
    """

    async with context_factory() as context:
        try:
            yield context
        except BaseException:
            await context.rollback()
            raise


# --- Module Notes -----------------------------------------------------------
# `clock` is forwarded to every context the factory creates; tests inject a
# fixed clock to assert exact timestamps.
