"""
studenda.db.base

SQLAlchemy declarative base and the audited entity base.

Responsibilities:
- Provide a shared DeclarativeBase for all ORM models.
- Provide `Entity`, the abstract base carrying id and audit timestamps.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    # Persist naive UTC timestamps; SQLite has no timezone-aware column type.
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class Entity(Base):
    """
    Any persisted record.

    `created_at` is set once, when the record is first saved. `updated_at`
    stays unset until the first tracked modification and is refreshed on
    every one after that. Neither is assigned by column defaults: the data
    context stamps both right before each flush.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(nullable=True, default=None)


# --- Module Notes -----------------------------------------------------------
# All ORM models should inherit from `Entity` (or `Base` for untracked tables)
# so Alembic and metadata discovery work.
