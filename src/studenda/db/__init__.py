"""
studenda.db

Persistence package (SQLAlchemy, sync and async).

Responsibilities:
- Provide ORM models, the change-tracking data context, engine/context
  factories, and repositories.
"""

from studenda.db.base import Base, Entity
from studenda.db.context import AsyncDataContext, DataContext
from studenda.db.tracking import EntityState, entity_state

__all__ = [
    "AsyncDataContext",
    "Base",
    "DataContext",
    "Entity",
    "EntityState",
    "entity_state",
]


# --- Module Notes -----------------------------------------------------------
# Importing this package registers the timestamp-stamping flush hook on
# `DataContext` (see `studenda.db.context`).
