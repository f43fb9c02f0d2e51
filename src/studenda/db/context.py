"""
studenda.db.context

Change-tracking data context (sync and async sessions).

Responsibilities:
- Stamp audit timestamps on added/modified entities right before every flush.
- Provide `save_changes` in blocking and awaitable forms, returning the
  number of tracked records written.

Cache cheat sheet:
- `context.add(obj)` on a new object stages an INSERT (state ADDED).
- Mutating a loaded object stages an UPDATE (state MODIFIED).
- `context.add(obj)` on a detached, previously saved object re-attaches it
  as UNCHANGED; saving writes nothing for it.
- `context.delete(obj)` stages a DELETE (state DELETED). Children held by a
  required key are deleted with it; children held by an optional key are
  released (key set to NULL) and saved as MODIFIED.

Updates are only stamped for objects the context tracks: load (or merge)
a record before changing it. `context.execute(update(...))` and other
statements that bypass the identity map get no timestamps.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, UOWTransaction

from studenda.db.base import utcnow
from studenda.db.tracking import (
    EntityState,
    entity_state,
    pending_entries,
    release_dependents,
    stamp_tracked_entities,
)
from studenda.observability.logging import get_logger

log = get_logger(__name__, component="data_context")


class DataContext(Session):
    """
    Unit-of-work session that keeps `created_at` / `updated_at` current.

    Not safe for concurrent use; scope one context per request or transaction.
    """

    def __init__(
        self, *args: Any, clock: Callable[[], datetime] | None = None, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.clock: Callable[[], datetime] = clock or utcnow
        # Running total of tracked records handed to the database by flushes.
        self.written_entries = 0

    def save_changes(self, *, commit: bool = True) -> int:
        """
        Persist all pending changes and return the number of records written.

        With `commit=False` the changes are flushed but the transaction stays
        open. Database errors propagate unchanged.
        """

        before = self.written_entries
        try:
            if commit:
                self.commit()
            else:
                self.flush()
        except SQLAlchemyError:
            log.warning(
                "save_changes_failed",
                context=type(self).__name__,
                commit=commit,
                exc_info=True,
            )
            raise
        count = self.written_entries - before
        log.info("changes_saved", context=type(self).__name__, count=count, commit=commit)
        return count

    def state_of(self, obj: Any) -> EntityState:
        return entity_state(self, obj)


@event.listens_for(DataContext, "before_flush")
def _update_tracked_entity_metadata(
    session: DataContext, flush_context: UOWTransaction, instances: Any
) -> None:
    released = release_dependents(session)
    session.written_entries += sum(1 for _ in pending_entries(session))
    added, modified = stamp_tracked_entities(session, session.clock)
    if added or modified:
        log.debug(
            "tracked_entities_stamped",
            context=type(session).__name__,
            added=added,
            modified=modified,
            released=released,
        )


class AsyncDataContext(AsyncSession):
    """
    Awaitable facade over `DataContext`; stamping runs in the sync session.
    """

    sync_session_class = DataContext
    sync_session: DataContext

    async def save_changes(self, *, commit: bool = True) -> int:
        # Cancelling the awaiting task cancels the underlying driver call.
        return await self.run_sync(DataContext.save_changes, commit=commit)

    def state_of(self, obj: Any) -> EntityState:
        return entity_state(self.sync_session, obj)


# --- Module Notes -----------------------------------------------------------
# `autoflush` is disabled by the factories in `studenda.db.session`, so
# timestamps are only assigned when the caller saves or flushes explicitly.
