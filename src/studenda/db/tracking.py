"""
studenda.db.tracking

Tracked-entity state classification and audit timestamp stamping.

Responsibilities:
- Classify objects relative to a session (Detached/Added/Unchanged/Modified/Deleted).
- Enumerate the pending entries a flush is about to write.
- Release children of deleted parents before the flush classifies them.
- Stamp `created_at` / `updated_at` on pending `Entity` objects.

State machine per object, within one session lifetime:

    DETACHED -> ADDED -> UNCHANGED            (after save)
    UNCHANGED -> MODIFIED -> UNCHANGED        (after save)
    (ADDED | UNCHANGED) -> DELETED -> removed
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import RelationshipDirection, Session

from studenda.db.base import Entity


class EntityState(enum.StrEnum):
    detached = "DETACHED"
    added = "ADDED"
    unchanged = "UNCHANGED"
    modified = "MODIFIED"
    deleted = "DELETED"


def _is_modified(session: Session, obj: Any) -> bool:
    # Collection-only changes belong to the other side's foreign key.
    return session.is_modified(obj, include_collections=False)


def entity_state(session: Session, obj: Any) -> EntityState:
    state = inspect(obj)
    if state.session is not session:
        return EntityState.detached
    if state.pending:
        return EntityState.added
    if state.deleted or obj in session.deleted:
        return EntityState.deleted
    if state.persistent and _is_modified(session, obj):
        return EntityState.modified
    if state.persistent:
        return EntityState.unchanged
    return EntityState.detached


def release_dependents(session: Session) -> int:
    """
    Clear the foreign key on children of every object marked for deletion.

    The flush would null these keys itself, but only after the pending
    entries were classified; doing it up front turns the children into
    ordinary MODIFIED entries that get counted and stamped. Relationships
    that cascade the delete, or leave it to the database
    (`passive_deletes`), are skipped. Returns the number of children changed.
    """

    released = 0
    deleted = session.deleted
    for parent in deleted:
        for rel in inspect(parent).mapper.relationships:
            if (
                rel.direction is not RelationshipDirection.ONETOMANY
                or rel.viewonly
                or rel.passive_deletes
                or rel.cascade.delete
            ):
                continue
            related = getattr(parent, rel.key)
            children = related if rel.uselist else [related]
            for child in list(children):
                if child is None or child in deleted:
                    continue
                changed = False
                for _, remote in rel.local_remote_pairs:
                    key = rel.mapper.get_property_by_column(remote).key
                    if getattr(child, key) is not None:
                        setattr(child, key, None)
                        changed = True
                if changed:
                    released += 1
    return released


def pending_entries(session: Session) -> Iterator[tuple[Any, EntityState]]:
    """
    Yield `(obj, state)` for every object the next flush will write.

    Only objects held by the session's identity map are visible here;
    statements executed directly against tables never show up.
    """

    for obj in session.new:
        yield obj, EntityState.added
    for obj in session.dirty:
        if _is_modified(session, obj):
            yield obj, EntityState.modified
    for obj in session.deleted:
        yield obj, EntityState.deleted


def stamp_tracked_entities(
    session: Session, clock: Callable[[], datetime]
) -> tuple[int, int]:
    """
    Stamp audit timestamps on pending entities and return `(added, modified)`.

    Added entities get `created_at`, modified entities get `updated_at`.
    Everything else, including objects that are not `Entity` subclasses,
    is left untouched. `clock` is read at most once, so every entity in
    one flush carries the same timestamp.
    """

    added = modified = 0
    now: datetime | None = None
    for obj, state in pending_entries(session):
        if not isinstance(obj, Entity) or state is EntityState.deleted:
            continue
        if now is None:
            now = clock()
        if state is EntityState.added:
            obj.created_at = now
            added += 1
        elif state is EntityState.modified:
            obj.updated_at = now
            modified += 1
    return added, modified


# --- Module Notes -----------------------------------------------------------
# `pending_entries` is evaluated lazily; `stamp_tracked_entities` only assigns
# timestamp columns, which never changes the classification of other objects.
