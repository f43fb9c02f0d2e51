"""
tests.test_data_context

Timestamp stamping through the synchronous data context.

Responsibilities:
- Cover the added/modified/unchanged/deleted stamping rules.
- Check save counts, idempotence, and error propagation.
"""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import Engine, event, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from studenda.db.models import Course, Department, Group, Role, User
from studenda.db.session import create_context_factory
from studenda.db.tracking import EntityState

T1 = datetime(2024, 9, 1, 9, 0, 0)
T2 = datetime(2024, 9, 2, 14, 30, 0)


def _create_department(contexts, name: str = "Physics") -> int:
    with contexts() as ctx:
        department = Department(name=name)
        ctx.add(department)
        ctx.save_changes()
        return department.id


def test_added_entity_gets_created_at_only(contexts, clock) -> None:
    clock.now = T1
    with contexts() as ctx:
        department = Department(name="Physics")
        ctx.add(department)
        assert ctx.save_changes() == 1

    assert department.created_at == T1
    assert department.updated_at is None


def test_modified_entity_gets_updated_at_and_keeps_created_at(contexts, clock) -> None:
    clock.now = T1
    department_id = _create_department(contexts)

    clock.now = T2
    with contexts() as ctx:
        department = ctx.get(Department, department_id)
        department.name = "Applied Physics"
        assert ctx.save_changes() == 1

    with contexts() as ctx:
        reloaded = ctx.get(Department, department_id)
        assert reloaded.name == "Applied Physics"
        assert reloaded.created_at == T1
        assert reloaded.updated_at == T2


def test_unchanged_and_deleted_entities_are_not_stamped(contexts, clock) -> None:
    clock.now = T1
    untouched_id = _create_department(contexts, "Chemistry")
    modified_id = _create_department(contexts, "Biology")
    deleted_id = _create_department(contexts, "Alchemy")

    clock.now = T2
    with contexts() as ctx:
        untouched = ctx.get(Department, untouched_id)
        modified = ctx.get(Department, modified_id)
        deleted = ctx.get(Department, deleted_id)

        modified.name = "Molecular Biology"
        ctx.delete(deleted)
        assert ctx.state_of(untouched) is EntityState.unchanged
        assert ctx.state_of(deleted) is EntityState.deleted

        assert ctx.save_changes() == 2

    assert untouched.created_at == T1
    assert untouched.updated_at is None
    assert deleted.created_at == T1
    assert deleted.updated_at is None
    assert modified.created_at == T1
    assert modified.updated_at == T2


def test_second_save_without_changes_stamps_nothing(contexts, clock) -> None:
    clock.now = T1
    with contexts() as ctx:
        department = Department(name="History")
        ctx.add(department)
        assert ctx.save_changes() == 1
        assert clock.calls == 1

        clock.now = T2
        assert ctx.save_changes() == 0

    assert clock.calls == 1
    assert department.created_at == T1
    assert department.updated_at is None


def test_attached_unchanged_entity_is_not_written(
    engine: Engine, contexts, clock
) -> None:
    clock.now = T1
    with contexts() as ctx:
        department = Department(name="Geography")
        ctx.add(department)
        ctx.save_changes()

    statements: list[str] = []

    def _record(conn, cursor, statement, parameters, context, executemany) -> None:
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", _record)
    try:
        clock.now = T2
        with contexts() as ctx:
            # Re-attaching a detached, previously saved object.
            ctx.add(department)
            assert ctx.state_of(department) is EntityState.unchanged
            assert ctx.save_changes() == 0
    finally:
        event.remove(engine, "before_cursor_execute", _record)

    writes = [
        s for s in statements if s.lstrip().upper().startswith(("INSERT", "UPDATE", "DELETE"))
    ]
    assert writes == []
    assert department.created_at == T1
    assert department.updated_at is None


def test_statement_level_update_is_not_stamped(contexts, clock) -> None:
    clock.now = T1
    department_id = _create_department(contexts)

    clock.now = T2
    with contexts() as ctx:
        ctx.execute(
            update(Department).where(Department.id == department_id).values(name="Astronomy")
        )
        assert ctx.save_changes() == 0

    with contexts() as ctx:
        reloaded = ctx.get(Department, department_id)
        assert reloaded.name == "Astronomy"
        assert reloaded.updated_at is None


def test_collection_change_does_not_stamp_parent(contexts, clock) -> None:
    clock.now = T1
    department_id = _create_department(contexts)

    clock.now = T2
    with contexts() as ctx:
        department = ctx.get(Department, department_id)
        course = Course(name="Mechanics")
        department.courses.append(course)
        assert ctx.save_changes() == 1

    assert course.department_id == department_id
    assert course.created_at == T2
    assert department.updated_at is None


def test_deleting_parent_stamps_children_released_from_it(contexts, clock) -> None:
    clock.now = T1
    with contexts() as ctx:
        role = Role(name="assistant")
        user = User(name="Ada", role=role)
        ctx.add(user)
        assert ctx.save_changes() == 2
        role_id, user_id = role.id, user.id

    clock.now = T2
    with contexts() as ctx:
        role = ctx.get(Role, role_id)
        user = ctx.get(User, user_id)
        ctx.delete(role)
        # Role deleted, user released from it.
        assert ctx.save_changes() == 2
        assert user.role_id is None
        assert user.updated_at == T2

    with contexts() as ctx:
        reloaded = ctx.get(User, user_id)
        assert reloaded.role_id is None
        assert reloaded.created_at == T1
        assert reloaded.updated_at == T2
        assert ctx.get(Role, role_id) is None


def test_deleting_department_removes_its_courses_and_groups(contexts, clock) -> None:
    clock.now = T1
    with contexts() as ctx:
        department = Department(name="Physics")
        course = Course(name="First year", department=department)
        Group(name="P-11", course=course)
        ctx.add(department)
        assert ctx.save_changes() == 3
        department_id = department.id

    clock.now = T2
    with contexts() as ctx:
        ctx.delete(ctx.get(Department, department_id))
        assert ctx.save_changes() == 3

    with contexts() as ctx:
        assert ctx.scalars(select(Course)).all() == []
        assert ctx.scalars(select(Group)).all() == []


class _ScratchBase(DeclarativeBase):
    pass


class _Note(_ScratchBase):
    __tablename__ = "scratch_notes"

    id: Mapped[int] = mapped_column(primary_key=True)
    text: Mapped[str]


def test_objects_outside_entity_hierarchy_are_written_but_not_stamped(
    engine: Engine, contexts, clock
) -> None:
    _ScratchBase.metadata.create_all(engine)
    clock.now = T1
    with contexts() as ctx:
        note = _Note(text="remember the timetable")
        department = Department(name="Music")
        ctx.add_all([note, department])
        assert ctx.save_changes() == 2

    assert note.id is not None
    assert not hasattr(note, "created_at")
    assert department.created_at == T1


def test_entity_state_transitions(contexts) -> None:
    with contexts() as ctx:
        department = Department(name="Mathematics")
        assert ctx.state_of(department) is EntityState.detached

        ctx.add(department)
        assert ctx.state_of(department) is EntityState.added

        ctx.save_changes()
        assert ctx.state_of(department) is EntityState.unchanged

        department.name = "Pure Mathematics"
        assert ctx.state_of(department) is EntityState.modified

        ctx.save_changes()
        assert ctx.state_of(department) is EntityState.unchanged

        ctx.delete(department)
        assert ctx.state_of(department) is EntityState.deleted

        ctx.save_changes()
        assert ctx.state_of(department) is EntityState.detached


def test_flush_only_save_keeps_transaction_open(contexts, clock) -> None:
    clock.now = T1
    with contexts() as ctx:
        department = Department(name="Philosophy")
        ctx.add(department)
        assert ctx.save_changes(commit=False) == 1
        assert department.id is not None
        assert department.created_at == T1
        department_id = department.id
        ctx.rollback()

    with contexts() as ctx:
        assert ctx.get(Department, department_id) is None


def test_persistence_error_propagates_after_stamping(contexts, clock) -> None:
    clock.now = T1
    with contexts() as ctx:
        department = Department(name=None)
        ctx.add(department)
        with pytest.raises(IntegrityError):
            ctx.save_changes()
        # Stamped before the delegate save failed.
        assert department.created_at == T1
        ctx.rollback()


def test_updated_at_not_before_created_at_with_wall_clock(engine: Engine) -> None:
    contexts = create_context_factory(engine)
    with contexts() as ctx:
        department = Department(name="Linguistics")
        ctx.add(department)
        ctx.save_changes()

        department.name = "Applied Linguistics"
        ctx.save_changes()

    assert department.created_at is not None
    assert department.updated_at is not None
    assert department.updated_at >= department.created_at


# --- Module Notes -----------------------------------------------------------
# The async context shares this stamping path; see tests/test_async_data_context.py.
