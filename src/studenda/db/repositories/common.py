"""
studenda.db.repositories.common

Repositories for the academic structure: departments, courses, groups and
week types.

Responsibilities:
- Create and look up structure entities.
- Rename entities in place so the data context stamps `updated_at`.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studenda.db.models import Course, Department, Group, WeekType


class DepartmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str) -> Department:
        department = Department(name=name)
        self._session.add(department)
        await self._session.flush()
        return department

    async def get(self, department_id: int) -> Department | None:
        return await self._session.get(Department, department_id)

    async def list_all(self) -> list[Department]:
        stmt = select(Department).order_by(Department.name)
        return list((await self._session.execute(stmt)).scalars().all())

    async def rename(self, department_id: int, name: str) -> Department | None:
        # Loading first keeps the change visible to the tracker.
        department = await self._session.get(Department, department_id)
        if department is None:
            return None
        department.name = name
        return department


class CourseRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, department_id: int, name: str) -> Course:
        course = Course(department_id=department_id, name=name)
        self._session.add(course)
        await self._session.flush()
        return course

    async def list_for_department(self, department_id: int) -> list[Course]:
        stmt = select(Course).where(Course.department_id == department_id).order_by(Course.id)
        return list((await self._session.execute(stmt)).scalars().all())


class GroupRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, course_id: int, name: str) -> Group:
        group = Group(course_id=course_id, name=name)
        self._session.add(group)
        await self._session.flush()
        return group

    async def list_for_course(self, course_id: int) -> list[Group]:
        stmt = select(Group).where(Group.course_id == course_id).order_by(Group.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def rename(self, group_id: int, name: str) -> Group | None:
        group = await self._session.get(Group, group_id)
        if group is None:
            return None
        group.name = name
        return group


class WeekTypeRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str, index: int) -> WeekType:
        week_type = WeekType(name=name, index=index)
        self._session.add(week_type)
        await self._session.flush()
        return week_type

    async def list_all(self) -> list[WeekType]:
        stmt = select(WeekType).order_by(WeekType.index)
        return list((await self._session.execute(stmt)).scalars().all())
