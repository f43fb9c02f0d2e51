"""
studenda.db.models

Persistence schema for the academic records domain.

Responsibilities:
- Define ORM models:
  - Account: User, Role, Permission
  - Common: Department, Course, Group, WeekType
  - Link: UserGroupLink (User <-> Group), RolePermissionLink (Role <-> Permission)
- Expose column constraints (max lengths, required flags) as class constants.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studenda.db.base import Entity

# --- Account ----------------------------------------------------------------


class Role(Entity):
    __tablename__ = "roles"

    NAME_LENGTH_MAX = 128
    IS_NAME_REQUIRED = True

    name: Mapped[str] = mapped_column(String(NAME_LENGTH_MAX), nullable=not IS_NAME_REQUIRED)

    users: Mapped[list[User]] = relationship(back_populates="role")
    permission_links: Mapped[list[RolePermissionLink]] = relationship(
        back_populates="role", cascade="all, delete-orphan"
    )
    permissions: Mapped[list[Permission]] = relationship(
        secondary="role_permission_links", viewonly=True
    )


class Permission(Entity):
    __tablename__ = "permissions"

    NAME_LENGTH_MAX = 128
    IS_NAME_REQUIRED = True

    name: Mapped[str] = mapped_column(
        String(NAME_LENGTH_MAX), nullable=not IS_NAME_REQUIRED, unique=True
    )

    role_links: Mapped[list[RolePermissionLink]] = relationship(
        back_populates="permission", cascade="all, delete-orphan"
    )


class User(Entity):
    __tablename__ = "users"

    NAME_LENGTH_MAX = 128
    IS_NAME_REQUIRED = True
    SURNAME_LENGTH_MAX = 128
    IS_SURNAME_REQUIRED = False
    EMAIL_LENGTH_MAX = 128
    IS_EMAIL_REQUIRED = False

    name: Mapped[str] = mapped_column(String(NAME_LENGTH_MAX), nullable=not IS_NAME_REQUIRED)
    surname: Mapped[str | None] = mapped_column(
        String(SURNAME_LENGTH_MAX), nullable=not IS_SURNAME_REQUIRED
    )
    email: Mapped[str | None] = mapped_column(
        String(EMAIL_LENGTH_MAX), nullable=not IS_EMAIL_REQUIRED, unique=True
    )

    role_id: Mapped[int | None] = mapped_column(ForeignKey("roles.id"), nullable=True, index=True)

    role: Mapped[Role | None] = relationship(back_populates="users")
    group_links: Mapped[list[UserGroupLink]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    groups: Mapped[list[Group]] = relationship(secondary="user_group_links", viewonly=True)


# --- Common -----------------------------------------------------------------


class Department(Entity):
    __tablename__ = "departments"

    NAME_LENGTH_MAX = 128
    IS_NAME_REQUIRED = True

    name: Mapped[str] = mapped_column(String(NAME_LENGTH_MAX), nullable=not IS_NAME_REQUIRED)

    courses: Mapped[list[Course]] = relationship(
        back_populates="department", cascade="all, delete-orphan"
    )


class Course(Entity):
    __tablename__ = "courses"

    NAME_LENGTH_MAX = 128
    IS_NAME_REQUIRED = True

    name: Mapped[str] = mapped_column(String(NAME_LENGTH_MAX), nullable=not IS_NAME_REQUIRED)
    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id"), nullable=False, index=True
    )

    department: Mapped[Department] = relationship(back_populates="courses")
    groups: Mapped[list[Group]] = relationship(
        back_populates="course", cascade="all, delete-orphan"
    )


class Group(Entity):
    __tablename__ = "groups"

    NAME_LENGTH_MAX = 128
    IS_NAME_REQUIRED = True

    name: Mapped[str] = mapped_column(String(NAME_LENGTH_MAX), nullable=not IS_NAME_REQUIRED)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False, index=True)

    course: Mapped[Course] = relationship(back_populates="groups")
    user_links: Mapped[list[UserGroupLink]] = relationship(
        back_populates="group", cascade="all, delete-orphan"
    )


class WeekType(Entity):
    # Alternating timetable weeks, e.g. "odd" / "even".
    __tablename__ = "week_types"

    NAME_LENGTH_MAX = 128
    IS_NAME_REQUIRED = True

    name: Mapped[str] = mapped_column(String(NAME_LENGTH_MAX), nullable=not IS_NAME_REQUIRED)
    index: Mapped[int] = mapped_column(nullable=False)


# --- Link -------------------------------------------------------------------


class UserGroupLink(Entity):
    __tablename__ = "user_group_links"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id"), nullable=False, index=True)

    user: Mapped[User] = relationship(back_populates="group_links")
    group: Mapped[Group] = relationship(back_populates="user_links")

    __table_args__ = (UniqueConstraint("user_id", "group_id", name="uq_user_group_link"),)


class RolePermissionLink(Entity):
    __tablename__ = "role_permission_links"

    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id"), nullable=False, index=True)
    permission_id: Mapped[int] = mapped_column(
        ForeignKey("permissions.id"), nullable=False, index=True
    )

    role: Mapped[Role] = relationship(back_populates="permission_links")
    permission: Mapped[Permission] = relationship(back_populates="role_links")

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission_link"),
    )


# --- Module Notes -----------------------------------------------------------
# Required foreign keys (course -> department, group -> course, links) cascade
# deletes from the parent; optional ones (user -> role) are set to NULL.
# Link tables are full entities (own id and timestamps) rather than bare
# association tables, so membership changes are audited like any other row.
