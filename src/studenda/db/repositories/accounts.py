"""
studenda.db.repositories.accounts

Repositories for accounts: users, roles and permissions.

Responsibilities:
- Create and look up accounts.
- Maintain the User <-> Group and Role <-> Permission link entities.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studenda.db.models import (
    Group,
    Permission,
    Role,
    RolePermissionLink,
    User,
    UserGroupLink,
)


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        surname: str | None = None,
        email: str | None = None,
        role_id: int | None = None,
    ) -> User:
        user = User(name=name, surname=surname, email=email, role_id=role_id)
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def add_to_group(self, *, user_id: int, group_id: int) -> UserGroupLink:
        if await self._session.get(User, user_id) is None:
            raise ValueError("user not found")
        if await self._session.get(Group, group_id) is None:
            raise ValueError("group not found")

        stmt = select(UserGroupLink).where(
            UserGroupLink.user_id == user_id, UserGroupLink.group_id == group_id
        )
        existing = (await self._session.execute(stmt)).scalar_one_or_none()
        if existing is not None:
            return existing

        link = UserGroupLink(user_id=user_id, group_id=group_id)
        self._session.add(link)
        await self._session.flush()
        return link

    async def list_groups(self, user_id: int) -> list[Group]:
        stmt = (
            select(Group)
            .join(UserGroupLink, UserGroupLink.group_id == Group.id)
            .where(UserGroupLink.user_id == user_id)
            .order_by(Group.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())


class RoleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str) -> Role:
        role = Role(name=name)
        self._session.add(role)
        await self._session.flush()
        return role

    async def grant(self, *, role_id: int, permission_id: int) -> RolePermissionLink:
        if await self._session.get(Role, role_id) is None:
            raise ValueError("role not found")
        if await self._session.get(Permission, permission_id) is None:
            raise ValueError("permission not found")

        stmt = select(RolePermissionLink).where(
            RolePermissionLink.role_id == role_id,
            RolePermissionLink.permission_id == permission_id,
        )
        existing = (await self._session.execute(stmt)).scalar_one_or_none()
        if existing is not None:
            return existing

        link = RolePermissionLink(role_id=role_id, permission_id=permission_id)
        self._session.add(link)
        await self._session.flush()
        return link

    async def list_permissions(self, role_id: int) -> list[Permission]:
        stmt = (
            select(Permission)
            .join(RolePermissionLink, RolePermissionLink.permission_id == Permission.id)
            .where(RolePermissionLink.role_id == role_id)
            .order_by(Permission.name)
        )
        return list((await self._session.execute(stmt)).scalars().all())


class PermissionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str) -> Permission:
        permission = Permission(name=name)
        self._session.add(permission)
        await self._session.flush()
        return permission

    async def get_by_name(self, name: str) -> Permission | None:
        stmt = select(Permission).where(Permission.name == name)
        return (await self._session.execute(stmt)).scalar_one_or_none()


# --- Module Notes -----------------------------------------------------------
# Link helpers are idempotent: granting twice returns the existing link.
