from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def list_by_ids(
        session: AsyncSession,
        user_ids: Sequence[int],
    ) -> list[User]:
        ids = tuple({int(user_id) for user_id in user_ids})
        if not ids:
            return []
        stmt = select(User).where(User.id.in_(ids))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_by_role(session: AsyncSession, role: str) -> list[User]:
        stmt = select(User).where(User.role == role).order_by(User.id.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        name: str,
        email: str,
        role: str,
        phone: str | None = None,
        business_name: str | None = None,
    ) -> User:
        user = User(
            name=name,
            email=email,
            role=role,
            phone=phone,
            business_name=business_name,
        )
        session.add(user)
        await session.flush()
        return user
