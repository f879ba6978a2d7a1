from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.commitments import Commitment


class CommitmentsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, commitment_id: UUID) -> Commitment | None:
        return await session.get(Commitment, commitment_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, commitment_id: UUID) -> Commitment | None:
        stmt = (
            select(Commitment)
            .where(Commitment.id == commitment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def find_active_for_deal(session: AsyncSession, deal_id: UUID) -> list[Commitment]:
        stmt = (
            select(Commitment)
            .where(
                Commitment.deal_id == deal_id,
                Commitment.status != "cancelled",
            )
            .order_by(Commitment.created_at.asc(), Commitment.id.asc())
            .with_for_update()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def find_active_by_user_and_deal(
        session: AsyncSession,
        *,
        user_id: int,
        deal_id: UUID,
    ) -> Commitment | None:
        stmt = (
            select(Commitment)
            .where(
                Commitment.user_id == user_id,
                Commitment.deal_id == deal_id,
                Commitment.status != "cancelled",
            )
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        user_id: int,
        deal_id: UUID,
        size_commitments: list[dict[str, object]],
        total_price: Decimal,
        now_utc: datetime,
    ) -> Commitment:
        commitment = Commitment(
            id=uuid4(),
            user_id=user_id,
            deal_id=deal_id,
            size_commitments=size_commitments,
            total_price=total_price,
            status="pending",
            distributor_response="",
            modified_by_distributor=False,
            modified_size_commitments=[],
            modified_total_price=None,
            settled_at=None,
            created_at=now_utc,
            updated_at=now_utc,
        )
        session.add(commitment)
        await session.flush()
        return commitment

    @staticmethod
    async def list_by_user(session: AsyncSession, *, user_id: int, limit: int = 200) -> list[Commitment]:
        stmt = (
            select(Commitment)
            .where(Commitment.user_id == user_id)
            .order_by(Commitment.created_at.desc(), Commitment.id.desc())
            .limit(max(1, int(limit)))
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
