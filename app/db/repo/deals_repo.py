from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments.types import DealSize, validate_discount_tiers
from app.db.models.deals import Deal


class DealsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, deal_id: UUID) -> Deal | None:
        return await session.get(Deal, deal_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, deal_id: UUID) -> Deal | None:
        stmt = select(Deal).where(Deal.id == deal_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        name: str,
        distributor_id: int,
        sizes: Sequence[DealSize],
        min_qty_for_discount: int = 0,
        commitment_start_at: datetime | None = None,
        commitment_ends_at: datetime | None = None,
        description: str | None = None,
    ) -> Deal:
        for size in sizes:
            validate_discount_tiers(size)
        deal = Deal(
            id=uuid4(),
            name=name,
            description=description,
            distributor_id=distributor_id,
            sizes=[size.to_json() for size in sizes],
            min_qty_for_discount=min_qty_for_discount,
            commitment_start_at=commitment_start_at,
            commitment_ends_at=commitment_ends_at,
            status="active",
            total_sold=0,
            total_revenue=0,
            notification_history={},
        )
        session.add(deal)
        await session.flush()
        return deal
