from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.daily_commitment_summaries import DailyCommitmentSummary


class DailySummariesRepo:
    @staticmethod
    async def get_or_create_for_update(
        session: AsyncSession,
        *,
        summary_date: date,
        user_id: int,
        distributor_id: int,
    ) -> DailyCommitmentSummary:
        insert_stmt = (
            insert(DailyCommitmentSummary)
            .values(
                summary_date=summary_date,
                user_id=user_id,
                distributor_id=distributor_id,
                commitments=[],
                total_commitments=0,
                total_quantity=0,
                total_amount=0,
                email_sent=False,
            )
            .on_conflict_do_nothing(
                index_elements=[
                    DailyCommitmentSummary.summary_date,
                    DailyCommitmentSummary.user_id,
                    DailyCommitmentSummary.distributor_id,
                ]
            )
        )
        await session.execute(insert_stmt)
        stmt = (
            select(DailyCommitmentSummary)
            .where(
                DailyCommitmentSummary.summary_date == summary_date,
                DailyCommitmentSummary.user_id == user_id,
                DailyCommitmentSummary.distributor_id == distributor_id,
            )
            .with_for_update()
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    @staticmethod
    async def list_unsent_for_day_for_update(
        session: AsyncSession,
        *,
        summary_date: date,
        limit: int,
    ) -> list[DailyCommitmentSummary]:
        stmt = (
            select(DailyCommitmentSummary)
            .where(
                DailyCommitmentSummary.summary_date == summary_date,
                DailyCommitmentSummary.email_sent.is_(False),
            )
            .order_by(DailyCommitmentSummary.id.asc())
            .limit(max(1, int(limit)))
            .with_for_update(skip_locked=True)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
