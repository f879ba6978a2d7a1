from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments.daily_summary import build_snapshot, record_commitment_in_daily_summary, summary_day
from app.commitments.transitions import append_notification_history, effective_totals
from app.commitments.types import SizeLine, to_money
from app.core.config import get_settings
from app.db.models.commitments import Commitment
from app.db.models.deals import Deal


async def _journal_daily_summary(
    session: AsyncSession,
    *,
    commitment: Commitment,
    deal: Deal,
    now_utc: datetime,
) -> None:
    lines = [SizeLine.from_json(raw) for raw in commitment.size_commitments]
    snapshot = build_snapshot(
        commitment_id=commitment.id,
        deal_id=deal.id,
        deal_name=deal.name,
        lines=lines,
        total_price=to_money(commitment.total_price),
    )
    await record_commitment_in_daily_summary(
        session,
        day=summary_day(now_utc, timezone_name=get_settings().business_timezone),
        user_id=commitment.user_id,
        distributor_id=deal.distributor_id,
        snapshot=snapshot,
        now_utc=now_utc,
    )


def _settle(commitment: Commitment, deal: Deal, *, now_utc: datetime) -> None:
    quantity, price = effective_totals(commitment)
    deal.total_sold = int(deal.total_sold or 0) + quantity
    deal.total_revenue = to_money(to_money(deal.total_revenue or 0) + price)
    deal.notification_history = append_notification_history(
        deal.notification_history,
        user_id=commitment.user_id,
        sent_at=now_utc,
    )
    deal.updated_at = now_utc
    commitment.settled_at = now_utc


def _unsettle(commitment: Commitment, deal: Deal) -> None:
    """Take a settled commitment's totals back out of the deal so it can be settled again."""
    if commitment.settled_at is None:
        return
    quantity, price = effective_totals(commitment)
    deal.total_sold = max(0, int(deal.total_sold or 0) - quantity)
    deal.total_revenue = to_money(to_money(deal.total_revenue or 0) - price)
    commitment.settled_at = None
