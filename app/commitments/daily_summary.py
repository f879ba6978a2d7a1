from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments.types import SizeLine, money_json, to_money
from app.db.repo.daily_summaries_repo import DailySummariesRepo

logger = structlog.get_logger(__name__)


def summary_day(now_utc: datetime, *, timezone_name: str) -> date:
    """Calendar day of ``now_utc`` in the business timezone."""
    return now_utc.astimezone(ZoneInfo(timezone_name)).date()


def build_snapshot(
    *,
    commitment_id: UUID,
    deal_id: UUID,
    deal_name: str,
    lines: Sequence[SizeLine],
    total_price: Decimal,
) -> dict[str, object]:
    return {
        "commitmentId": str(commitment_id),
        "dealId": str(deal_id),
        "dealName": deal_name,
        "sizeDetails": [
            {
                "size": line.size,
                "quantity": line.quantity,
                "pricePerUnit": money_json(line.price_per_unit),
                "totalPrice": money_json(line.total_price),
            }
            for line in lines
        ],
        "quantity": sum(line.quantity for line in lines),
        "totalPrice": money_json(total_price),
    }


def merge_snapshot(
    snapshots: Sequence[dict[str, Any]],
    snapshot: dict[str, Any],
) -> list[dict[str, Any]]:
    """Replace any snapshot of the same commitment with ``snapshot``."""
    commitment_id = snapshot["commitmentId"]
    merged = [item for item in snapshots if item.get("commitmentId") != commitment_id]
    merged.append(snapshot)
    return merged


def rollup(snapshots: Sequence[dict[str, Any]]) -> tuple[int, int, Decimal]:
    total_quantity = sum(int(item.get("quantity", 0)) for item in snapshots)
    total_amount = to_money(sum((to_money(item.get("totalPrice", 0)) for item in snapshots), Decimal("0")))
    return len(snapshots), total_quantity, total_amount


async def record_commitment_in_daily_summary(
    session: AsyncSession,
    *,
    day: date,
    user_id: int,
    distributor_id: int,
    snapshot: dict[str, Any],
    now_utc: datetime,
) -> Any:
    summary = await DailySummariesRepo.get_or_create_for_update(
        session,
        summary_date=day,
        user_id=user_id,
        distributor_id=distributor_id,
    )
    summary.commitments = merge_snapshot(summary.commitments or [], snapshot)
    count, quantity, amount = rollup(summary.commitments)
    summary.total_commitments = count
    summary.total_quantity = quantity
    summary.total_amount = amount
    summary.updated_at = now_utc
    await session.flush()
    logger.info(
        "daily_commitment_summary_updated",
        summary_date=day.isoformat(),
        user_id=user_id,
        distributor_id=distributor_id,
        commitment_id=snapshot["commitmentId"],
        total_commitments=count,
    )
    return summary
