from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.commitments.daily_summary import (
    build_snapshot,
    merge_snapshot,
    record_commitment_in_daily_summary,
    rollup,
    summary_day,
)
from app.commitments.types import SizeLine
from app.db.repo.daily_summaries_repo import DailySummariesRepo


def _snapshot(commitment_id, quantity: int, price: str) -> dict:
    unit = Decimal(price)
    return build_snapshot(
        commitment_id=commitment_id,
        deal_id=uuid4(),
        deal_name="Spring Water",
        lines=[
            SizeLine(
                size="Case",
                quantity=quantity,
                price_per_unit=unit,
                original_price_per_unit=unit,
                total_price=unit * quantity,
            )
        ],
        total_price=unit * quantity,
    )


def test_summary_day_uses_business_timezone() -> None:
    late_evening_denver = datetime(2026, 3, 11, 3, 30, tzinfo=timezone.utc)

    assert summary_day(late_evening_denver, timezone_name="America/Denver") == date(2026, 3, 10)
    assert summary_day(late_evening_denver, timezone_name="UTC") == date(2026, 3, 11)


def test_merge_snapshot_replaces_same_commitment() -> None:
    commitment_id = uuid4()
    other = _snapshot(uuid4(), 5, "10.00")
    first = _snapshot(commitment_id, 10, "10.00")
    second = _snapshot(commitment_id, 30, "8.00")

    merged = merge_snapshot(merge_snapshot([other], first), second)

    assert [item["commitmentId"] for item in merged] == [other["commitmentId"], str(commitment_id)]
    assert rollup(merged) == (2, 35, Decimal("290.00"))


@pytest.mark.asyncio
async def test_record_commitment_updates_rollup(monkeypatch) -> None:
    summary = SimpleNamespace(commitments=None, total_commitments=0, total_quantity=0, total_amount=Decimal("0"))
    calls: list[dict] = []

    async def _fake_get_or_create(session, *, summary_date, user_id, distributor_id):
        calls.append({"summary_date": summary_date, "user_id": user_id, "distributor_id": distributor_id})
        return summary

    class _Session:
        async def flush(self) -> None:
            return None

    monkeypatch.setattr(DailySummariesRepo, "get_or_create_for_update", _fake_get_or_create)
    now_utc = datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc)

    await record_commitment_in_daily_summary(
        _Session(),
        day=date(2026, 3, 10),
        user_id=3,
        distributor_id=10,
        snapshot=_snapshot(uuid4(), 4, "2.50"),
        now_utc=now_utc,
    )

    assert calls == [{"summary_date": date(2026, 3, 10), "user_id": 3, "distributor_id": 10}]
    assert summary.total_commitments == 1
    assert summary.total_quantity == 4
    assert summary.total_amount == Decimal("10.00")
    assert summary.updated_at == now_utc
