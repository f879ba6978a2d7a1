from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.commitments.reconciliation import plan_reconciliation, reconcile_deal_pricing
from app.commitments.types import DealSize, DealSnapshot, DiscountTier, PricedCommitment, SizeLine
from app.db.repo.outbox_events_repo import OutboxEventsRepo

TIER = DiscountTier(tier_quantity=50, tier_discount=Decimal("8.00"))


def _deal() -> DealSnapshot:
    return DealSnapshot(
        id=uuid4(),
        name="Spring Water",
        distributor_id=10,
        sizes=(
            DealSize(
                size="Case",
                original_cost=Decimal("12.00"),
                discount_price=Decimal("10.00"),
                discount_tiers=(TIER,),
            ),
            DealSize(size="Pallet", original_cost=Decimal("500.00"), discount_price=Decimal("450.00")),
        ),
    )


def _line(size: str, quantity: int, price: str, tier: DiscountTier | None = None) -> SizeLine:
    unit = Decimal(price)
    return SizeLine(
        size=size,
        quantity=quantity,
        price_per_unit=unit,
        original_price_per_unit=Decimal("450.00") if size == "Pallet" else Decimal("10.00"),
        total_price=unit * quantity,
        applied_discount_tier=tier,
    )


def _row(user_id: int, *lines: SizeLine) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        user_id=user_id,
        size_commitments=[line.to_json() for line in lines],
        total_price=sum((line.total_price for line in lines), Decimal("0")),
    )


class _Session:
    async def flush(self) -> None:
        return None


def _capture_outbox(monkeypatch) -> list[dict]:
    events: list[dict] = []

    async def _fake_create(session, *, event_type, payload, status="PENDING"):
        events.append({"event_type": event_type, "payload": payload})
        return SimpleNamespace(id=len(events))

    monkeypatch.setattr(OutboxEventsRepo, "create", _fake_create)
    return events


def test_plan_reprices_existing_commitments_when_pool_crosses_tier() -> None:
    deal = _deal()
    a = PricedCommitment(commitment_id=uuid4(), user_id=1, lines=[_line("Case", 20, "10.00")])
    b = PricedCommitment(commitment_id=uuid4(), user_id=2, lines=[_line("Case", 20, "10.00")])
    c = PricedCommitment(commitment_id=uuid4(), user_id=3, lines=[_line("Case", 20, "8.00", TIER)])

    plan = plan_reconciliation(deal, [a, b, c])

    assert [update.commitment_id for update in plan.updates] == [a.commitment_id, b.commitment_id]
    for update in plan.updates:
        assert update.lines[0].price_per_unit == Decimal("8.00")
        assert update.lines[0].applied_discount_tier == TIER
        assert update.total_price == Decimal("160.00")
    assert [outcome.size for outcome in plan.activated] == ["Case"]
    assert plan.deactivated == []


def test_plan_reverts_to_base_price_when_pool_drops_below_tier() -> None:
    deal = _deal()
    a = PricedCommitment(commitment_id=uuid4(), user_id=1, lines=[_line("Case", 30, "8.00", TIER)])

    plan = plan_reconciliation(deal, [a])

    [update] = plan.updates
    assert update.lines[0].price_per_unit == Decimal("10.00")
    assert update.lines[0].applied_discount_tier is None
    assert [outcome.pool_quantity for outcome in plan.deactivated] == [30]


def test_plan_leaves_untiered_sizes_alone() -> None:
    deal = _deal()
    a = PricedCommitment(
        commitment_id=uuid4(),
        user_id=1,
        lines=[_line("Case", 5, "10.00"), _line("Pallet", 2, "999.00")],
    )

    plan = plan_reconciliation(deal, [a])

    assert plan.changed is False


@pytest.mark.asyncio
async def test_reconcile_rewrites_rows_and_notifies_everyone_but_the_trigger(monkeypatch) -> None:
    events = _capture_outbox(monkeypatch)
    deal = _deal()
    a = _row(1, _line("Case", 20, "10.00"))
    b = _row(2, _line("Case", 20, "10.00"), _line("Pallet", 1, "450.00"))
    c = _row(3, _line("Case", 20, "8.00", TIER))

    plan = await reconcile_deal_pricing(
        _Session(),
        deal=deal,
        commitments=[a, b, c],
        triggering_commitment_id=c.id,
    )

    assert len(plan.updates) == 2
    assert a.size_commitments[0]["pricePerUnit"] == "8.00"
    assert a.total_price == Decimal("160.00")
    assert b.size_commitments[1]["pricePerUnit"] == "450.00"
    assert b.total_price == Decimal("610.00")

    owner_events = [
        event["payload"]
        for event in events
        if event["event_type"] == "notification" and event["payload"]["related_kind"] == "Commitment"
    ]
    assert sorted(payload["recipient_id"] for payload in owner_events) == [1, 2]
    assert {payload["title"] for payload in owner_events} == {"Volume Discount Tier Reached"}

    distributor_events = [
        event["payload"]
        for event in events
        if event["event_type"] == "notification" and event["payload"]["related_kind"] == "Deal"
    ]
    assert len(distributor_events) == 1
    assert distributor_events[0]["recipient_id"] == 10
    assert "Case reached 50+ units (price: $8.00)" in distributor_events[0]["message"]

    [admin_event] = [event["payload"] for event in events if event["event_type"] == "notification_by_role"]
    assert admin_event["role"] == "admin"
    assert admin_event["title"] == "Volume Discount Tiers Changed"


@pytest.mark.asyncio
async def test_reconcile_without_changes_emits_nothing(monkeypatch) -> None:
    events = _capture_outbox(monkeypatch)
    row = _row(1, _line("Case", 10, "10.00"))

    plan = await reconcile_deal_pricing(
        _Session(),
        deal=_deal(),
        commitments=[row],
        triggering_commitment_id=None,
    )

    assert plan.changed is False
    assert events == []
