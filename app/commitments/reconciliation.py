from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments import messages
from app.commitments.constants import (
    NOTIFICATION_TYPE_DISCOUNT,
    PRIORITY_MEDIUM,
    RELATED_KIND_COMMITMENT,
    RELATED_KIND_DEAL,
    SUBTYPE_TIER_CHANGED,
)
from app.commitments.pricing import pool_quantities, unit_price_for_pool
from app.commitments.types import (
    DealSnapshot,
    DiscountTier,
    PricedCommitment,
    Role,
    SizeLine,
    to_money,
    total_price,
)
from app.services.outbox import OutboxService

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SizeOutcome:
    size: str
    tier: DiscountTier | None
    base_price: Decimal
    pool_quantity: int

    @property
    def activated(self) -> bool:
        return self.tier is not None

    @property
    def deactivated(self) -> bool:
        return self.tier is None and self.pool_quantity > 0


@dataclass(slots=True)
class CommitmentRepricing:
    commitment_id: UUID
    user_id: int
    lines: list[SizeLine]
    total_price: Decimal


@dataclass(slots=True)
class ReconciliationPlan:
    outcomes: list[SizeOutcome] = field(default_factory=list)
    updates: list[CommitmentRepricing] = field(default_factory=list)

    @property
    def activated(self) -> list[SizeOutcome]:
        return [outcome for outcome in self.outcomes if outcome.activated]

    @property
    def deactivated(self) -> list[SizeOutcome]:
        return [outcome for outcome in self.outcomes if outcome.deactivated]

    @property
    def changed(self) -> bool:
        return len(self.updates) > 0


def plan_reconciliation(
    deal: DealSnapshot,
    commitments: Sequence[PricedCommitment],
) -> ReconciliationPlan:
    """Compute the price every non-cancelled commitment should carry for tiered sizes.

    Only lines whose stored unit price differs from the pool price are rewritten.
    Sizes without tiers are left untouched.
    """
    plan = ReconciliationPlan()
    tiered_sizes = deal.tiered_sizes
    if not tiered_sizes:
        return plan

    pools = pool_quantities(commitments)
    expected: dict[str, tuple[Decimal, DiscountTier | None]] = {}
    for size in tiered_sizes:
        pool = pools.get(size.size, 0)
        price, tier = unit_price_for_pool(size, pool)
        expected[size.size] = (price, tier)
        plan.outcomes.append(
            SizeOutcome(size=size.size, tier=tier, base_price=size.discount_price, pool_quantity=pool)
        )

    for commitment in commitments:
        changed = False
        new_lines: list[SizeLine] = []
        for line in commitment.lines:
            target = expected.get(line.size)
            if target is None or line.price_per_unit == target[0]:
                new_lines.append(line)
                continue
            price, tier = target
            new_lines.append(
                SizeLine(
                    size=line.size,
                    quantity=line.quantity,
                    price_per_unit=price,
                    original_price_per_unit=line.original_price_per_unit,
                    total_price=to_money(price * line.quantity),
                    applied_discount_tier=tier,
                )
            )
            changed = True
        if changed:
            plan.updates.append(
                CommitmentRepricing(
                    commitment_id=commitment.commitment_id,
                    user_id=commitment.user_id,
                    lines=new_lines,
                    total_price=total_price(new_lines),
                )
            )
    return plan


def _activated_rows(plan: ReconciliationPlan) -> list[tuple[str, int, Decimal]]:
    return [
        (outcome.size, outcome.tier.tier_quantity, outcome.tier.tier_discount)
        for outcome in plan.activated
        if outcome.tier is not None
    ]


def _deactivated_rows(plan: ReconciliationPlan) -> list[tuple[str, int]]:
    return [(outcome.size, outcome.pool_quantity) for outcome in plan.deactivated]


async def reconcile_deal_pricing(
    session: AsyncSession,
    *,
    deal: DealSnapshot,
    commitments: Sequence[Any],
    triggering_commitment_id: UUID | None,
) -> ReconciliationPlan:
    """Apply a reconciliation plan to loaded commitment rows and enqueue notifications.

    ``commitments`` must be every non-cancelled commitment of the deal, loaded
    inside the transaction holding the deal lock.
    """
    priced = [PricedCommitment.from_model(commitment) for commitment in commitments]
    plan = plan_reconciliation(deal, priced)
    if not plan.changed:
        return plan

    by_id = {commitment.id: commitment for commitment in commitments}
    owner_title, owner_message = messages.owner_tier_change(
        deal.name,
        activated=bool(plan.activated),
        deactivated=bool(plan.deactivated),
    )
    for update in plan.updates:
        row = by_id[update.commitment_id]
        row.size_commitments = [line.to_json() for line in update.lines]
        row.total_price = update.total_price
        if update.commitment_id == triggering_commitment_id:
            continue
        await OutboxService.enqueue_notification(
            session,
            recipient_id=update.user_id,
            sender_id=None,
            type=NOTIFICATION_TYPE_DISCOUNT,
            sub_type=SUBTYPE_TIER_CHANGED,
            title=owner_title,
            message=owner_message,
            related_id=str(update.commitment_id),
            related_kind=RELATED_KIND_COMMITMENT,
            priority=PRIORITY_MEDIUM,
        )

    activated = _activated_rows(plan)
    deactivated = _deactivated_rows(plan)
    if activated or deactivated:
        title, message = messages.deal_tier_change(deal.name, activated=activated, deactivated=deactivated)
        await OutboxService.enqueue_notification(
            session,
            recipient_id=deal.distributor_id,
            sender_id=None,
            type=NOTIFICATION_TYPE_DISCOUNT,
            sub_type=SUBTYPE_TIER_CHANGED,
            title=title,
            message=message,
            related_id=str(deal.id),
            related_kind=RELATED_KIND_DEAL,
            priority=PRIORITY_MEDIUM,
        )
        admin_title, admin_message = messages.admin_tier_change(
            deal.name, activated=activated, deactivated=deactivated
        )
        await OutboxService.enqueue_role_notification(
            session,
            role=Role.ADMIN.value,
            sender_id=None,
            type=NOTIFICATION_TYPE_DISCOUNT,
            sub_type=SUBTYPE_TIER_CHANGED,
            title=admin_title,
            message=admin_message,
            related_id=str(deal.id),
            related_kind=RELATED_KIND_DEAL,
            priority=PRIORITY_MEDIUM,
        )

    await session.flush()
    logger.info(
        "tier_reconciliation_applied",
        deal_id=str(deal.id),
        repriced_commitments=len(plan.updates),
        activated_sizes=[row[0] for row in activated],
        deactivated_sizes=[row[0] for row in deactivated],
    )
    return plan
