from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from uuid import UUID

from app.commitments.errors import CommitmentValidationError
from app.commitments.types import (
    DealSize,
    DealSnapshot,
    DiscountTier,
    PricedCommitment,
    SizeLine,
    SizeRequest,
    to_money,
)


def select_tier(tiers: Sequence[DiscountTier], pool_quantity: int) -> DiscountTier | None:
    for tier in sorted(tiers, key=lambda item: item.tier_quantity, reverse=True):
        if pool_quantity >= tier.tier_quantity:
            return tier
    return None


def unit_price_for_pool(size: DealSize, pool_quantity: int) -> tuple[Decimal, DiscountTier | None]:
    tier = select_tier(size.discount_tiers, pool_quantity)
    if tier is None:
        return size.discount_price, None
    return tier.tier_discount, tier


def pool_quantities(
    commitments: Iterable[PricedCommitment],
    *,
    exclude_commitment_id: UUID | None = None,
) -> dict[str, int]:
    """Sum committed quantity per size over the given (non-cancelled) commitments."""
    totals: dict[str, int] = {}
    for commitment in commitments:
        if exclude_commitment_id is not None and commitment.commitment_id == exclude_commitment_id:
            continue
        for line in commitment.lines:
            totals[line.size] = totals.get(line.size, 0) + line.quantity
    return totals


def build_line(size: DealSize, quantity: int, pool_quantity: int) -> SizeLine:
    price_per_unit, tier = unit_price_for_pool(size, pool_quantity)
    return SizeLine(
        size=size.size,
        quantity=quantity,
        price_per_unit=price_per_unit,
        original_price_per_unit=size.discount_price,
        total_price=to_money(price_per_unit * quantity),
        applied_discount_tier=tier,
    )


def price_request(
    deal: DealSnapshot,
    requests: Sequence[SizeRequest],
    baseline_pool: Mapping[str, int],
) -> list[SizeLine]:
    """Price each requested size against the baseline pool plus the request itself.

    ``baseline_pool`` must already exclude the acting member's own commitment so
    a repeat buy is not counted twice.
    """
    lines: list[SizeLine] = []
    for request in requests:
        size = deal.find_size(request.size)
        if size is None:
            raise CommitmentValidationError(f"Size \"{request.size}\" does not exist in this deal")
        pool = baseline_pool.get(request.size, 0) + request.quantity
        lines.append(build_line(size, request.quantity, pool))
    return lines
