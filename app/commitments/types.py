from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from app.commitments.constants import MONEY_QUANT


class Role(str, Enum):
    MEMBER = "member"
    DISTRIBUTOR = "distributor"
    ADMIN = "admin"


class CommitmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    CANCELLED = "cancelled"


def to_money(value: object) -> Decimal:
    if isinstance(value, Decimal):
        amount = value
    else:
        amount = Decimal(str(value))
    return amount.quantize(MONEY_QUANT)


def money_json(value: Decimal) -> str:
    return str(to_money(value))


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Effective user of a request.

    ``user_id``/``role`` describe the user the request acts as. When an admin
    acts on behalf of a member, ``impersonator_id`` carries the admin id.
    """

    user_id: int
    role: Role
    impersonator_id: int | None = None

    @property
    def is_impersonating(self) -> bool:
        return self.impersonator_id is not None


@dataclass(frozen=True, slots=True)
class DiscountTier:
    tier_quantity: int
    # Absolute unit price once the pool reaches tier_quantity.
    tier_discount: Decimal

    @classmethod
    def from_json(cls, raw: Mapping[str, Any]) -> DiscountTier:
        return cls(
            tier_quantity=int(raw["tierQuantity"]),
            tier_discount=to_money(raw["tierDiscount"]),
        )

    def to_json(self) -> dict[str, object]:
        return {
            "tierQuantity": self.tier_quantity,
            "tierDiscount": money_json(self.tier_discount),
        }


@dataclass(frozen=True, slots=True)
class DealSize:
    size: str
    original_cost: Decimal
    discount_price: Decimal
    discount_tiers: tuple[DiscountTier, ...] = ()

    @property
    def has_tiers(self) -> bool:
        return len(self.discount_tiers) > 0

    @classmethod
    def from_json(cls, raw: Mapping[str, Any]) -> DealSize:
        return cls(
            size=str(raw["size"]),
            original_cost=to_money(raw["originalCost"]),
            discount_price=to_money(raw["discountPrice"]),
            discount_tiers=tuple(DiscountTier.from_json(tier) for tier in raw.get("discountTiers") or ()),
        )

    def to_json(self) -> dict[str, object]:
        return {
            "size": self.size,
            "originalCost": money_json(self.original_cost),
            "discountPrice": money_json(self.discount_price),
            "discountTiers": [tier.to_json() for tier in self.discount_tiers],
        }


def validate_discount_tiers(size: DealSize) -> None:
    """Raise ValueError unless tiers strictly increase in quantity and strictly drop in price."""
    previous: DiscountTier | None = None
    for tier in size.discount_tiers:
        if tier.tier_quantity <= 0:
            raise ValueError(f"Tier quantity for size {size.size!r} must be positive")
        if tier.tier_discount < 0:
            raise ValueError(f"Tier price for size {size.size!r} must not be negative")
        if previous is not None:
            if tier.tier_quantity <= previous.tier_quantity:
                raise ValueError(f"Tiers for size {size.size!r} must have increasing quantities")
            if tier.tier_discount >= previous.tier_discount:
                raise ValueError(f"Tiers for size {size.size!r} must have decreasing prices")
        previous = tier


@dataclass(frozen=True, slots=True)
class DealSnapshot:
    id: UUID
    name: str
    distributor_id: int
    sizes: tuple[DealSize, ...]
    min_qty_for_discount: int = 0
    commitment_start_at: datetime | None = None
    commitment_ends_at: datetime | None = None

    @classmethod
    def from_model(cls, deal: Any) -> DealSnapshot:
        return cls(
            id=deal.id,
            name=deal.name,
            distributor_id=int(deal.distributor_id),
            sizes=tuple(DealSize.from_json(raw) for raw in deal.sizes or ()),
            min_qty_for_discount=int(deal.min_qty_for_discount or 0),
            commitment_start_at=deal.commitment_start_at,
            commitment_ends_at=deal.commitment_ends_at,
        )

    def find_size(self, label: str) -> DealSize | None:
        for size in self.sizes:
            if size.size == label:
                return size
        return None

    @property
    def tiered_sizes(self) -> tuple[DealSize, ...]:
        return tuple(size for size in self.sizes if size.has_tiers)


@dataclass(frozen=True, slots=True)
class SizeRequest:
    size: str
    quantity: int


@dataclass(slots=True)
class SizeLine:
    size: str
    quantity: int
    price_per_unit: Decimal
    original_price_per_unit: Decimal
    total_price: Decimal
    applied_discount_tier: DiscountTier | None = None

    @classmethod
    def from_json(cls, raw: Mapping[str, Any]) -> SizeLine:
        price_per_unit = to_money(raw["pricePerUnit"])
        quantity = int(raw["quantity"])
        raw_tier = raw.get("appliedDiscountTier")
        applied_tier = None
        if raw_tier and raw_tier.get("tierQuantity") is not None:
            applied_tier = DiscountTier.from_json(raw_tier)
        return cls(
            size=str(raw["size"]),
            quantity=quantity,
            price_per_unit=price_per_unit,
            original_price_per_unit=to_money(raw.get("originalPricePerUnit", price_per_unit)),
            total_price=to_money(raw.get("totalPrice", price_per_unit * quantity)),
            applied_discount_tier=applied_tier,
        )

    def to_json(self) -> dict[str, object]:
        return {
            "size": self.size,
            "quantity": self.quantity,
            "pricePerUnit": money_json(self.price_per_unit),
            "originalPricePerUnit": money_json(self.original_price_per_unit),
            "totalPrice": money_json(self.total_price),
            "appliedDiscountTier": (
                self.applied_discount_tier.to_json() if self.applied_discount_tier is not None else None
            ),
        }


@dataclass(frozen=True, slots=True)
class OverrideLine:
    size: str
    quantity: int
    price_per_unit: Decimal
    total_price: Decimal

    def to_json(self) -> dict[str, object]:
        return {
            "size": self.size,
            "quantity": self.quantity,
            "pricePerUnit": money_json(self.price_per_unit),
            "totalPrice": money_json(self.total_price),
        }


@dataclass(slots=True)
class PricedCommitment:
    commitment_id: UUID
    user_id: int
    lines: list[SizeLine]

    @classmethod
    def from_model(cls, commitment: Any) -> PricedCommitment:
        return cls(
            commitment_id=commitment.id,
            user_id=int(commitment.user_id),
            lines=[SizeLine.from_json(raw) for raw in commitment.size_commitments or ()],
        )


def total_quantity(lines: Sequence[SizeLine] | Sequence[OverrideLine]) -> int:
    return sum(line.quantity for line in lines)


def total_price(lines: Sequence[SizeLine] | Sequence[OverrideLine]) -> Decimal:
    return to_money(sum((line.total_price for line in lines), Decimal("0")))


@dataclass(slots=True)
class CommitmentWriteResult:
    commitment: Any
    deal: Any
    created: bool
    repriced_commitment_ids: list[UUID] = field(default_factory=list)


@dataclass(slots=True)
class StatusUpdateResult:
    commitment: Any
    previous_status: str
    idempotent_replay: bool
