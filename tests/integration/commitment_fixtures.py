from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from app.commitments.types import DealSize, DiscountTier
from app.db.models.deals import Deal
from app.db.repo.deals_repo import DealsRepo
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal


async def _create_user(name: str, *, role: str = "member", phone: str | None = None) -> int:
    async with SessionLocal.begin() as session:
        user = await UsersRepo.create(
            session,
            name=name,
            email=f"{name.lower().replace(' ', '.')}@example.com",
            role=role,
            phone=phone,
            business_name=f"{name} Wholesale" if role == "distributor" else None,
        )
        return user.id


async def _create_tiered_deal(*, distributor_id: int, min_qty_for_discount: int = 0) -> UUID:
    async with SessionLocal.begin() as session:
        deal = await DealsRepo.create(
            session,
            name="Spring Water",
            distributor_id=distributor_id,
            min_qty_for_discount=min_qty_for_discount,
            sizes=[
                DealSize(
                    size="Case",
                    original_cost=Decimal("12.00"),
                    discount_price=Decimal("10.00"),
                    discount_tiers=(DiscountTier(tier_quantity=50, tier_discount=Decimal("8.00")),),
                ),
                DealSize(size="Pallet", original_cost=Decimal("500.00"), discount_price=Decimal("450.00")),
            ],
        )
        return deal.id


async def _load_deal(deal_id: UUID) -> Deal:
    async with SessionLocal() as session:
        deal = await DealsRepo.get_by_id(session, deal_id)
        assert deal is not None
        return deal
