from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class BuyCommitmentRequest(_CamelModel):
    # Shape is checked by the commitment validator so malformed items map to 400.
    size_commitments: Any = Field(default=None, alias="sizeCommitments")


class ModifySizesRequest(_CamelModel):
    size_commitments: Any = Field(default=None, alias="sizeCommitments")


class UpdateStatusRequest(_CamelModel):
    commitment_id: str | None = Field(default=None, alias="commitmentId")
    status: str | None = None
    distributor_response: str | None = Field(default=None, alias="distributorResponse")
    modified_size_commitments: list[Any] | None = Field(default=None, alias="modifiedSizeCommitments")


class DiscountTierResponse(_CamelModel):
    tier_quantity: int = Field(alias="tierQuantity")
    tier_discount: float = Field(alias="tierDiscount")


class SizeCommitmentResponse(_CamelModel):
    size: str
    quantity: int
    price_per_unit: float = Field(alias="pricePerUnit")
    original_price_per_unit: float | None = Field(default=None, alias="originalPricePerUnit")
    total_price: float = Field(alias="totalPrice")
    applied_discount_tier: DiscountTierResponse | None = Field(default=None, alias="appliedDiscountTier")


class CommitmentResponse(_CamelModel):
    id: UUID
    user_id: int = Field(alias="userId")
    deal_id: UUID = Field(alias="dealId")
    size_commitments: list[SizeCommitmentResponse] = Field(alias="sizeCommitments")
    total_price: float = Field(alias="totalPrice")
    status: str
    distributor_response: str = Field(alias="distributorResponse")
    modified_by_distributor: bool = Field(alias="modifiedByDistributor")
    modified_size_commitments: list[SizeCommitmentResponse] = Field(alias="modifiedSizeCommitments")
    modified_total_price: float | None = Field(default=None, alias="modifiedTotalPrice")
    settled_at: datetime | None = Field(default=None, alias="settledAt")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class DealResponse(_CamelModel):
    id: UUID
    name: str
    distributor_id: int = Field(alias="distributorId")
    min_qty_for_discount: int = Field(alias="minQtyForDiscount")
    status: str
    total_sold: int = Field(alias="totalSold")
    total_revenue: float = Field(alias="totalRevenue")
    commitment_start_at: datetime | None = Field(default=None, alias="commitmentStartAt")
    commitment_ends_at: datetime | None = Field(default=None, alias="commitmentEndsAt")


class BuyCommitmentResponse(_CamelModel):
    message: str
    commitment: CommitmentResponse
    updated_deal: DealResponse = Field(alias="updatedDeal")


class CommitmentMessageResponse(_CamelModel):
    message: str
    commitment: CommitmentResponse


class CommitmentListResponse(_CamelModel):
    commitments: list[CommitmentResponse]
