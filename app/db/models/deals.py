from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Deal(Base):
    __tablename__ = "deals"
    __table_args__ = (
        CheckConstraint("status IN ('active','inactive')", name="ck_deals_status"),
        CheckConstraint("total_sold >= 0", name="ck_deals_total_sold_non_negative"),
        CheckConstraint("total_revenue >= 0", name="ck_deals_total_revenue_non_negative"),
        Index("idx_deals_distributor", "distributor_id"),
        Index("idx_deals_commitment_window", "commitment_start_at", "commitment_ends_at"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    distributor_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    # [{"size", "originalCost", "discountPrice", "discountTiers": [{"tierQuantity", "tierDiscount"}]}]
    sizes: Mapped[list[dict[str, object]]] = mapped_column(JSONB, nullable=False)
    min_qty_for_discount: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    commitment_start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    commitment_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default=text("'active'"))
    total_sold: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    total_revenue: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        server_default=text("0"),
    )
    notification_history: Mapped[dict[str, list[dict[str, object]]]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
