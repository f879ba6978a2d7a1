from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class DailyCommitmentSummary(Base):
    __tablename__ = "daily_commitment_summaries"
    __table_args__ = (
        UniqueConstraint(
            "summary_date",
            "user_id",
            "distributor_id",
            name="uq_daily_commitment_summaries_day_user_distributor",
        ),
        CheckConstraint(
            "total_commitments >= 0",
            name="ck_daily_commitment_summaries_total_commitments_non_negative",
        ),
        CheckConstraint(
            "total_quantity >= 0",
            name="ck_daily_commitment_summaries_total_quantity_non_negative",
        ),
        Index("idx_daily_commitment_summaries_unsent", "summary_date", "email_sent"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    summary_date: Mapped[date] = mapped_column(Date, nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    distributor_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    commitments: Mapped[list[dict[str, object]]] = mapped_column(
        JSONB,
        nullable=False,
        server_default=text("'[]'::jsonb"),
    )
    total_commitments: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        server_default=text("0"),
    )
    email_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
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
