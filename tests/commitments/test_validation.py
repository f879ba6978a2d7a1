from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from app.commitments.errors import CommitmentValidationError
from app.commitments.types import DealSize, DealSnapshot, DiscountTier, SizeRequest, validate_discount_tiers
from app.commitments.validation import (
    ensure_commitment_window_open,
    ensure_minimum_quantity,
    parse_size_requests,
    validate_commitment_request,
)

NOW_UTC = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _deal(**overrides) -> DealSnapshot:
    values = {
        "id": uuid4(),
        "name": "Spring Water",
        "distributor_id": 10,
        "sizes": (
            DealSize(size="Case", original_cost=Decimal("12.00"), discount_price=Decimal("10.00")),
            DealSize(size="Pallet", original_cost=Decimal("500.00"), discount_price=Decimal("450.00")),
        ),
        "min_qty_for_discount": 0,
    }
    values.update(overrides)
    return DealSnapshot(**values)


def test_parse_size_requests_accepts_integral_quantities() -> None:
    requests = parse_size_requests([{"size": "Case", "quantity": 3}, {"size": "Pallet", "quantity": 2.0}])

    assert requests == [SizeRequest(size="Case", quantity=3), SizeRequest(size="Pallet", quantity=2)]


@pytest.mark.parametrize("payload", [None, [], "Case", {"size": "Case"}])
def test_parse_size_requests_rejects_missing_array(payload) -> None:
    with pytest.raises(CommitmentValidationError, match="non-empty sizeCommitments array"):
        parse_size_requests(payload)


@pytest.mark.parametrize(
    "item",
    [
        {"size": "Case", "quantity": 0},
        {"size": "Case", "quantity": -4},
        {"size": "", "quantity": 1},
        {"quantity": 1},
        {"size": "Case", "quantity": True},
        {"size": "Case", "quantity": "3"},
    ],
)
def test_parse_size_requests_rejects_bad_items(item) -> None:
    with pytest.raises(CommitmentValidationError, match="size name and quantity greater than 0"):
        parse_size_requests([item])


def test_parse_size_requests_rejects_fractional_quantity() -> None:
    with pytest.raises(CommitmentValidationError, match="whole number"):
        parse_size_requests([{"size": "Case", "quantity": 1.5}])


def test_parse_size_requests_rejects_duplicate_sizes() -> None:
    with pytest.raises(CommitmentValidationError, match='Size "Case" is listed more than once'):
        parse_size_requests([{"size": "Case", "quantity": 1}, {"size": "Case", "quantity": 2}])


def test_window_closed_after_end() -> None:
    deal = _deal(commitment_ends_at=datetime(2026, 3, 9, 23, 0, tzinfo=timezone.utc))

    with pytest.raises(CommitmentValidationError, match="ended on 2026-03-09"):
        ensure_commitment_window_open(deal, now_utc=NOW_UTC)


def test_window_not_started_yet() -> None:
    deal = _deal(commitment_start_at=datetime(2026, 3, 15, tzinfo=timezone.utc))

    with pytest.raises(CommitmentValidationError, match="starts on 2026-03-15"):
        ensure_commitment_window_open(deal, now_utc=NOW_UTC)


def test_window_open_without_bounds() -> None:
    ensure_commitment_window_open(_deal(), now_utc=NOW_UTC)


def test_validate_commitment_request_rejects_unknown_size() -> None:
    with pytest.raises(CommitmentValidationError, match='Size "Crate" does not exist in this deal'):
        validate_commitment_request(_deal(), [SizeRequest(size="Crate", quantity=1)], now_utc=NOW_UTC)


def test_minimum_quantity_message_uses_label() -> None:
    deal = _deal(min_qty_for_discount=10)

    ensure_minimum_quantity(deal, 10)
    with pytest.raises(CommitmentValidationError, match=r"Total quantity \(4\) must be at least 10"):
        ensure_minimum_quantity(deal, 4, label="Total quantity")


def test_discount_tiers_must_increase_quantity_and_decrease_price() -> None:
    good = DealSize(
        size="Case",
        original_cost=Decimal("12.00"),
        discount_price=Decimal("10.00"),
        discount_tiers=(
            DiscountTier(tier_quantity=50, tier_discount=Decimal("8.00")),
            DiscountTier(tier_quantity=100, tier_discount=Decimal("7.00")),
        ),
    )
    validate_discount_tiers(good)

    flat = DealSize(
        size="Case",
        original_cost=Decimal("12.00"),
        discount_price=Decimal("10.00"),
        discount_tiers=(
            DiscountTier(tier_quantity=50, tier_discount=Decimal("8.00")),
            DiscountTier(tier_quantity=100, tier_discount=Decimal("8.00")),
        ),
    )
    with pytest.raises(ValueError, match="decreasing prices"):
        validate_discount_tiers(flat)
