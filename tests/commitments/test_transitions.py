from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.commitments.errors import CommitmentValidationError
from app.commitments.transitions import (
    TransitionKind,
    append_notification_history,
    build_distributor_override,
    effective_totals,
    parse_status,
    resolve_transition,
)
from app.commitments.types import CommitmentStatus, DealSize, DealSnapshot


def _deal(min_qty: int = 0) -> DealSnapshot:
    return DealSnapshot(
        id=uuid4(),
        name="Spring Water",
        distributor_id=10,
        sizes=(DealSize(size="Case", original_cost=Decimal("12.00"), discount_price=Decimal("10.00")),),
        min_qty_for_discount=min_qty,
    )


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        (CommitmentStatus.PENDING, TransitionKind.RESPONSE_ONLY),
        (CommitmentStatus.APPROVED, TransitionKind.SETTLE),
        (CommitmentStatus.DECLINED, TransitionKind.DECLINE),
        (CommitmentStatus.CANCELLED, TransitionKind.CANCEL),
    ],
)
def test_pending_can_move_anywhere(target, expected) -> None:
    assert resolve_transition(CommitmentStatus.PENDING, target) == expected


def test_repeated_approval_is_a_replay() -> None:
    assert resolve_transition(CommitmentStatus.APPROVED, CommitmentStatus.APPROVED) == TransitionKind.REPLAY


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (CommitmentStatus.APPROVED, CommitmentStatus.PENDING),
        (CommitmentStatus.APPROVED, CommitmentStatus.DECLINED),
        (CommitmentStatus.DECLINED, CommitmentStatus.APPROVED),
        (CommitmentStatus.CANCELLED, CommitmentStatus.PENDING),
    ],
)
def test_terminal_states_reject_changes(current, target) -> None:
    with pytest.raises(CommitmentValidationError, match=f"from {current.value} to {target.value}"):
        resolve_transition(current, target)


def test_parse_status_rejects_unknown_value() -> None:
    assert parse_status("declined") == CommitmentStatus.DECLINED
    with pytest.raises(CommitmentValidationError, match="Status must be one of"):
        parse_status("shipped")


def test_distributor_override_computes_totals() -> None:
    lines = build_distributor_override(_deal(), [{"size": "Case", "quantity": 12, "pricePerUnit": 9.5}])

    [line] = lines
    assert line.price_per_unit == Decimal("9.50")
    assert line.total_price == Decimal("114.00")
    assert line.to_json()["totalPrice"] == "114.00"


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ({"size": "Crate", "quantity": 1, "pricePerUnit": 1}, 'Size "Crate" does not exist'),
        ({"size": "Case", "quantity": 0, "pricePerUnit": 1}, "whole number greater than 0"),
        ({"size": "Case", "quantity": 2, "pricePerUnit": -1}, "is invalid"),
        ({"size": "Case", "quantity": 2, "pricePerUnit": "abc"}, "is invalid"),
    ],
)
def test_distributor_override_rejects_bad_lines(raw, message) -> None:
    with pytest.raises(CommitmentValidationError, match=message):
        build_distributor_override(_deal(), [raw])


def test_distributor_override_enforces_minimum_quantity() -> None:
    with pytest.raises(CommitmentValidationError, match=r"Total modified quantity \(3\) must be at least 5"):
        build_distributor_override(_deal(min_qty=5), [{"size": "Case", "quantity": 3, "pricePerUnit": 9}])


def test_effective_totals_prefer_distributor_override() -> None:
    original = SimpleNamespace(
        modified_by_distributor=False,
        size_commitments=[{"size": "Case", "quantity": 20, "pricePerUnit": "10.00", "totalPrice": "200.00"}],
        total_price=Decimal("200.00"),
    )
    overridden = SimpleNamespace(
        modified_by_distributor=True,
        modified_size_commitments=[{"size": "Case", "quantity": 15, "pricePerUnit": "9.00"}],
        modified_total_price=Decimal("135.00"),
    )

    assert effective_totals(original) == (20, Decimal("200.00"))
    assert effective_totals(overridden) == (15, Decimal("135.00"))


def test_append_notification_history_does_not_mutate_input() -> None:
    history = {"7": [{"userId": 7, "sentAt": "2026-03-01T00:00:00+00:00"}]}
    sent_at = datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc)

    updated = append_notification_history(history, user_id=7, sent_at=sent_at)

    assert len(history["7"]) == 1
    assert updated["7"][-1] == {"userId": 7, "sentAt": "2026-03-10T18:00:00+00:00"}
