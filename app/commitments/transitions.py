from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from app.commitments.errors import CommitmentValidationError
from app.commitments.types import (
    CommitmentStatus,
    DealSnapshot,
    OverrideLine,
    SizeLine,
    to_money,
    total_price,
    total_quantity,
)
from app.commitments.validation import ensure_minimum_quantity, ensure_sizes_offered


class TransitionKind(str, Enum):
    RESPONSE_ONLY = "response_only"
    SETTLE = "settle"
    DECLINE = "decline"
    CANCEL = "cancel"
    REPLAY = "replay"


_FROM_PENDING = {
    CommitmentStatus.PENDING: TransitionKind.RESPONSE_ONLY,
    CommitmentStatus.APPROVED: TransitionKind.SETTLE,
    CommitmentStatus.DECLINED: TransitionKind.DECLINE,
    CommitmentStatus.CANCELLED: TransitionKind.CANCEL,
}


def parse_status(raw: object) -> CommitmentStatus:
    try:
        return CommitmentStatus(str(raw))
    except ValueError as exc:
        raise CommitmentValidationError(
            "Status must be one of: pending, approved, declined, cancelled"
        ) from exc


def resolve_transition(current: CommitmentStatus, target: CommitmentStatus) -> TransitionKind:
    if current == CommitmentStatus.PENDING:
        return _FROM_PENDING[target]
    if current == CommitmentStatus.APPROVED and target == CommitmentStatus.APPROVED:
        return TransitionKind.REPLAY
    raise CommitmentValidationError(
        f"Cannot change commitment status from {current.value} to {target.value}"
    )


def _parse_override_line(raw: object) -> OverrideLine:
    if not isinstance(raw, Mapping):
        raise CommitmentValidationError("Each modified size must be an object")
    size = raw.get("size")
    quantity = raw.get("quantity")
    price = raw.get("pricePerUnit")
    if not isinstance(size, str) or not size:
        raise CommitmentValidationError("Each modified size must include a size name")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise CommitmentValidationError(
            f"Modified quantity for size \"{size}\" must be a whole number greater than 0"
        )
    try:
        unit_price = to_money(price)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise CommitmentValidationError(f"Modified price for size \"{size}\" is invalid") from exc
    if isinstance(price, bool) or unit_price < 0:
        raise CommitmentValidationError(f"Modified price for size \"{size}\" is invalid")
    return OverrideLine(
        size=size,
        quantity=quantity,
        price_per_unit=unit_price,
        total_price=to_money(unit_price * quantity),
    )


def build_distributor_override(deal: DealSnapshot, raw_lines: Sequence[Any]) -> list[OverrideLine]:
    """Validate a distributor's modified sizes: known sizes, positive quantities, minimum total."""
    lines = [_parse_override_line(raw) for raw in raw_lines]
    ensure_sizes_offered(deal, (line.size for line in lines))
    ensure_minimum_quantity(deal, total_quantity(lines))
    return lines


def effective_totals(commitment: Any) -> tuple[int, Decimal]:
    """Quantity and price that count toward deal statistics."""
    if commitment.modified_by_distributor:
        modified = commitment.modified_size_commitments or []
        quantity = sum(int(raw["quantity"]) for raw in modified)
        return quantity, to_money(commitment.modified_total_price or 0)
    lines = [SizeLine.from_json(raw) for raw in commitment.size_commitments or ()]
    return total_quantity(lines), to_money(commitment.total_price)


def override_total(lines: Sequence[OverrideLine]) -> Decimal:
    return total_price(lines)


def append_notification_history(
    history: Mapping[str, Any] | None,
    *,
    user_id: int,
    sent_at: datetime,
) -> dict[str, list[dict[str, object]]]:
    updated = {key: list(entries) for key, entries in (history or {}).items()}
    key = str(user_id)
    updated.setdefault(key, []).append({"userId": user_id, "sentAt": sent_at.isoformat()})
    return updated
