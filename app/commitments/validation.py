from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from app.commitments.errors import CommitmentValidationError
from app.commitments.types import DealSnapshot, SizeRequest


def parse_size_requests(raw_items: object) -> list[SizeRequest]:
    """Normalize a raw ``sizeCommitments`` payload into size requests.

    Accepts any sequence of mappings carrying ``size`` and ``quantity``. Structural
    problems are reported as validation errors, never as type errors.
    """
    if not isinstance(raw_items, Sequence) or isinstance(raw_items, (str, bytes)) or not raw_items:
        raise CommitmentValidationError("Please provide a non-empty sizeCommitments array")

    requests: list[SizeRequest] = []
    for raw in raw_items:
        if not isinstance(raw, Mapping):
            raise CommitmentValidationError("Each size commitment must be an object")
        requests.append(_parse_one(raw))
    return validate_size_requests(requests)


def _parse_one(raw: Mapping[str, Any]) -> SizeRequest:
    size = raw.get("size")
    quantity = raw.get("quantity")
    if not isinstance(size, str) or not size.strip():
        raise CommitmentValidationError(
            "Each size must include size name and quantity greater than 0"
        )
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise CommitmentValidationError(
            "Each size must include size name and quantity greater than 0"
        )
    if isinstance(quantity, float) and not quantity.is_integer():
        raise CommitmentValidationError(f"Quantity for size \"{size}\" must be a whole number")
    return SizeRequest(size=size, quantity=int(quantity))


def validate_size_requests(requests: Sequence[SizeRequest]) -> list[SizeRequest]:
    if not requests:
        raise CommitmentValidationError("Please provide a non-empty sizeCommitments array")

    seen: set[str] = set()
    for request in requests:
        if request.quantity <= 0:
            raise CommitmentValidationError(
                "Each size must include size name and quantity greater than 0"
            )
        if request.size in seen:
            raise CommitmentValidationError(f"Size \"{request.size}\" is listed more than once")
        seen.add(request.size)
    return list(requests)


def _format_day(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


def ensure_commitment_window_open(deal: DealSnapshot, *, now_utc: datetime) -> None:
    if deal.commitment_ends_at is not None and now_utc > deal.commitment_ends_at:
        raise CommitmentValidationError(
            f"The commitment period for this deal ended on {_format_day(deal.commitment_ends_at)}. "
            "You can no longer make commitments to this deal."
        )
    if deal.commitment_start_at is not None and now_utc < deal.commitment_start_at:
        raise CommitmentValidationError(
            f"The commitment period for this deal starts on {_format_day(deal.commitment_start_at)}. "
            "You can make commitments during the active period."
        )


def ensure_sizes_offered(deal: DealSnapshot, sizes: Iterable[str]) -> None:
    for label in sizes:
        if deal.find_size(label) is None:
            raise CommitmentValidationError(f"Size \"{label}\" does not exist in this deal")


def ensure_minimum_quantity(
    deal: DealSnapshot,
    total_quantity: int,
    *,
    label: str = "Total modified quantity",
) -> None:
    if total_quantity < deal.min_qty_for_discount:
        raise CommitmentValidationError(
            f"{label} ({total_quantity}) must be at least {deal.min_qty_for_discount}"
        )


def validate_commitment_request(
    deal: DealSnapshot,
    requests: Sequence[SizeRequest],
    *,
    now_utc: datetime,
) -> list[SizeRequest]:
    checked = validate_size_requests(requests)
    ensure_commitment_window_open(deal, now_utc=now_utc)
    ensure_sizes_offered(deal, (request.size for request in checked))
    return checked
