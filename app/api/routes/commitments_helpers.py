from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

import structlog
from fastapi import HTTPException, Request

from app.commitments.errors import (
    CommitmentError,
    CommitmentForbiddenError,
    CommitmentNotFoundError,
    CommitmentValidationError,
)
from app.commitments.types import AuthContext, Role, to_money
from app.core.config import get_settings
from app.services.internal_auth import is_internal_request_authenticated

from .commitments_models import (
    CommitmentResponse,
    DealResponse,
    DiscountTierResponse,
    SizeCommitmentResponse,
)

logger = structlog.get_logger(__name__)
INTERNAL_ERROR_MESSAGE = "An error occurred while processing your request"
INTERNAL_ERROR_DETAIL = {"code": "E_INTERNAL", "message": INTERNAL_ERROR_MESSAGE}


def _optional_int_header(request: Request, name: str) -> int | None:
    raw = request.headers.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail={"code": "E_UNAUTHENTICATED"}) from exc


def _resolve_auth_context(request: Request) -> AuthContext:
    settings = get_settings()
    if not is_internal_request_authenticated(request, expected_token=settings.internal_api_token):
        logger.warning("commitments_auth_failed", reason="invalid_internal_token")
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    user_id = _optional_int_header(request, "X-User-Id")
    if user_id is None:
        raise HTTPException(status_code=401, detail={"code": "E_UNAUTHENTICATED"})
    try:
        role = Role(request.headers.get("X-User-Role", ""))
    except ValueError as exc:
        raise HTTPException(status_code=401, detail={"code": "E_UNAUTHENTICATED"}) from exc
    return AuthContext(
        user_id=user_id,
        role=role,
        impersonator_id=_optional_int_header(request, "X-Impersonator-Id"),
    )


def _parse_uuid(value: object, *, field: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise HTTPException(
            status_code=400,
            detail={"code": "E_VALIDATION", "message": f"{field} is not a valid id"},
        ) from exc


def _raise_domain_error(exc: CommitmentError) -> NoReturn:
    if isinstance(exc, CommitmentValidationError):
        raise HTTPException(status_code=400, detail={"code": "E_VALIDATION", "message": str(exc)}) from exc
    if isinstance(exc, CommitmentNotFoundError):
        raise HTTPException(status_code=404, detail={"code": "E_NOT_FOUND", "message": str(exc)}) from exc
    if isinstance(exc, CommitmentForbiddenError):
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN", "message": str(exc)}) from exc
    raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL) from exc


def _money(value: Any) -> float:
    return float(to_money(value))


def _size_line_response(raw: dict[str, Any]) -> SizeCommitmentResponse:
    raw_tier = raw.get("appliedDiscountTier")
    tier = None
    if raw_tier:
        tier = DiscountTierResponse(
            tier_quantity=int(raw_tier["tierQuantity"]),
            tier_discount=_money(raw_tier["tierDiscount"]),
        )
    original = raw.get("originalPricePerUnit")
    return SizeCommitmentResponse(
        size=str(raw["size"]),
        quantity=int(raw["quantity"]),
        price_per_unit=_money(raw["pricePerUnit"]),
        original_price_per_unit=_money(original) if original is not None else None,
        total_price=_money(raw["totalPrice"]),
        applied_discount_tier=tier,
    )


def _commitment_response(commitment: Any) -> CommitmentResponse:
    return CommitmentResponse(
        id=commitment.id,
        user_id=int(commitment.user_id),
        deal_id=commitment.deal_id,
        size_commitments=[_size_line_response(raw) for raw in commitment.size_commitments or ()],
        total_price=_money(commitment.total_price),
        status=str(commitment.status),
        distributor_response=commitment.distributor_response or "",
        modified_by_distributor=bool(commitment.modified_by_distributor),
        modified_size_commitments=[
            _size_line_response(raw) for raw in commitment.modified_size_commitments or ()
        ],
        modified_total_price=(
            _money(commitment.modified_total_price) if commitment.modified_total_price is not None else None
        ),
        settled_at=commitment.settled_at,
        created_at=commitment.created_at,
        updated_at=commitment.updated_at,
    )


def _deal_response(deal: Any) -> DealResponse:
    return DealResponse(
        id=deal.id,
        name=deal.name,
        distributor_id=int(deal.distributor_id),
        min_qty_for_discount=int(deal.min_qty_for_discount or 0),
        status=str(deal.status),
        total_sold=int(deal.total_sold or 0),
        total_revenue=_money(deal.total_revenue or 0),
        commitment_start_at=deal.commitment_start_at,
        commitment_ends_at=deal.commitment_ends_at,
    )
