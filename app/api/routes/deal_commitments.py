from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Request, Response

from app.commitments.errors import CommitmentError
from app.commitments.service import CommitmentService
from app.db.session import SessionLocal

from .commitments_helpers import (
    INTERNAL_ERROR_DETAIL,
    _commitment_response,
    _deal_response,
    _parse_uuid,
    _raise_domain_error,
    _resolve_auth_context,
)
from .commitments_models import (
    BuyCommitmentRequest,
    BuyCommitmentResponse,
    CommitmentListResponse,
    CommitmentMessageResponse,
    CommitmentResponse,
    UpdateStatusRequest,
)

router = APIRouter(tags=["commitments"])
logger = structlog.get_logger(__name__)


@router.post("/deals/commitments/buy/{deal_id}", response_model=BuyCommitmentResponse)
async def buy_commitment(
    deal_id: str,
    payload: BuyCommitmentRequest,
    request: Request,
    response: Response,
) -> BuyCommitmentResponse:
    auth = _resolve_auth_context(request)
    parsed_deal_id = _parse_uuid(deal_id, field="dealId")
    try:
        async with SessionLocal.begin() as session:
            result = await CommitmentService.commit_to_deal(
                session,
                auth=auth,
                deal_id=parsed_deal_id,
                size_commitments=payload.size_commitments,
            )
            body = BuyCommitmentResponse(
                message="Successfully committed to the deal",
                commitment=_commitment_response(result.commitment),
                updated_deal=_deal_response(result.deal),
            )
    except CommitmentError as exc:
        _raise_domain_error(exc)
    except Exception as exc:
        logger.exception("commitment_buy_failed", deal_id=str(parsed_deal_id), user_id=auth.user_id)
        await CommitmentService.record_failed_commitment(
            user_id=auth.user_id,
            deal_id=parsed_deal_id,
            error=exc,
        )
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL) from exc

    response.status_code = 201 if result.created else 200
    return body


@router.put("/deals/commitments/update-status", response_model=CommitmentMessageResponse)
async def update_commitment_status(
    payload: UpdateStatusRequest,
    request: Request,
) -> CommitmentMessageResponse:
    auth = _resolve_auth_context(request)
    if payload.commitment_id is None or payload.status is None:
        raise HTTPException(
            status_code=400,
            detail={"code": "E_VALIDATION", "message": "commitmentId and status are required"},
        )
    commitment_id = _parse_uuid(payload.commitment_id, field="commitmentId")
    try:
        async with SessionLocal.begin() as session:
            result = await CommitmentService.update_commitment_status(
                session,
                auth=auth,
                commitment_id=commitment_id,
                status=payload.status,
                distributor_response=payload.distributor_response,
                modified_size_commitments=payload.modified_size_commitments,
            )
            body = CommitmentMessageResponse(
                message="Commitment status updated successfully",
                commitment=_commitment_response(result.commitment),
            )
    except CommitmentError as exc:
        _raise_domain_error(exc)
    except Exception as exc:
        logger.exception("commitment_status_update_failed", commitment_id=str(commitment_id))
        await CommitmentService.record_failed_commitment(
            user_id=auth.user_id,
            commitment_id=commitment_id,
            action="commitment status update",
            error=exc,
        )
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL) from exc
    return body


@router.get("/deals/commitments", response_model=CommitmentListResponse)
async def list_my_commitments(request: Request) -> CommitmentListResponse:
    auth = _resolve_auth_context(request)
    async with SessionLocal() as session:
        commitments = await CommitmentService.list_user_commitments(session, auth=auth)
        return CommitmentListResponse(
            commitments=[_commitment_response(commitment) for commitment in commitments]
        )


@router.get("/deals/commitments/details/{commitment_id}", response_model=CommitmentResponse)
async def get_commitment_details(commitment_id: str, request: Request) -> CommitmentResponse:
    auth = _resolve_auth_context(request)
    parsed_id = _parse_uuid(commitment_id, field="commitmentId")
    try:
        async with SessionLocal() as session:
            commitment = await CommitmentService.get_commitment_details(
                session,
                auth=auth,
                commitment_id=parsed_id,
            )
            return _commitment_response(commitment)
    except CommitmentError as exc:
        _raise_domain_error(exc)
