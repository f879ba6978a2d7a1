from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Request

from app.commitments.errors import CommitmentError
from app.commitments.service import CommitmentService
from app.db.session import SessionLocal

from .commitments_helpers import (
    INTERNAL_ERROR_DETAIL,
    _commitment_response,
    _parse_uuid,
    _raise_domain_error,
    _resolve_auth_context,
)
from .commitments_models import CommitmentMessageResponse, ModifySizesRequest

router = APIRouter(tags=["member", "commitments"])
logger = structlog.get_logger(__name__)


@router.put("/member/commitments/{commitment_id}/modify-sizes", response_model=CommitmentMessageResponse)
async def modify_commitment_sizes(
    commitment_id: str,
    payload: ModifySizesRequest,
    request: Request,
) -> CommitmentMessageResponse:
    auth = _resolve_auth_context(request)
    parsed_id = _parse_uuid(commitment_id, field="commitmentId")
    try:
        async with SessionLocal.begin() as session:
            result = await CommitmentService.modify_commitment_sizes(
                session,
                auth=auth,
                commitment_id=parsed_id,
                size_commitments=payload.size_commitments,
            )
            body = CommitmentMessageResponse(
                message="Commitment sizes updated successfully",
                commitment=_commitment_response(result.commitment),
            )
    except CommitmentError as exc:
        _raise_domain_error(exc)
    except Exception as exc:
        logger.exception("commitment_modify_failed", commitment_id=str(parsed_id), user_id=auth.user_id)
        await CommitmentService.record_failed_commitment(
            user_id=auth.user_id,
            commitment_id=parsed_id,
            action="commitment size change",
            error=exc,
        )
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL) from exc
    return body


@router.post("/member/commitments/{commitment_id}/cancel", response_model=CommitmentMessageResponse)
async def cancel_commitment(commitment_id: str, request: Request) -> CommitmentMessageResponse:
    auth = _resolve_auth_context(request)
    parsed_id = _parse_uuid(commitment_id, field="commitmentId")
    try:
        async with SessionLocal.begin() as session:
            result = await CommitmentService.cancel_commitment(
                session,
                auth=auth,
                commitment_id=parsed_id,
            )
            body = CommitmentMessageResponse(
                message="Commitment cancelled successfully",
                commitment=_commitment_response(result.commitment),
            )
    except CommitmentError as exc:
        _raise_domain_error(exc)
    except Exception as exc:
        logger.exception("commitment_cancel_failed", commitment_id=str(parsed_id), user_id=auth.user_id)
        await CommitmentService.record_failed_commitment(
            user_id=auth.user_id,
            commitment_id=parsed_id,
            action="commitment cancellation",
            error=exc,
        )
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL) from exc
    return body
