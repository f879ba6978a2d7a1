from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments import messages
from app.commitments.constants import AUDIT_INFO
from app.commitments.errors import CommitmentValidationError
from app.commitments.reconciliation import reconcile_deal_pricing
from app.commitments.types import AuthContext, CommitmentStatus, CommitmentWriteResult, DealSnapshot
from app.db.repo.commitments_repo import CommitmentsRepo
from app.services.audit_log import append_log

from .loading import _ensure_owner, _load_impersonator, _load_member, _lock_commitment_with_deal

logger = structlog.get_logger("app.commitments.service")


async def cancel_commitment(
    session: AsyncSession,
    *,
    auth: AuthContext,
    commitment_id: UUID,
    now_utc: datetime | None = None,
) -> CommitmentWriteResult:
    now_utc = now_utc or datetime.now(timezone.utc)
    commitment, deal = await _lock_commitment_with_deal(session, commitment_id)
    _ensure_owner(auth, commitment)
    if commitment.status != CommitmentStatus.PENDING.value:
        raise CommitmentValidationError("Only pending commitments can be cancelled")

    member = await _load_member(session, commitment.user_id)
    commitment.status = CommitmentStatus.CANCELLED.value
    commitment.updated_at = now_utc
    await session.flush()

    remaining = await CommitmentsRepo.find_active_for_deal(session, deal.id)
    plan = await reconcile_deal_pricing(
        session,
        deal=DealSnapshot.from_model(deal),
        commitments=remaining,
        triggering_commitment_id=commitment.id,
    )

    impersonator = await _load_impersonator(session, auth)
    await append_log(
        session,
        message=messages.cancel_log_message(
            deal_name=deal.name,
            member_name=member.name,
            impersonator_name=impersonator.name if impersonator is not None else None,
        ),
        severity=AUDIT_INFO,
        user_id=member.id,
    )
    deal.updated_at = now_utc
    await session.flush()

    logger.info(
        "commitment_cancelled",
        commitment_id=str(commitment.id),
        deal_id=str(deal.id),
        user_id=member.id,
        repriced_commitments=len(plan.updates),
    )
    return CommitmentWriteResult(
        commitment=commitment,
        deal=deal,
        created=False,
        repriced_commitment_ids=[update.commitment_id for update in plan.updates],
    )
