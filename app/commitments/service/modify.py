from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments import messages
from app.commitments.constants import AUDIT_INFO
from app.commitments.errors import CommitmentValidationError
from app.commitments.pricing import pool_quantities, price_request
from app.commitments.reconciliation import reconcile_deal_pricing
from app.commitments.types import (
    AuthContext,
    CommitmentStatus,
    CommitmentWriteResult,
    DealSnapshot,
    PricedCommitment,
    total_price,
    total_quantity,
)
from app.commitments.validation import (
    ensure_minimum_quantity,
    parse_size_requests,
    validate_commitment_request,
)
from app.db.repo.commitments_repo import CommitmentsRepo
from app.services.audit_log import append_log

from .journal import _journal_daily_summary
from .loading import _ensure_owner, _load_impersonator, _load_member, _lock_commitment_with_deal

logger = structlog.get_logger("app.commitments.service")


async def modify_commitment_sizes(
    session: AsyncSession,
    *,
    auth: AuthContext,
    commitment_id: UUID,
    size_commitments: object,
    now_utc: datetime | None = None,
) -> CommitmentWriteResult:
    now_utc = now_utc or datetime.now(timezone.utc)
    requests = parse_size_requests(size_commitments)

    commitment, deal = await _lock_commitment_with_deal(session, commitment_id)
    _ensure_owner(auth, commitment)
    if commitment.status != CommitmentStatus.PENDING.value:
        raise CommitmentValidationError("Only pending commitments can be modified")

    snapshot = DealSnapshot.from_model(deal)
    requests = validate_commitment_request(snapshot, requests, now_utc=now_utc)
    ensure_minimum_quantity(
        snapshot,
        sum(request.quantity for request in requests),
        label="Total quantity",
    )
    member = await _load_member(session, commitment.user_id)

    # Client-supplied unit prices are ignored; the pool decides the price.
    active = await CommitmentsRepo.find_active_for_deal(session, deal.id)
    baseline = pool_quantities(
        (PricedCommitment.from_model(row) for row in active),
        exclude_commitment_id=commitment.id,
    )
    lines = price_request(snapshot, requests, baseline)
    price = total_price(lines)
    commitment.size_commitments = [line.to_json() for line in lines]
    commitment.total_price = price
    commitment.updated_at = now_utc
    await session.flush()

    plan = await reconcile_deal_pricing(
        session,
        deal=snapshot,
        commitments=active,
        triggering_commitment_id=commitment.id,
    )
    await _journal_daily_summary(session, commitment=commitment, deal=deal, now_utc=now_utc)

    impersonator = await _load_impersonator(session, auth)
    await append_log(
        session,
        message=messages.modify_log_message(
            deal_name=deal.name,
            member_name=member.name,
            member_email=member.email,
            details=messages.describe_lines(lines),
            total_price=price,
            impersonator_name=impersonator.name if impersonator is not None else None,
        ),
        severity=AUDIT_INFO,
        user_id=member.id,
    )
    deal.updated_at = now_utc
    await session.flush()

    logger.info(
        "commitment_sizes_modified",
        commitment_id=str(commitment.id),
        deal_id=str(deal.id),
        user_id=member.id,
        total_quantity=total_quantity(lines),
        repriced_commitments=len(plan.updates),
    )
    return CommitmentWriteResult(
        commitment=commitment,
        deal=deal,
        created=False,
        repriced_commitment_ids=[update.commitment_id for update in plan.updates],
    )
