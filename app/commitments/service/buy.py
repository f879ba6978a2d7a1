from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments import messages
from app.commitments.constants import (
    AUDIT_SUCCESS,
    NOTIFICATION_TYPE_COMMITMENT,
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    RELATED_KIND_COMMITMENT,
    SUBTYPE_COMMITMENT_CREATED,
)
from app.commitments.pricing import pool_quantities, price_request
from app.commitments.reconciliation import reconcile_deal_pricing
from app.commitments.types import (
    AuthContext,
    CommitmentStatus,
    CommitmentWriteResult,
    DealSnapshot,
    PricedCommitment,
    Role,
    total_price,
    total_quantity,
)
from app.commitments.validation import parse_size_requests, validate_commitment_request
from app.db.repo.commitments_repo import CommitmentsRepo
from app.services.audit_log import append_log
from app.services.outbox import OutboxService

from .journal import _journal_daily_summary, _unsettle
from .loading import _load_deal_for_update, _load_distributor, _load_impersonator, _load_member

logger = structlog.get_logger("app.commitments.service")


async def commit_to_deal(
    session: AsyncSession,
    *,
    auth: AuthContext,
    deal_id: UUID,
    size_commitments: object,
    now_utc: datetime | None = None,
) -> CommitmentWriteResult:
    """Create or overwrite the acting member's commitment and re-price the deal's pool.

    Must run inside one transaction; the deal row lock serializes writers of the deal.
    """
    now_utc = now_utc or datetime.now(timezone.utc)
    requests = parse_size_requests(size_commitments)

    deal = await _load_deal_for_update(session, deal_id)
    member = await _load_member(session, auth.user_id)
    snapshot = DealSnapshot.from_model(deal)
    requests = validate_commitment_request(snapshot, requests, now_utc=now_utc)
    distributor = await _load_distributor(session, snapshot.distributor_id)

    existing = await CommitmentsRepo.find_active_by_user_and_deal(
        session,
        user_id=member.id,
        deal_id=deal.id,
    )
    active = await CommitmentsRepo.find_active_for_deal(session, deal.id)
    baseline = pool_quantities(
        (PricedCommitment.from_model(row) for row in active),
        exclude_commitment_id=existing.id if existing is not None else None,
    )
    lines = price_request(snapshot, requests, baseline)
    price = total_price(lines)
    payload = [line.to_json() for line in lines]

    if existing is not None:
        commitment = existing
        _unsettle(commitment, deal)
        commitment.size_commitments = payload
        commitment.total_price = price
        commitment.status = CommitmentStatus.PENDING.value
        commitment.modified_by_distributor = False
        commitment.modified_size_commitments = []
        commitment.modified_total_price = None
        commitment.updated_at = now_utc
        created = False
    else:
        commitment = await CommitmentsRepo.create(
            session,
            user_id=member.id,
            deal_id=deal.id,
            size_commitments=payload,
            total_price=price,
            now_utc=now_utc,
        )
        active = [*active, commitment]
        created = True
    await session.flush()

    plan = await reconcile_deal_pricing(
        session,
        deal=snapshot,
        commitments=active,
        triggering_commitment_id=commitment.id,
    )
    await _journal_daily_summary(session, commitment=commitment, deal=deal, now_utc=now_utc)

    quantity = total_quantity(lines)
    impersonator = await _load_impersonator(session, auth)
    await append_log(
        session,
        message=messages.commitment_log_message(
            deal_name=deal.name,
            member_name=member.name,
            member_email=member.email,
            total_quantity=quantity,
            total_price=price,
            impersonator_name=impersonator.name if impersonator is not None else None,
            impersonator_email=impersonator.email if impersonator is not None else None,
        ),
        severity=AUDIT_SUCCESS,
        user_id=member.id,
    )
    await OutboxService.enqueue_notification(
        session,
        recipient_id=distributor.id,
        sender_id=member.id,
        type=NOTIFICATION_TYPE_COMMITMENT,
        sub_type=SUBTYPE_COMMITMENT_CREATED,
        title="New Deal Commitment",
        message=messages.commitment_created_for_distributor(
            member_name=member.name,
            deal_name=deal.name,
            total_quantity=quantity,
            total_price=price,
            details=messages.describe_lines(lines, with_tier=True),
        ),
        related_id=str(commitment.id),
        related_kind=RELATED_KIND_COMMITMENT,
        priority=PRIORITY_HIGH,
    )
    await OutboxService.enqueue_role_notification(
        session,
        role=Role.ADMIN.value,
        sender_id=member.id,
        type=NOTIFICATION_TYPE_COMMITMENT,
        sub_type=SUBTYPE_COMMITMENT_CREATED,
        title="New Deal Commitment",
        message=messages.commitment_created_for_admins(
            member_name=member.name,
            deal_name=deal.name,
            distributor_name=distributor.business_name or distributor.name,
            total_quantity=quantity,
        ),
        related_id=str(commitment.id),
        related_kind=RELATED_KIND_COMMITMENT,
        priority=PRIORITY_MEDIUM,
    )
    deal.updated_at = now_utc
    await session.flush()

    logger.info(
        "commitment_created" if created else "commitment_overwritten",
        commitment_id=str(commitment.id),
        deal_id=str(deal.id),
        user_id=member.id,
        impersonator_id=auth.impersonator_id,
        total_quantity=quantity,
        repriced_commitments=len(plan.updates),
    )
    return CommitmentWriteResult(
        commitment=commitment,
        deal=deal,
        created=created,
        repriced_commitment_ids=[update.commitment_id for update in plan.updates],
    )
