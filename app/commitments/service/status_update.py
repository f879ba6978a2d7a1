from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments import messages
from app.commitments.constants import (
    AUDIT_INFO,
    NOTIFICATION_TYPE_COMMITMENT,
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    RELATED_KIND_COMMITMENT,
    SUBTYPE_COMMITMENT_STATUS_CHANGED,
)
from app.commitments.errors import CommitmentForbiddenError
from app.commitments.reconciliation import reconcile_deal_pricing
from app.commitments.transitions import (
    TransitionKind,
    build_distributor_override,
    override_total,
    parse_status,
    resolve_transition,
)
from app.commitments.types import (
    AuthContext,
    CommitmentStatus,
    DealSnapshot,
    OverrideLine,
    Role,
    SizeLine,
    StatusUpdateResult,
    to_money,
)
from app.db.models.commitments import Commitment
from app.db.models.deals import Deal
from app.db.models.users import User
from app.db.repo.commitments_repo import CommitmentsRepo
from app.services.audit_log import append_log
from app.services.outbox import OutboxService

from .journal import _settle
from .loading import _load_member, _lock_commitment_with_deal

logger = structlog.get_logger("app.commitments.service")


def _ensure_can_update_status(auth: AuthContext, deal: Deal) -> None:
    if auth.role == Role.ADMIN:
        return
    if auth.role == Role.DISTRIBUTOR and deal.distributor_id == auth.user_id:
        return
    raise CommitmentForbiddenError("Only the deal's distributor can update commitment status")


async def _emit_status_side_effects(
    session: AsyncSession,
    *,
    commitment: Commitment,
    deal: Deal,
    member: User,
    old_status: str,
    distributor_response: str,
) -> None:
    original_lines = [SizeLine.from_json(raw) for raw in commitment.size_commitments]
    original_details = messages.describe_lines(original_lines, with_tier=True)
    modified_details: str | None = None
    modified_total = None
    if commitment.modified_by_distributor:
        modified_lines = [
            OverrideLine(
                size=str(raw["size"]),
                quantity=int(raw["quantity"]),
                price_per_unit=to_money(raw["pricePerUnit"]),
                total_price=to_money(raw["totalPrice"]),
            )
            for raw in commitment.modified_size_commitments
        ]
        modified_details = messages.describe_lines(modified_lines)
        modified_total = to_money(commitment.modified_total_price or 0)
    total = to_money(commitment.total_price)
    status = commitment.status

    await append_log(
        session,
        message=messages.status_log_message(
            deal_name=deal.name,
            member_name=member.name,
            old_status=old_status,
            new_status=status,
            original_details=original_details,
            total_price=total,
            modified_details=modified_details,
            modified_total_price=modified_total,
        ),
        severity=AUDIT_INFO,
        user_id=member.id,
    )
    await OutboxService.enqueue_notification(
        session,
        recipient_id=member.id,
        sender_id=deal.distributor_id,
        type=NOTIFICATION_TYPE_COMMITMENT,
        sub_type=SUBTYPE_COMMITMENT_STATUS_CHANGED,
        title="Commitment Status Updated",
        message=messages.status_member_message(
            deal_name=deal.name,
            status=status,
            distributor_response=distributor_response,
            modified_details=modified_details,
        ),
        related_id=str(commitment.id),
        related_kind=RELATED_KIND_COMMITMENT,
        priority=PRIORITY_HIGH,
    )
    await OutboxService.enqueue_role_notification(
        session,
        role=Role.ADMIN.value,
        sender_id=deal.distributor_id,
        type=NOTIFICATION_TYPE_COMMITMENT,
        sub_type=SUBTYPE_COMMITMENT_STATUS_CHANGED,
        title="Commitment Status Changed",
        message=messages.status_admin_message(deal_name=deal.name, member_name=member.name, status=status),
        related_id=str(commitment.id),
        related_kind=RELATED_KIND_COMMITMENT,
        priority=PRIORITY_MEDIUM,
    )
    if member.email:
        subject, body = messages.status_email(
            deal_name=deal.name,
            status=status,
            original_details=original_details,
            total_price=total,
            modified_details=modified_details,
            modified_total_price=modified_total,
            distributor_response=distributor_response,
        )
        await OutboxService.enqueue_email(session, to=member.email, subject=subject, body=body)
    if member.phone:
        if modified_details is not None and modified_total is not None:
            details = f"Modified: {modified_details}, Total: {messages.format_money(modified_total)}"
        else:
            details = f"{original_details}, Total: {messages.format_money(total)}"
        await OutboxService.enqueue_sms(
            session,
            phone=member.phone,
            message=messages.status_sms(deal_name=deal.name, status=status, details=details),
        )


async def update_commitment_status(
    session: AsyncSession,
    *,
    auth: AuthContext,
    commitment_id: UUID,
    status: object,
    distributor_response: str | None = None,
    modified_size_commitments: Sequence[Any] | None = None,
    now_utc: datetime | None = None,
) -> StatusUpdateResult:
    now_utc = now_utc or datetime.now(timezone.utc)
    target = parse_status(status)

    commitment, deal = await _lock_commitment_with_deal(session, commitment_id)
    _ensure_can_update_status(auth, deal)
    old_status = commitment.status
    kind = resolve_transition(CommitmentStatus(old_status), target)

    if kind == TransitionKind.REPLAY:
        logger.info(
            "commitment_status_replayed",
            commitment_id=str(commitment.id),
            status=target.value,
        )
        return StatusUpdateResult(commitment=commitment, previous_status=old_status, idempotent_replay=True)

    snapshot = DealSnapshot.from_model(deal)
    if modified_size_commitments:
        override = build_distributor_override(snapshot, modified_size_commitments)
        commitment.modified_size_commitments = [line.to_json() for line in override]
        commitment.modified_total_price = override_total(override)
        commitment.modified_by_distributor = True

    member = await _load_member(session, commitment.user_id)
    commitment.status = target.value
    commitment.distributor_response = distributor_response or commitment.distributor_response
    commitment.updated_at = now_utc

    if kind == TransitionKind.SETTLE and commitment.settled_at is None:
        _settle(commitment, deal, now_utc=now_utc)
    await session.flush()

    if kind == TransitionKind.CANCEL:
        remaining = await CommitmentsRepo.find_active_for_deal(session, deal.id)
        await reconcile_deal_pricing(
            session,
            deal=snapshot,
            commitments=remaining,
            triggering_commitment_id=commitment.id,
        )

    await _emit_status_side_effects(
        session,
        commitment=commitment,
        deal=deal,
        member=member,
        old_status=old_status,
        distributor_response=distributor_response or "",
    )
    await session.flush()

    logger.info(
        "commitment_status_updated",
        commitment_id=str(commitment.id),
        deal_id=str(deal.id),
        old_status=old_status,
        new_status=target.value,
        modified_by_distributor=commitment.modified_by_distributor,
    )
    return StatusUpdateResult(commitment=commitment, previous_status=old_status, idempotent_replay=False)
