from __future__ import annotations

from uuid import UUID

import structlog

from app.commitments import messages
from app.commitments.constants import AUDIT_ERROR
from app.db.repo.commitments_repo import CommitmentsRepo
from app.db.repo.deals_repo import DealsRepo
from app.db.repo.users_repo import UsersRepo
from app.db.session import SessionLocal
from app.services.audit_log import append_log

logger = structlog.get_logger("app.commitments.service")


async def _lookup_names(
    *,
    user_id: int | None,
    deal_id: UUID | None,
    commitment_id: UUID | None,
) -> tuple[str | None, str | None]:
    deal_name: str | None = None
    actor_name: str | None = None
    try:
        async with SessionLocal() as session:
            if deal_id is None and commitment_id is not None:
                commitment = await CommitmentsRepo.get_by_id(session, commitment_id)
                deal_id = commitment.deal_id if commitment is not None else None
            if deal_id is not None:
                deal = await DealsRepo.get_by_id(session, deal_id)
                deal_name = deal.name if deal is not None else None
            if user_id is not None:
                actor = await UsersRepo.get_by_id(session, user_id)
                actor_name = actor.name if actor is not None else None
    except Exception:
        logger.warning(
            "failed_commitment_context_lookup_failed",
            deal_id=str(deal_id),
            commitment_id=str(commitment_id),
            user_id=user_id,
        )
    return actor_name, deal_name


async def record_failed_commitment(
    *,
    user_id: int | None,
    error: BaseException,
    deal_id: UUID | None = None,
    commitment_id: UUID | None = None,
    action: str | None = None,
) -> None:
    """Write an error audit entry outside the failed transaction. Never raises.

    Without ``action`` the entry describes a failed buy; otherwise it names the
    attempted action on an existing commitment, whose deal is found through
    ``commitment_id``.
    """
    actor_name, deal_name = await _lookup_names(user_id=user_id, deal_id=deal_id, commitment_id=commitment_id)
    if action is None:
        message = messages.failed_commitment_log_message(
            member_name=actor_name or "unknown user",
            deal_name=deal_name or "unknown deal",
            error=str(error),
        )
    else:
        message = messages.failed_commitment_action_log_message(
            action=action,
            actor_name=actor_name or "unknown user",
            deal_name=deal_name or "unknown deal",
            error=str(error),
        )
    try:
        async with SessionLocal.begin() as session:
            await append_log(
                session,
                message=message,
                severity=AUDIT_ERROR,
                user_id=user_id if actor_name is not None else None,
            )
    except Exception:
        logger.exception(
            "failed_commitment_audit_write_failed",
            deal_id=str(deal_id),
            commitment_id=str(commitment_id),
            user_id=user_id,
        )
