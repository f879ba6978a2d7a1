from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments.errors import (
    CommitmentForbiddenError,
    CommitmentNotFoundError,
    DealNotFoundError,
    DistributorNotFoundError,
    MemberNotFoundError,
)
from app.commitments.types import AuthContext, Role
from app.db.models.commitments import Commitment
from app.db.models.deals import Deal
from app.db.models.users import User
from app.db.repo.commitments_repo import CommitmentsRepo
from app.db.repo.deals_repo import DealsRepo
from app.db.repo.users_repo import UsersRepo


async def _load_deal_for_update(session: AsyncSession, deal_id: UUID) -> Deal:
    deal = await DealsRepo.get_by_id_for_update(session, deal_id)
    if deal is None:
        raise DealNotFoundError("Deal not found")
    return deal


async def _load_member(session: AsyncSession, user_id: int) -> User:
    member = await UsersRepo.get_by_id(session, user_id)
    if member is None:
        raise MemberNotFoundError("User not found")
    return member


async def _load_distributor(session: AsyncSession, distributor_id: int) -> User:
    distributor = await UsersRepo.get_by_id(session, distributor_id)
    if distributor is None:
        raise DistributorNotFoundError("Distributor not found")
    return distributor


async def _load_impersonator(session: AsyncSession, auth: AuthContext) -> User | None:
    if not auth.is_impersonating:
        return None
    return await UsersRepo.get_by_id(session, auth.impersonator_id)


async def _lock_commitment_with_deal(
    session: AsyncSession,
    commitment_id: UUID,
) -> tuple[Commitment, Deal]:
    """Lock the owning deal first, then the commitment row.

    Every writer takes the deal lock before touching commitments of that deal.
    """
    commitment = await CommitmentsRepo.get_by_id(session, commitment_id)
    if commitment is None:
        raise CommitmentNotFoundError("Commitment not found")
    deal = await _load_deal_for_update(session, commitment.deal_id)
    locked = await CommitmentsRepo.get_by_id_for_update(session, commitment_id)
    if locked is None:
        raise CommitmentNotFoundError("Commitment not found")
    return locked, deal


def _ensure_owner(auth: AuthContext, commitment: Commitment) -> None:
    if auth.role == Role.ADMIN:
        return
    if commitment.user_id != auth.user_id:
        raise CommitmentForbiddenError("You can only manage your own commitments")
