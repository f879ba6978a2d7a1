from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.commitments.errors import CommitmentForbiddenError, CommitmentNotFoundError
from app.commitments.types import AuthContext, Role
from app.db.models.commitments import Commitment
from app.db.repo.commitments_repo import CommitmentsRepo
from app.db.repo.deals_repo import DealsRepo


async def list_user_commitments(session: AsyncSession, *, auth: AuthContext) -> list[Commitment]:
    return await CommitmentsRepo.list_by_user(session, user_id=auth.user_id)


async def get_commitment_details(
    session: AsyncSession,
    *,
    auth: AuthContext,
    commitment_id: UUID,
) -> Commitment:
    commitment = await CommitmentsRepo.get_by_id(session, commitment_id)
    if commitment is None:
        raise CommitmentNotFoundError("Commitment not found")
    if auth.role == Role.ADMIN or commitment.user_id == auth.user_id:
        return commitment
    if auth.role == Role.DISTRIBUTOR:
        deal = await DealsRepo.get_by_id(session, commitment.deal_id)
        if deal is not None and deal.distributor_id == auth.user_id:
            return commitment
    raise CommitmentForbiddenError("You can only view your own commitments")
