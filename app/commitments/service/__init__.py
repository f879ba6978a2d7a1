from __future__ import annotations

from .buy import commit_to_deal
from .cancel import cancel_commitment
from .failures import record_failed_commitment
from .modify import modify_commitment_sizes
from .queries import get_commitment_details, list_user_commitments
from .status_update import update_commitment_status


class CommitmentService:
    commit_to_deal = staticmethod(commit_to_deal)
    modify_commitment_sizes = staticmethod(modify_commitment_sizes)
    cancel_commitment = staticmethod(cancel_commitment)
    update_commitment_status = staticmethod(update_commitment_status)
    list_user_commitments = staticmethod(list_user_commitments)
    get_commitment_details = staticmethod(get_commitment_details)
    record_failed_commitment = staticmethod(record_failed_commitment)


__all__ = ["CommitmentService"]
