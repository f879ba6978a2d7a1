class CommitmentError(Exception):
    pass


class CommitmentValidationError(CommitmentError):
    pass


class CommitmentNotFoundError(CommitmentError):
    pass


class DealNotFoundError(CommitmentNotFoundError):
    pass


class MemberNotFoundError(CommitmentNotFoundError):
    pass


class DistributorNotFoundError(CommitmentNotFoundError):
    pass


class CommitmentForbiddenError(CommitmentError):
    pass
