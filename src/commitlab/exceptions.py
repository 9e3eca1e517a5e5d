"""Exception hierarchy for commitment analysis."""


class CommitmentError(Exception):
    """Base exception for commitment analysis operations."""

    pass


class InvalidInputError(CommitmentError, ValueError):
    """Raised when a series or scalar parameter cannot be evaluated."""

    pass


class DegenerateNormalizationError(CommitmentError, ZeroDivisionError):
    """Raised when normalizing a series whose usage is zero everywhere."""

    pass
