"""
Domain-specific exceptions for the ledger.

The groups app owns the root of the hierarchy; the expenses, reminders and
notifications apps extend it. These exceptions represent business rule violations and
should be caught in views and converted to appropriate HTTP responses.
"""


class LedgerServiceError(Exception):
    """Base exception for all ledger service errors."""
    pass


class ValidationError(LedgerServiceError):
    """Raised when input is malformed (blank name, non-positive amount...)."""
    pass


class NotFoundError(LedgerServiceError):
    """Raised when a referenced record does not exist."""
    pass


class GroupNotFoundError(NotFoundError):
    """Raised when a group does not exist or no group has the join code."""
    pass


class NotMemberError(LedgerServiceError):
    """Raised when a user tries to perform an action requiring membership."""
    pass


class AlreadyMemberError(LedgerServiceError):
    """Raised when a user tries to join a group they're already in."""
    pass


class ConflictError(LedgerServiceError):
    """Raised when a concurrent mutation prevented the operation; retry it."""
    pass
