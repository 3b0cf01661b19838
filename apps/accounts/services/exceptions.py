"""Domain-specific exceptions for accounts services."""

from apps.groups.exceptions import ConflictError, ValidationError


class InvalidAccountDataError(ValidationError):
    """Raised when an email, username or password is rejected."""
    pass


class AccountTakenError(ConflictError):
    """Raised when the email or username already belongs to another account."""
    pass
