"""Expense-specific exceptions, extending the ledger hierarchy."""

from apps.groups.exceptions import LedgerServiceError, NotFoundError


class ExpenseNotFoundError(NotFoundError):
    """Raised when an expense does not exist or belongs to another group."""
    pass


class InvalidSplitError(LedgerServiceError):
    """Raised when participants or provided values cannot be allocated."""
    pass
