"""Reminder-specific exceptions, extending the ledger hierarchy."""

from datetime import timedelta
from typing import Optional

from apps.groups.exceptions import LedgerServiceError


class CooldownError(LedgerServiceError):
    """Raised when the debtor was reminded too recently."""

    def __init__(self, message: Optional[str] = None, retry_after: Optional[timedelta] = None):
        self.retry_after = retry_after
        super().__init__(message or "This member was already reminded recently.")


class NoDeviceError(LedgerServiceError):
    """Raised when the debtor has no registered notification device."""
    pass
