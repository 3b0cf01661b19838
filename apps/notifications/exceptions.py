"""Exceptions raised by the notification transport."""

from apps.groups.exceptions import LedgerServiceError


class NotificationDeliveryError(LedgerServiceError):
    """Raised when the transport did not accept a message."""
    pass
