from apps.notifications.backends import BaseNotificationBackend
from apps.notifications.exceptions import NotificationDeliveryError


class FailingBackend(BaseNotificationBackend):
    """Transport that refuses every message."""

    def send(self, message):
        raise NotificationDeliveryError("Gateway unavailable")
