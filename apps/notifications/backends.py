"""
Push notification backends.

The ledger hands a message and its destination tokens to the configured
backend (``NOTIFICATION_BACKEND``). Delivery and retries are the transport's
concern; a backend either accepts the message or raises
NotificationDeliveryError.

Backends:
    LoggingBackend: writes messages to the log (development default).
    LocmemBackend: keeps messages in ``outbox`` (tests).
    WebhookBackend: POSTs messages as JSON to ``NOTIFICATION_WEBHOOK_URL``.
"""

import logging
from dataclasses import dataclass, field
from typing import List

import httpx
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from .exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationMessage:
    title: str
    body: str
    tokens: List[str] = field(default_factory=list)
    data: dict = field(default_factory=dict)

    def as_payload(self):
        return {
            'title': self.title,
            'body': self.body,
            'tokens': list(self.tokens),
            'data': dict(self.data),
        }


class BaseNotificationBackend:
    """Interface every transport backend implements."""

    def send(self, message: NotificationMessage) -> None:
        raise NotImplementedError('Notification backends must implement send()')


class LoggingBackend(BaseNotificationBackend):

    def send(self, message: NotificationMessage) -> None:
        logger.info(
            "Notification to %d device(s): %s | %s",
            len(message.tokens), message.title, message.body
        )


# Messages accepted by LocmemBackend, in send order
outbox: List[NotificationMessage] = []


class LocmemBackend(BaseNotificationBackend):

    def send(self, message: NotificationMessage) -> None:
        outbox.append(message)


class WebhookBackend(BaseNotificationBackend):
    """Forward messages to a push gateway over HTTP."""

    def __init__(self, url=None, timeout=None):
        self.url = url or settings.NOTIFICATION_WEBHOOK_URL
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT
        if not self.url:
            raise ImproperlyConfigured("NOTIFICATION_WEBHOOK_URL must be set to use WebhookBackend")

    def send(self, message: NotificationMessage) -> None:
        try:
            response = httpx.post(self.url, json=message.as_payload(), timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"Push gateway rejected the notification: {e}") from e


def get_backend() -> BaseNotificationBackend:
    return import_string(settings.NOTIFICATION_BACKEND)()


def send_notification(message: NotificationMessage) -> None:
    """
    Hand a message to the configured transport.

    Raises:
        NotificationDeliveryError: If there is no destination token or the
            transport refused the message. Not retried.
    """
    if not message.tokens:
        raise NotificationDeliveryError("No destination token for notification")
    get_backend().send(message)
