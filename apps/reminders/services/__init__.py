"""
Reminders app services layer.

Debt reminders are throttled per member through the last notification date
stored on their group membership.
"""

from .exceptions import (
    CooldownError,
    NoDeviceError,
)

from .reminder_throttle import (
    ReminderResult,
    compose_reminder_message,
    try_send_reminder,
)


__all__ = [
    'CooldownError',
    'NoDeviceError',
    'ReminderResult',
    'compose_reminder_message',
    'try_send_reminder',
]
