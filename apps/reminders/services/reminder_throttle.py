"""
Debt reminder service.

A member can be reminded of their debts at most once per
REMINDER_COOLDOWN. The cooldown is consumed only when the notification
transport accepts the reminder: the debtor's membership row stays locked
from the cooldown check until the timestamp is written.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List, Mapping, Sequence, Tuple
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.activity.models import ActivityType
from apps.activity.services import record_activity
from apps.groups.exceptions import GroupNotFoundError, NotMemberError, ValidationError
from apps.groups.models import Group, GroupMembership
from apps.notifications.backends import NotificationMessage, send_notification

from .exceptions import CooldownError, NoDeviceError

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


@dataclass(frozen=True)
class ReminderResult:
    title: str
    body: str
    sent_at: datetime


def _clean_amounts_owed(amounts_owed: Sequence[Mapping[str, Any]]) -> List[Tuple[str, Decimal]]:
    """Validate [{'creditor': username, 'amount': number}, ...]."""
    if not amounts_owed:
        raise ValidationError("At least one amount owed is required.")

    entries = []
    for entry in amounts_owed:
        try:
            creditor = entry['creditor']
            amount = Decimal(str(entry['amount']))
        except (KeyError, TypeError, InvalidOperation, ValueError):
            raise ValidationError("Each amount owed needs a creditor and a numeric amount.")

        if not isinstance(creditor, str) or not creditor.strip():
            raise ValidationError("Each amount owed needs a creditor.")
        if not amount.is_finite() or amount <= 0:
            raise ValidationError("Amounts owed must be positive.")

        entries.append((creditor.strip(), amount))
    return entries


def format_amount(amount: Decimal) -> str:
    return str(amount.quantize(CENT, rounding=ROUND_HALF_UP))


def compose_reminder_message(amounts_owed: Sequence[Mapping[str, Any]]) -> str:
    """
    Body of a reminder: the total owed and the main creditor.

    The main creditor is the one owed the most; on ties the first one listed.

        >>> compose_reminder_message([{'creditor': 'bob', 'amount': 12}])
        'You owe 12.00 to bob!'
    """
    entries = _clean_amounts_owed(amounts_owed)
    total = sum((amount for _, amount in entries), Decimal('0'))

    top_creditor, top_amount = entries[0]
    for creditor, amount in entries[1:]:
        if amount > top_amount:
            top_creditor, top_amount = creditor, amount

    message = f"You owe {format_amount(total)} to {top_creditor}"
    others = len(entries) - 1
    if others == 1:
        message += " and 1 other"
    elif others > 1:
        message += f" and {others} others"
    return message + "!"


@transaction.atomic
def try_send_reminder(
    *,
    group_id: UUID,
    sender: User,
    debtor_id: UUID,
    amounts_owed: Sequence[Mapping[str, Any]]
) -> ReminderResult:
    """
    Remind a member of what they owe, unless they were reminded recently.

    Args:
        group_id: UUID of the group
        sender: Member sending the reminder
        debtor_id: UUID of the member being reminded
        amounts_owed: [{'creditor': username, 'amount': number}, ...]

    Returns:
        ReminderResult with the message that was sent

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If sender or debtor is not a member
        ValidationError: If amounts_owed is empty or malformed
        CooldownError: If the debtor was reminded less than REMINDER_COOLDOWN ago
        NoDeviceError: If the debtor has no registered device
        NotificationDeliveryError: If the transport refused the reminder;
            the cooldown is not consumed
    """
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.has_member(sender):
        raise NotMemberError("You must be a member of this group to send reminders.")

    # Lock the debtor's membership until the timestamp is written
    try:
        membership = (
            GroupMembership.objects
            .select_for_update()
            .get(group=group, user_id=debtor_id)
        )
    except GroupMembership.DoesNotExist:
        raise NotMemberError("The member you are reminding is not part of this group.")

    entries = _clean_amounts_owed(amounts_owed)
    body = compose_reminder_message(amounts_owed)

    now = timezone.now()
    cooldown = settings.REMINDER_COOLDOWN
    last_sent = membership.last_notification_date
    if last_sent is not None and now - last_sent < cooldown:
        raise CooldownError(
            "A reminder was already sent to this member recently.",
            retry_after=cooldown - (now - last_sent),
        )

    debtor = User.objects.get(id=debtor_id)
    if not debtor.has_device():
        raise NoDeviceError("This member has no device to receive reminders.")

    title = group.name
    # NotificationDeliveryError propagates before anything is written
    send_notification(NotificationMessage(
        title=title,
        body=body,
        tokens=[debtor.notification_token],
        data={'group_id': str(group.id), 'type': ActivityType.REMINDER.value},
    ))

    membership.last_notification_date = now
    membership.save(update_fields=['last_notification_date'])

    total = sum((amount for _, amount in entries), Decimal('0'))
    record_activity(
        group_id=group.id,
        activity_type=ActivityType.REMINDER,
        author_id=sender.id,
        context={'debtor': debtor.username, 'amount': format_amount(total)},
    )
    logger.info("User %s reminded %s in group %s", sender.id, debtor.id, group.id)

    return ReminderResult(title=title, body=body, sent_at=now)
