"""Group-wide notification fan-out (best effort)."""

import logging
from typing import Optional
from uuid import UUID

from apps.groups.models import GroupMembership

from .backends import NotificationMessage, send_notification
from .exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)


def notify_group_members(
    *,
    group_id: UUID,
    title: str,
    body: str,
    exclude_user_id: Optional[UUID] = None
) -> bool:
    """
    Push a message to every member of a group that has a device.

    Failures are logged and reported through the return value; they never
    propagate, since group notifications must not undo the mutation that
    triggered them.

    Returns:
        True if the transport accepted the message (or nobody had a device),
        False if it refused it.
    """
    memberships = (
        GroupMembership.objects
        .filter(group_id=group_id)
        .exclude(user__notification_token='')
        .select_related('user')
    )
    if exclude_user_id is not None:
        memberships = memberships.exclude(user_id=exclude_user_id)

    tokens = [m.user.notification_token for m in memberships]
    if not tokens:
        return True

    try:
        send_notification(NotificationMessage(
            title=title,
            body=body,
            tokens=tokens,
            data={'group_id': str(group_id)},
        ))
    except NotificationDeliveryError as e:
        logger.warning("Group notification for %s not delivered: %s", group_id, e)
        return False
    return True
