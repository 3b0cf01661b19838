"""
Activity log service.

Append-only feed of what happened in a group. Entries are rendered from a
single template table keyed by ActivityType; braces around dynamic values
are kept in the content as highlight markers for clients. Notifications
are rendered from the same template without markers.

Recording is best effort: an entry that cannot be rendered or stored is
dropped and logged, never raised to the operation it accompanies.
"""

import logging
from functools import partial
from typing import Any, Mapping, Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction, DatabaseError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.activity.models import ActivityEntry, ActivityType
from apps.groups.exceptions import GroupNotFoundError, NotMemberError
from apps.groups.models import Group, GroupMembership
from apps.notifications.services import notify_group_members

logger = logging.getLogger(__name__)


ACTIVITY_TEMPLATES = {
    ActivityType.CREATE_GROUP: "I just created the group {group_name}!",
    ActivityType.JOIN_GROUP: "I just joined the group!",
    ActivityType.LEAVE_GROUP: "{author} left the group.",
    ActivityType.CHANGE_OWNER: "{author} is now the group owner.",
    ActivityType.CHANGE_GROUP_NAME: "I just changed the group name to {new_name}!",
    ActivityType.CHANGE_GROUP_IMAGE: "I just changed the group image.",
    ActivityType.CHANGE_GROUP_DESCRIPTION: "I just changed the group description.",
    ActivityType.ADD_EXPENSE: "I just added the expense {expense_name}.",
    ActivityType.EDIT_EXPENSE: "I just edited the expense {expense_name}.",
    ActivityType.DELETE_EXPENSE: "I just deleted the expense {expense_name}.",
    ActivityType.REMINDER: "I reminded {debtor} of a debt of {amount}.",
}

# Reminders push their own notification to the debtor
SILENT_TYPES = {ActivityType.REMINDER}

# Raised by lookups and inserts fed with a malformed id
_STORAGE_ERRORS = (DatabaseError, DjangoValidationError, ValueError, TypeError)


def render_content(
    activity_type: ActivityType,
    context: Mapping[str, Any],
    author: User,
    highlight: bool = True
) -> str:
    """
    Render the content of an entry.

    With highlight, every substituted value is wrapped in braces. Braces
    inside the values themselves are kept as they are.

    Raises:
        KeyError: If the context lacks a value the template needs
        TypeError: If the context is not a mapping
    """
    if not isinstance(context, Mapping):
        raise TypeError(f"Activity context must be a mapping, not {type(context).__name__}")
    values = {**context, 'author': author.username}
    if highlight:
        values = {key: f"{{{value}}}" for key, value in values.items()}
    return ACTIVITY_TEMPLATES[activity_type].format_map(values)


def record_activity(
    *,
    group_id: UUID,
    activity_type: str,
    author_id: UUID,
    context: Optional[Mapping[str, Any]] = None
) -> Optional[ActivityEntry]:
    """
    Append an entry to a group's activity feed.

    The entry is written in a savepoint, so it commits or rolls back with
    the caller's transaction, but a failure while writing it does not abort
    that transaction. Once the caller commits, the entry is pushed to the
    other members' devices.

    Args:
        group_id: UUID of the group
        activity_type: One of ActivityType
        author_id: UUID of the acting user
        context: Values the type's template needs

    Returns:
        The created ActivityEntry, or None if the entry was dropped
    """
    try:
        activity_type = ActivityType(activity_type)
    except ValueError:
        logger.warning("Dropped activity entry of unknown type %r", activity_type)
        return None

    if not group_id or not author_id:
        logger.warning("Dropped %s activity entry without group or author", activity_type)
        return None

    try:
        group_name = Group.objects.filter(id=group_id).values_list('name', flat=True).first()
        author = User.objects.filter(id=author_id).first()
    except _STORAGE_ERRORS as e:
        logger.warning("Dropped %s activity entry: lookup of group %r or author %r failed: %s",
                       activity_type, group_id, author_id, e)
        return None
    if group_name is None or author is None:
        logger.warning("Dropped %s activity entry: unknown group %s or author %s",
                       activity_type, group_id, author_id)
        return None

    try:
        content = render_content(activity_type, context or {}, author)
        body = render_content(activity_type, context or {}, author, highlight=False)
    except (KeyError, IndexError, ValueError, TypeError, AttributeError) as e:
        logger.warning("Dropped %s activity entry with malformed context: %s", activity_type, e)
        return None

    try:
        with transaction.atomic():
            entry = ActivityEntry.objects.create(
                group_id=group_id,
                type=activity_type,
                author=author,
                content=content,
            )
    except _STORAGE_ERRORS as e:
        logger.warning("Failed to store %s activity entry for group %s: %s",
                       activity_type, group_id, e)
        return None

    if activity_type not in SILENT_TYPES:
        transaction.on_commit(partial(
            notify_group_members,
            group_id=group_id,
            title=group_name,
            body=f"{author.username}: {body}",
            exclude_user_id=author.id,
        ))

    return entry


def get_group_activity(
    *,
    group_id: UUID,
    user: User,
    limit: Optional[int] = None
) -> QuerySet[ActivityEntry]:
    """
    Get a group's activity feed, newest first.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    if not Group.objects.filter(id=group_id).exists():
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not GroupMembership.objects.filter(group_id=group_id, user=user).exists():
        raise NotMemberError("You must be a member of this group to view its activity")

    entries = (
        ActivityEntry.objects
        .filter(group_id=group_id)
        .select_related('author')
        .order_by('-date')
    )
    if limit:
        entries = entries[:limit]
    return entries
