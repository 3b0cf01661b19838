"""
Membership management service.

Handles joining and leaving groups with concurrency protection. Every
mutation locks the group row first, so membership changes on one group
are applied one at a time: a group is never observed without members, and
its owner is always a current member.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.activity.models import ActivityType
from apps.activity.services import record_activity
from apps.groups.models import Group, GroupMembership

from ..exceptions import (
    GroupNotFoundError,
    AlreadyMemberError,
    NotMemberError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveResult:
    """Outcome of leave_group."""

    group_deleted: bool = False
    new_owner: Optional[User] = None


def is_member(*, group_id: UUID, user_id: UUID) -> bool:
    """Membership check used as the authorization gate of every group operation."""
    return GroupMembership.objects.filter(group_id=group_id, user_id=user_id).exists()


@transaction.atomic
def join_group(*, join_code: str, user: User) -> GroupMembership:
    """
    Join a group using its join code.

    Uses row-level locking to prevent race conditions when checking
    and creating memberships.

    Args:
        join_code: Code shared by the group's members
        user: User joining the group

    Returns:
        Created GroupMembership instance

    Raises:
        GroupNotFoundError: If no group has this join code
        AlreadyMemberError: If user is already a member (also caught from IntegrityError)
    """
    # Lock the group to prevent concurrent joins
    try:
        group = (
            Group.objects
            .select_for_update()
            .get(join_code=join_code)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError("Group not found")

    if group.has_member(user):
        raise AlreadyMemberError(f"You are already a member of {group.name}")

    try:
        with transaction.atomic():
            membership = GroupMembership.objects.create(user=user, group=group)
    except IntegrityError:
        # Database constraint caught duplicate membership
        raise AlreadyMemberError(f"You are already a member of {group.name}")

    record_activity(
        group_id=group.id,
        activity_type=ActivityType.JOIN_GROUP,
        author_id=user.id,
    )
    logger.info("User %s joined group %s", user.id, group.id)

    return membership


@transaction.atomic
def leave_group(*, group_id: UUID, user: User) -> LeaveResult:
    """
    Leave a group.

    Depending on who leaves, exactly one of three things happens:
    - a regular member leaves: a leaveGroup entry is recorded;
    - the owner leaves and others remain: ownership passes to the
      earliest-joined remaining member (lowest user id on ties) and a
      changeOwner entry is recorded for the surviving members;
    - the last member leaves: the group and everything in it is deleted.

    Args:
        group_id: UUID of the group
        user: User leaving the group

    Returns:
        LeaveResult describing which path was taken

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    try:
        group = (
            Group.objects
            .select_for_update()
            .get(id=group_id)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    deleted, _ = GroupMembership.objects.filter(group=group, user=user).delete()
    if not deleted:
        raise NotMemberError("You are not part of this group")

    if not group.is_owner(user):
        record_activity(
            group_id=group.id,
            activity_type=ActivityType.LEAVE_GROUP,
            author_id=user.id,
        )
        logger.info("User %s left group %s", user.id, group.id)
        return LeaveResult()

    successor = (
        GroupMembership.objects
        .filter(group=group)
        .select_related('user')
        .order_by('joined_at', 'user_id')
        .first()
    )

    if successor is None:
        # Cascades to expenses, splits and activity entries
        group.delete()
        logger.info("Group %s deleted after its last member %s left", group_id, user.id)
        return LeaveResult(group_deleted=True)

    group.owner = successor.user
    group.save(update_fields=['owner', 'updated_at'])

    record_activity(
        group_id=group.id,
        activity_type=ActivityType.CHANGE_OWNER,
        author_id=successor.user_id,
    )
    logger.info("Ownership of group %s passed from %s to %s",
                group.id, user.id, successor.user_id)

    return LeaveResult(new_owner=successor.user)


def get_group_members(*, group_id: UUID) -> QuerySet[GroupMembership]:
    """
    Get all members of a group in joining order.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    if not Group.objects.filter(id=group_id).exists():
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    return (
        GroupMembership.objects
        .filter(group_id=group_id)
        .select_related('user')
        .order_by('joined_at')
    )
