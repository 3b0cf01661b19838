"""
Group management service.

Handles group creation, lookup and renaming with proper transaction safety.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import Prefetch, QuerySet

from apps.accounts.models import User
from apps.activity.models import ActivityType
from apps.activity.services import record_activity
from apps.groups.models import Group, GroupMembership, generate_join_code

from ..exceptions import (
    GroupNotFoundError,
    NotMemberError,
    ValidationError,
    ConflictError,
)

logger = logging.getLogger(__name__)


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("The group name is required and must be a valid string.")
    return name.strip()


def _clean_description(description) -> str:
    if not isinstance(description, str):
        raise ValidationError("The description must be a character string.")
    return description


def create_group(
    *,
    name: str,
    owner: User,
    description: str = '',
    max_retries: int = 5
) -> Group:
    """
    Create a new group and add the creator as its only member and owner.

    This is a multi-step operation wrapped in a transaction:
    1. Generate a join code
    2. Create the group
    3. Create owner membership
    4. Record the createGroup activity entry

    Args:
        name: Group name (non-blank)
        owner: User who creates and will own the group
        description: Optional group description
        max_retries: Maximum attempts to generate a unique join code

    Returns:
        Created Group instance

    Raises:
        ValidationError: If name is blank or not a string
        ConflictError: If no unique join code was found after retries
    """
    name = _clean_name(name)
    description = _clean_description(description if description is not None else '')

    # Retry logic outside transaction to handle join code collisions
    for attempt in range(max_retries):
        join_code = generate_join_code()

        try:
            # Each attempt is a separate transaction
            with transaction.atomic():
                group = Group.objects.create(
                    name=name,
                    owner=owner,
                    description=description,
                    join_code=join_code
                )

                GroupMembership.objects.create(user=owner, group=group)

                record_activity(
                    group_id=group.id,
                    activity_type=ActivityType.CREATE_GROUP,
                    author_id=owner.id,
                    context={'group_name': group.name},
                )

            logger.info("Group %s created by %s", group.id, owner.id)
            return group

        except IntegrityError:
            # Join code collision; six base-36 characters do collide eventually
            logger.warning("Join code collision on attempt %d", attempt + 1)
            continue

    raise ConflictError(
        f"Failed to generate unique join code after {max_retries} attempts"
    )


def get_group_by_id(*, group_id: UUID) -> Group:
    """
    Get a group by ID with owner and members prefetched.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    try:
        return (
            Group.objects
            .select_related('owner')
            .prefetch_related(
                Prefetch(
                    'memberships',
                    queryset=GroupMembership.objects.select_related('user').order_by('joined_at')
                )
            )
            .get(id=group_id)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


def list_user_groups(*, user: User) -> QuerySet[Group]:
    """All groups the user is currently a member of."""
    return (
        Group.objects
        .filter(memberships__user=user)
        .select_related('owner')
        .prefetch_related(
            Prefetch(
                'memberships',
                queryset=GroupMembership.objects.select_related('user').order_by('joined_at')
            )
        )
        .distinct()
    )


@transaction.atomic
def update_group(
    *,
    group_id: UUID,
    user: User,
    name: Optional[str] = None,
    description: Optional[str] = None
) -> Group:
    """
    Rename a group and/or change its description (any member).

    Uses select_for_update to prevent concurrent modifications. Only the
    supplied fields are written, and an activity entry is recorded for each
    field whose value actually changed.

    Args:
        group_id: UUID of the group
        user: Member performing the update
        name: New name (optional, must not be blank)
        description: New description (optional, may be empty)

    Returns:
        Updated Group instance

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        ValidationError: If name is blank or a field is not a string
    """
    try:
        group = (
            Group.objects
            .select_for_update()
            .get(id=group_id)
        )
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.has_member(user):
        raise NotMemberError("You must be a member of this group to update it.")

    if name is not None:
        name = _clean_name(name)
    if description is not None:
        description = _clean_description(description)

    update_fields = ['updated_at']
    name_changed = name is not None and name != group.name
    description_changed = description is not None and description != group.description

    if name is not None:
        group.name = name
        update_fields.append('name')

    if description is not None:
        group.description = description
        update_fields.append('description')

    group.save(update_fields=update_fields)

    if name_changed:
        record_activity(
            group_id=group.id,
            activity_type=ActivityType.CHANGE_GROUP_NAME,
            author_id=user.id,
            context={'new_name': group.name},
        )

    if description_changed:
        record_activity(
            group_id=group.id,
            activity_type=ActivityType.CHANGE_GROUP_DESCRIPTION,
            author_id=user.id,
        )

    return group
