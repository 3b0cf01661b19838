"""
Image upload service.

Stores an uploaded image and swaps it in for the previous reference of a
group, expense or user. The previous file is deleted only after the new
reference commits; the new file is deleted again if the swap fails.
"""

import logging
from functools import partial
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.activity.models import ActivityType
from apps.activity.services import record_activity
from apps.expenses.models import Expense
from apps.expenses.services.exceptions import ExpenseNotFoundError
from apps.groups.exceptions import GroupNotFoundError, NotMemberError, ValidationError
from apps.groups.models import Group

from ..blobs import store_image, release_image

logger = logging.getLogger(__name__)


def _check_image(image) -> None:
    if image is None:
        raise ValidationError("No image provided.")
    content_type = getattr(image, 'content_type', '') or ''
    if not content_type.startswith('image/'):
        raise ValidationError("Only image files can be uploaded.")


def _replace_later(old_reference) -> None:
    if old_reference:
        transaction.on_commit(partial(release_image, old_reference))


def _get_member_group(group_id: UUID, user: User) -> Group:
    try:
        group = Group.objects.select_for_update().get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not group.has_member(user):
        raise NotMemberError("You must be a member of the group to modify this image.")
    return group


def upload_profile_image(*, user: User, image) -> str:
    """
    Replace the profile image of a user.

    Returns:
        The new image reference

    Raises:
        ValidationError: If no image or a non-image file is given
    """
    _check_image(image)

    new_reference = None
    try:
        with transaction.atomic():
            old_reference = user.profile_image
            user.profile_image = new_reference = store_image('profile', image)
            user.save(update_fields=['profile_image'])
            _replace_later(old_reference)
    except Exception:
        release_image(new_reference)
        raise

    logger.info("Profile image of user %s updated", user.id)
    return new_reference


def upload_group_image(*, group_id: UUID, user: User, image) -> str:
    """
    Replace the image of a group (any member).

    Returns:
        The new image reference

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        ValidationError: If no image or a non-image file is given
    """
    _check_image(image)

    new_reference = None
    try:
        with transaction.atomic():
            group = _get_member_group(group_id, user)
            old_reference = group.image
            group.image = new_reference = store_image('group', image)
            group.save(update_fields=['image', 'updated_at'])
            _replace_later(old_reference)

            record_activity(
                group_id=group.id,
                activity_type=ActivityType.CHANGE_GROUP_IMAGE,
                author_id=user.id,
            )
    except Exception:
        release_image(new_reference)
        raise

    return new_reference


def upload_expense_image(*, group_id: UUID, expense_id: UUID, user: User, image) -> str:
    """
    Replace the image of an expense (any member of its group).

    Returns:
        The new image reference

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        ExpenseNotFoundError: If the expense is missing or in another group
        ValidationError: If no image or a non-image file is given
    """
    _check_image(image)

    new_reference = None
    try:
        with transaction.atomic():
            group = _get_member_group(group_id, user)
            try:
                expense = Expense.objects.select_for_update().get(id=expense_id, group=group)
            except Expense.DoesNotExist:
                raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")

            old_reference = expense.image
            expense.image = new_reference = store_image('expense', image)
            expense.save(update_fields=['image', 'updated_at'])
            _replace_later(old_reference)
    except Exception:
        release_image(new_reference)
        raise

    return new_reference
