"""Account management service."""

import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from .account_validation import clean_email, clean_username, ensure_available
from .exceptions import AccountTakenError, InvalidAccountDataError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def update_profile(
    *,
    user: User,
    username: Optional[str] = None,
    email: Optional[str] = None
) -> User:
    """
    Change the username and/or email of a user.

    Activity entries already written keep the username they were rendered
    with; only new entries and reminders use the new one.

    Args:
        user: User to update
        username: New username, if changing
        email: New login email, if changing

    Returns:
        Updated User instance

    Raises:
        InvalidAccountDataError: If nothing is supplied or a field is malformed
        AccountTakenError: If another account uses the username or email
    """
    if username is None and email is None:
        raise InvalidAccountDataError("Nothing to update.")

    account = User.objects.select_for_update().get(id=user.id)

    changes = {}
    if username is not None:
        changes['username'] = clean_username(username)
    if email is not None:
        changes['email'] = clean_email(email)
    ensure_available(exclude_id=account.id, **changes)

    for name, value in changes.items():
        setattr(account, name, value)
    try:
        with transaction.atomic():
            account.save(update_fields=list(changes))
    except IntegrityError:
        raise AccountTakenError("An account with this email or username already exists.")

    logger.info("Profile of user %s updated: %s", account.id, ", ".join(sorted(changes)))
    return account
