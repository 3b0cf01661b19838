"""User registration service."""

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from .account_validation import clean_email, clean_username, ensure_available
from .exceptions import AccountTakenError, InvalidAccountDataError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(*, email: str, username: str, password: str) -> User:
    """
    Register a new user.

    Args:
        email: Login email, unique case-insensitively
        username: Name shown in activity entries and reminders, unique
            case-insensitively
        password: Plain password, checked against AUTH_PASSWORD_VALIDATORS

    Returns:
        Created User instance

    Raises:
        InvalidAccountDataError: If a field is malformed or the password is weak
        AccountTakenError: If the email or username is already in use
    """
    email = clean_email(email)
    username = clean_username(username)
    if not isinstance(password, str) or not password:
        raise InvalidAccountDataError("The password is required.")
    try:
        validate_password(password, user=User(email=email, username=username))
    except DjangoValidationError as e:
        raise InvalidAccountDataError(" ".join(e.messages))

    ensure_available(email=email, username=username)

    try:
        with transaction.atomic():
            user = User.objects.create_user(email=email, username=username, password=password)
    except IntegrityError:
        # A concurrent registration took the email or username
        raise AccountTakenError("An account with this email or username already exists.")

    logger.info("User %s registered", user.id)
    return user
