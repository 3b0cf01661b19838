from typing import Any, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email

from .exceptions import AccountTakenError, InvalidAccountDataError

User = get_user_model()

USERNAME_MAX_LENGTH = 150


def clean_email(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidAccountDataError("The email is required.")
    value = User.objects.normalize_email(value.strip())
    try:
        validate_email(value)
    except DjangoValidationError:
        raise InvalidAccountDataError("Enter a valid email address.")
    return value


def clean_username(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidAccountDataError("The username is required.")
    value = value.strip()
    if len(value) > USERNAME_MAX_LENGTH:
        raise InvalidAccountDataError(
            f"The username can have at most {USERNAME_MAX_LENGTH} characters."
        )
    return value


def ensure_available(*, email: Optional[str] = None, username: Optional[str] = None,
                     exclude_id=None) -> None:
    """
    Raises:
        AccountTakenError: If another account uses the email or username
    """
    others = User.objects.exclude(id=exclude_id) if exclude_id else User.objects.all()
    if email is not None and others.filter(email__iexact=email).exists():
        raise AccountTakenError("An account with this email already exists.")
    if username is not None and others.filter(username__iexact=username).exists():
        raise AccountTakenError("This username is already taken.")
