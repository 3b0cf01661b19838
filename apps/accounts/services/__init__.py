"""Services for accounts business logic."""

from .exceptions import (
    InvalidAccountDataError,
    AccountTakenError,
)
from .user_registration import register_user
from .account_management import update_profile

__all__ = [
    # Exceptions
    'InvalidAccountDataError',
    'AccountTakenError',
    # Services
    'register_user',
    'update_profile',
]
