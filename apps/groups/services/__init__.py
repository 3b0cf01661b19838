"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from ..exceptions import (
    LedgerServiceError,
    ValidationError,
    NotFoundError,
    GroupNotFoundError,
    NotMemberError,
    AlreadyMemberError,
    ConflictError,
)

from .group_management import (
    create_group,
    update_group,
    get_group_by_id,
    list_user_groups,
)

from .membership_management import (
    LeaveResult,
    is_member,
    join_group,
    leave_group,
    get_group_members,
)


__all__ = [
    # Exceptions
    'LedgerServiceError',
    'ValidationError',
    'NotFoundError',
    'GroupNotFoundError',
    'NotMemberError',
    'AlreadyMemberError',
    'ConflictError',

    # Group Management
    'create_group',
    'update_group',
    'get_group_by_id',
    'list_user_groups',

    # Membership Management
    'LeaveResult',
    'is_member',
    'join_group',
    'leave_group',
    'get_group_members',
]
