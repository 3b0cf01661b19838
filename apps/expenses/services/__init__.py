"""
Expenses app services layer.

Split allocation is pure; the expense ledger persists expenses and their
splits under group membership checks.
"""

from .exceptions import (
    ExpenseNotFoundError,
    InvalidSplitError,
)

from .split_allocation import (
    SPLIT_SUM_TOLERANCE,
    allocate,
    check_shares_sum,
)

from .expense_management import (
    add_expense,
    list_expenses,
    get_expense,
    update_expense,
    delete_expense,
)


__all__ = [
    # Exceptions
    'ExpenseNotFoundError',
    'InvalidSplitError',

    # Split Allocation
    'SPLIT_SUM_TOLERANCE',
    'allocate',
    'check_shares_sum',

    # Expense Management
    'add_expense',
    'list_expenses',
    'get_expense',
    'update_expense',
    'delete_expense',
]
