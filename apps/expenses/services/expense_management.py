"""
Expense management service.

Handles expenses and their per-participant splits. Every operation requires
the acting user to be a current member of the group; mutations lock the
group row and then the expense row, so writes on one expense serialize and a
split set is always replaced as a whole.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from functools import partial
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from django.db import transaction
from django.db.models import Prefetch, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.activity.models import ActivityType
from apps.activity.services import record_activity
from apps.expenses.models import Expense, ExpenseSplit, SplitType
from apps.groups.exceptions import GroupNotFoundError, NotMemberError, ValidationError
from apps.groups.models import Group, GroupMembership
from apps.uploads.blobs import release_image

from .exceptions import ExpenseNotFoundError, InvalidSplitError
from .split_allocation import allocate, check_shares_sum

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('amount', 'currency', 'label', 'type', 'split_type', 'date', 'image')
SPLIT_FIELDS = ('participant_ids', 'provided_values')


# ---------------------------------------------------------------------------
# Input cleaning
# ---------------------------------------------------------------------------

# Expense.amount is DecimalField(max_digits=12, decimal_places=2)
AMOUNT_MAX_INTEGER_DIGITS = 10
CENT = Decimal('0.01')


def _clean_amount(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError("The amount must be a number.")
    try:
        # Floats keep only their 12 significant digits, dropping binary noise
        raw = format(value, '.12g') if isinstance(value, float) else str(value)
        amount = Decimal(raw)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError("The amount must be a number.")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("The amount must be positive.")
    if amount.adjusted() >= AMOUNT_MAX_INTEGER_DIGITS:
        raise ValidationError("The amount is too large.")
    if amount != amount.quantize(CENT):
        raise ValidationError("The amount can have at most two decimal places.")
    return amount.quantize(CENT)


def _clean_text(value: Any, field: str, max_length: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"The {field} is required and must be a valid string.")
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"The {field} can have at most {max_length} characters.")
    return value


def _clean_currency(value: Any) -> str:
    currency = _clean_text(value, 'currency', 3).upper()
    if len(currency) != 3 or not currency.isalpha():
        raise ValidationError("The currency must be a three-letter code.")
    return currency


def _clean_split_type(value: Any) -> str:
    if value not in SplitType.values:
        raise ValidationError(
            f"The split type must be one of: {', '.join(SplitType.values)}."
        )
    return value


def _clean_date(value: Any) -> datetime:
    if not isinstance(value, datetime):
        raise ValidationError("The date must be a datetime.")
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def _clean_image(value: Any) -> Optional[str]:
    if value is None or value == '':
        return None
    return _clean_text(value, 'image reference', 255)


CLEANERS = {
    'amount': _clean_amount,
    'currency': _clean_currency,
    'label': lambda value: _clean_text(value, 'label', 200),
    'type': lambda value: _clean_text(value, 'type', 50),
    'split_type': _clean_split_type,
    'date': _clean_date,
    'image': _clean_image,
}


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def _get_group(group_id: UUID, *, user: User, lock: bool = False) -> Group:
    queryset = Group.objects.select_for_update() if lock else Group.objects.all()
    try:
        group = queryset.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if not GroupMembership.objects.filter(group=group, user=user).exists():
        raise NotMemberError("You must be a member of this group to manage its expenses.")
    return group


def _expense_queryset() -> QuerySet[Expense]:
    return (
        Expense.objects
        .select_related('payer')
        .prefetch_related(
            Prefetch(
                'splits',
                queryset=ExpenseSplit.objects.select_related('user').order_by('user__username')
            )
        )
    )


def _get_expense(group: Group, expense_id: UUID, *, lock: bool = False) -> Expense:
    queryset = Expense.objects.select_for_update() if lock else _expense_queryset()
    try:
        return queryset.get(id=expense_id, group=group)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense with ID {expense_id} not found")


def _clean_participants(group: Group, participant_ids: Sequence[Any]) -> List[UUID]:
    """
    Normalize participant ids and check they are all current members.

    Duplicates are left in place for allocate() to reject.
    """
    if isinstance(participant_ids, (str, bytes)) or not isinstance(participant_ids, Sequence):
        raise ValidationError("The participants must be a list of user ids.")
    try:
        ids = [pid if isinstance(pid, UUID) else UUID(str(pid)) for pid in participant_ids]
    except ValueError:
        raise ValidationError("The participants must be a list of user ids.")

    members = set(
        GroupMembership.objects
        .filter(group=group, user_id__in=ids)
        .values_list('user_id', flat=True)
    )
    for pid in ids:
        if pid not in members:
            raise NotMemberError(f"User {pid} is not a member of this group.")
    return ids


def _resolve_splits(
    amount: Decimal,
    split_type: str,
    participant_ids: List[UUID],
    provided_values: Optional[Mapping[Any, Any]]
) -> Dict[UUID, Decimal]:
    if provided_values is not None and not isinstance(provided_values, Mapping):
        raise InvalidSplitError("The provided values must map user ids to numbers.")

    shares = allocate(amount, split_type, participant_ids, provided_values)
    if split_type == SplitType.SHARES:
        check_shares_sum(amount, shares)
    return shares


def _write_splits(expense: Expense, shares: Mapping[UUID, Decimal]) -> None:
    stored_value = expense.split_type != SplitType.EQUAL
    ExpenseSplit.objects.bulk_create([
        ExpenseSplit(
            expense=expense,
            user_id=user_id,
            split_value=value if stored_value else None,
        )
        for user_id, value in shares.items()
    ])


def _enrich(expense: Expense) -> Expense:
    """Attach resolved split values and participant identities to an expense."""
    splits = list(expense.splits.all())

    if expense.split_type == SplitType.EQUAL:
        share = Decimal(expense.amount) / len(splits) if splits else Decimal('0')
        expense.split_values = {split.user_id: share for split in splits}
    else:
        expense.split_values = {split.user_id: split.split_value for split in splits}

    expense.participants = [
        {'id': split.user_id, 'username': split.user.username}
        for split in splits
    ]
    return expense


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

@transaction.atomic
def add_expense(
    *,
    group_id: UUID,
    user: User,
    amount: Any,
    currency: str,
    label: str,
    split_type: str,
    date: datetime,
    participant_ids: Sequence[Any],
    provided_values: Optional[Mapping[Any, Any]] = None,
    type: str = 'expense',
    payer_id: Optional[UUID] = None
) -> Expense:
    """
    Record an expense and split it among participants.

    The expense and one split row per participant are written in a single
    transaction.

    Args:
        group_id: UUID of the group
        user: Member recording the expense
        amount: Positive amount, at most two decimal places
        currency: Three-letter currency code
        label: Non-blank label
        split_type: equal, shares or amounts
        date: When the expense happened
        participant_ids: Current members sharing the expense
        provided_values: Value per participant for shares/amounts
        type: Free-form category
        payer_id: Member who paid (defaults to user)

    Returns:
        Created Expense with split_values and participants attached

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user, payer or a participant is not a member
        ValidationError: If a field is malformed
        InvalidSplitError: If the split cannot be allocated
    """
    group = _get_group(group_id, user=user, lock=True)

    amount = _clean_amount(amount)
    currency = _clean_currency(currency)
    label = CLEANERS['label'](label)
    expense_type = CLEANERS['type'](type)
    split_type = _clean_split_type(split_type)
    date = _clean_date(date)

    payer_id = payer_id or user.id
    if not GroupMembership.objects.filter(group=group, user_id=payer_id).exists():
        raise NotMemberError("The payer must be a member of this group.")

    participants = _clean_participants(group, participant_ids)
    shares = _resolve_splits(amount, split_type, participants, provided_values)

    expense = Expense.objects.create(
        group=group,
        payer_id=payer_id,
        amount=amount,
        currency=currency,
        label=label,
        type=expense_type,
        split_type=split_type,
        date=date,
    )
    _write_splits(expense, shares)

    record_activity(
        group_id=group.id,
        activity_type=ActivityType.ADD_EXPENSE,
        author_id=user.id,
        context={'expense_name': label},
    )
    logger.info("Expense %s added to group %s by %s", expense.id, group.id, user.id)

    return _enrich(_expense_queryset().get(id=expense.id))


def list_expenses(*, group_id: UUID, user: User) -> List[Expense]:
    """
    Get all expenses of a group in insertion order, each with its splits.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    group = _get_group(group_id, user=user)
    expenses = _expense_queryset().filter(group=group).order_by('created_at', 'id')
    return [_enrich(expense) for expense in expenses]


def get_expense(*, group_id: UUID, expense_id: UUID, user: User) -> Expense:
    """
    Get one expense with its splits.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        ExpenseNotFoundError: If the expense is missing or in another group
    """
    group = _get_group(group_id, user=user)
    return _enrich(_get_expense(group, expense_id))


@transaction.atomic
def update_expense(
    *,
    group_id: UUID,
    expense_id: UUID,
    user: User,
    **fields
) -> Expense:
    """
    Update the supplied fields of an expense.

    Scalar fields are validated like in add_expense. When participant_ids
    is supplied, the whole split set is deleted and rewritten in this
    transaction; provided_values alone reuses the current participants.
    A replaced image is released once the update commits.

    Args:
        group_id: UUID of the group
        expense_id: UUID of the expense
        user: Member performing the update
        **fields: Any of amount, currency, label, type, split_type, date,
            image, participant_ids, provided_values

    Returns:
        Updated Expense with split_values and participants attached

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user or a new participant is not a member
        ExpenseNotFoundError: If the expense is missing or in another group
        ValidationError: If nothing is supplied or a field is malformed
        InvalidSplitError: If the new split cannot be allocated
    """
    unknown = set(fields) - set(UPDATABLE_FIELDS) - set(SPLIT_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown expense fields: {', '.join(sorted(unknown))}.")
    if not fields:
        raise ValidationError("Nothing to update.")

    group = _get_group(group_id, user=user, lock=True)
    expense = _get_expense(group, expense_id, lock=True)

    previous_split_type = expense.split_type
    previous_image = expense.image
    cleaned = {
        name: CLEANERS[name](value)
        for name, value in fields.items()
        if name in UPDATABLE_FIELDS
    }
    for name, value in cleaned.items():
        setattr(expense, name, value)

    participant_ids = fields.get('participant_ids')
    provided_values = fields.get('provided_values')

    if participant_ids is not None or provided_values is not None:
        if participant_ids is not None:
            participants = _clean_participants(group, participant_ids)
        else:
            participants = list(
                expense.splits.order_by('user__username').values_list('user_id', flat=True)
            )
        shares = _resolve_splits(expense.amount, expense.split_type, participants, provided_values)
        expense.splits.all().delete()
        _write_splits(expense, shares)

    elif expense.split_type != previous_split_type:
        if expense.split_type != SplitType.EQUAL:
            raise InvalidSplitError(
                f"Switching to a {expense.split_type} split requires a value for every participant."
            )
        expense.splits.update(split_value=None)

    elif 'amount' in cleaned and expense.split_type == SplitType.SHARES:
        current = dict(expense.splits.values_list('user_id', 'split_value'))
        check_shares_sum(expense.amount, current)

    expense.save(update_fields=[*cleaned, 'updated_at'])

    if previous_image and previous_image != expense.image:
        transaction.on_commit(partial(release_image, previous_image))

    record_activity(
        group_id=group.id,
        activity_type=ActivityType.EDIT_EXPENSE,
        author_id=user.id,
        context={'expense_name': expense.label},
    )

    return _enrich(_expense_queryset().get(id=expense.id))


@transaction.atomic
def delete_expense(*, group_id: UUID, expense_id: UUID, user: User) -> None:
    """
    Delete an expense and its splits.

    The expense image, if any, is released once the deletion commits.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        ExpenseNotFoundError: If the expense is missing or in another group
    """
    group = _get_group(group_id, user=user, lock=True)
    expense = _get_expense(group, expense_id, lock=True)

    label, image = expense.label, expense.image
    expense.delete()

    record_activity(
        group_id=group.id,
        activity_type=ActivityType.DELETE_EXPENSE,
        author_id=user.id,
        context={'expense_name': label},
    )
    logger.info("Expense %s deleted from group %s by %s", expense_id, group.id, user.id)

    if image:
        transaction.on_commit(partial(release_image, image))
