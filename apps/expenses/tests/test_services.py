"""
Service layer unit tests for expenses app.

Tests cover:
- Split allocation strategies
- Expense creation, reads and split replacement
- Membership checks and validation
"""

import pytest
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from uuid import uuid4

from apps.activity.models import ActivityEntry, ActivityType
from apps.expenses.models import Expense, ExpenseSplit
from apps.expenses.services import (
    SPLIT_SUM_TOLERANCE,
    allocate,
    add_expense,
    list_expenses,
    get_expense,
    update_expense,
    delete_expense,
    ExpenseNotFoundError,
    InvalidSplitError,
)
from apps.groups.exceptions import (
    GroupNotFoundError,
    NotFoundError,
    NotMemberError,
    ValidationError,
)
from apps.groups.services import create_group, join_group, leave_group

SPENT_AT = datetime(2024, 7, 14, 12, 30, tzinfo=dt_timezone.utc)


@pytest.fixture
def trip3(trip_with_bob, carol):
    """Trip with alice, bob and carol."""
    join_group(join_code=trip_with_bob.join_code, user=carol)
    return trip_with_bob


def add(group, user, **overrides):
    fields = {
        'amount': '100.00',
        'currency': 'EUR',
        'label': 'Dinner',
        'split_type': 'equal',
        'date': SPENT_AT,
        'participant_ids': [user.id],
    }
    fields.update(overrides)
    return add_expense(group_id=group.id, user=user, **fields)


# =============================================================================
# Split Allocation Tests
# =============================================================================

class TestAllocate:
    """Tests for split_allocation.allocate (no database)."""

    @pytest.mark.parametrize('amount,count', [
        (Decimal('100'), 1),
        (Decimal('100'), 3),
        (Decimal('0.01'), 7),
        (Decimal('1234.56'), 9),
    ])
    def test_equal_split_sums_to_amount(self, amount, count):
        participants = [uuid4() for _ in range(count)]

        shares = allocate(amount, 'equal', participants)

        assert set(shares) == set(participants)
        assert all(share == amount / count for share in shares.values())
        assert abs(sum(shares.values()) - amount) < SPLIT_SUM_TOLERANCE

    def test_shares_taken_verbatim(self):
        a, b = uuid4(), uuid4()

        shares = allocate(Decimal('100'), 'shares', [a, b], {a: 60, b: '40'})

        assert shares == {a: Decimal('60'), b: Decimal('40')}

    def test_amounts_have_no_sum_invariant(self):
        a, b = uuid4(), uuid4()

        shares = allocate(Decimal('100'), 'amounts', [a, b], {a: '10.5', b: '1'})

        assert shares == {a: Decimal('10.5'), b: Decimal('1')}

    def test_provided_values_keys_matched_as_strings(self):
        a = uuid4()

        shares = allocate(Decimal('10'), 'amounts', [a], {str(a): '10'})

        assert shares == {a: Decimal('10')}

    def test_no_participants(self):
        with pytest.raises(InvalidSplitError):
            allocate(Decimal('10'), 'equal', [])

    def test_duplicate_participants(self):
        a = uuid4()
        with pytest.raises(InvalidSplitError):
            allocate(Decimal('10'), 'equal', [a, str(a)])

    def test_unknown_split_type(self):
        with pytest.raises(InvalidSplitError):
            allocate(Decimal('10'), 'percent', [uuid4()])

    @pytest.mark.parametrize('split_type', ['shares', 'amounts'])
    def test_missing_provided_value(self, split_type):
        a, b = uuid4(), uuid4()
        with pytest.raises(InvalidSplitError):
            allocate(Decimal('10'), split_type, [a, b], {a: '10'})

    @pytest.mark.parametrize('value', ['ten', None, 'NaN', True])
    def test_non_numeric_provided_value(self, value):
        a = uuid4()
        with pytest.raises(InvalidSplitError):
            allocate(Decimal('10'), 'amounts', [a], {a: value})

    @pytest.mark.parametrize('value', ['0.00001', '10000000000', 1e12])
    def test_provided_value_out_of_column_range(self, value):
        a = uuid4()
        with pytest.raises(InvalidSplitError):
            allocate(Decimal('10'), 'amounts', [a], {a: value})

    def test_provided_value_trailing_zeros(self):
        a = uuid4()
        assert allocate(Decimal('10'), 'amounts', [a], {a: '12.340000'}) == {a: Decimal('12.34')}


# =============================================================================
# Expense Management Service Tests
# =============================================================================

@pytest.mark.django_db
class TestAddExpense:
    """Tests for add_expense."""

    def test_add_equal_expense(self, trip3, alice, bob, carol):
        expense = add(trip3, alice, participant_ids=[alice.id, bob.id, carol.id])

        assert expense.payer == alice
        assert expense.split_type == 'equal'
        assert set(expense.split_values) == {alice.id, bob.id, carol.id}
        assert all(v == Decimal('100') / 3 for v in expense.split_values.values())
        assert {p['username'] for p in expense.participants} == {'alice', 'bob', 'carol'}

        # Equal shares are derived, not stored
        assert list(ExpenseSplit.objects.filter(expense=expense).values_list('split_value', flat=True)) == [None] * 3

    def test_round_trip(self, trip_with_bob, alice, bob):
        """add then get returns the same fields and a split keyed by participants."""
        created = add(
            trip_with_bob, alice,
            amount='100', currency='eur', label='Hotel', type='lodging',
            split_type='shares',
            participant_ids=[alice.id, bob.id],
            provided_values={alice.id: '60', bob.id: '40'},
        )

        fetched = get_expense(group_id=trip_with_bob.id, expense_id=created.id, user=bob)

        assert fetched.amount == Decimal('100')
        assert fetched.currency == 'EUR'
        assert fetched.label == 'Hotel'
        assert fetched.type == 'lodging'
        assert fetched.split_type == 'shares'
        assert fetched.date == SPENT_AT
        assert fetched.split_values == {alice.id: Decimal('60'), bob.id: Decimal('40')}

    def test_add_records_activity(self, trip, alice):
        add(trip, alice, label='Lunch')

        entry = ActivityEntry.objects.get(group=trip, type=ActivityType.ADD_EXPENSE)
        assert entry.author == alice
        assert entry.content == "I just added the expense {Lunch}."

    def test_payer_defaults_to_user(self, trip_with_bob, bob):
        expense = add(trip_with_bob, bob)
        assert expense.payer == bob

    def test_payer_on_behalf_of_member(self, trip_with_bob, alice, bob):
        expense = add(trip_with_bob, alice, payer_id=bob.id)
        assert expense.payer == bob

    def test_payer_must_be_member(self, trip, alice, outsider):
        with pytest.raises(NotMemberError):
            add(trip, alice, payer_id=outsider.id)

    def test_user_must_be_member(self, trip, outsider):
        with pytest.raises(NotMemberError):
            add(trip, outsider, participant_ids=[outsider.id])

    def test_participant_must_be_member(self, trip, alice, outsider):
        with pytest.raises(NotMemberError):
            add(trip, alice, participant_ids=[alice.id, outsider.id])

        assert not Expense.objects.exists()

    def test_missing_group(self, alice):
        with pytest.raises(GroupNotFoundError):
            add_expense(
                group_id=uuid4(), user=alice, amount='1', currency='EUR',
                label='x', split_type='equal', date=SPENT_AT, participant_ids=[alice.id],
            )

    @pytest.mark.parametrize('overrides', [
        {'amount': '0'},
        {'amount': '-5'},
        {'amount': 'abc'},
        {'amount': '1.001'},
        {'amount': '100000000000'},
        {'amount': '1e20'},
        {'label': '   '},
        {'currency': ''},
        {'currency': 'EURO'},
        {'split_type': 'percent'},
        {'date': '2024-07-14'},
    ])
    def test_invalid_fields(self, trip, alice, overrides):
        with pytest.raises(ValidationError):
            add(trip, alice, **overrides)

        assert not Expense.objects.exists()

    def test_shares_must_sum_to_amount(self, trip_with_bob, alice, bob):
        with pytest.raises(InvalidSplitError):
            add(
                trip_with_bob, alice, split_type='shares',
                participant_ids=[alice.id, bob.id],
                provided_values={alice.id: '60', bob.id: '30'},
            )

    def test_shares_within_tolerance(self, trip_with_bob, alice, bob):
        expense = add(
            trip_with_bob, alice, split_type='shares',
            participant_ids=[alice.id, bob.id],
            provided_values={alice.id: '33.33', bob.id: '66.66'},
        )
        assert expense.split_values[bob.id] == Decimal('66.66')

    def test_amounts_not_checked_against_total(self, trip_with_bob, alice, bob):
        expense = add(
            trip_with_bob, alice, split_type='amounts',
            participant_ids=[alice.id, bob.id],
            provided_values={alice.id: '5', bob.id: '7'},
        )
        assert expense.split_values == {alice.id: Decimal('5'), bob.id: Decimal('7')}

    def test_no_participants(self, trip, alice):
        with pytest.raises(InvalidSplitError):
            add(trip, alice, participant_ids=[])

        assert not Expense.objects.exists()

    def test_largest_amount(self, trip, alice):
        expense = add(trip, alice, amount='9999999999.99')

        assert expense.amount == Decimal('9999999999.99')

    def test_amount_trailing_zeros(self, trip, alice):
        expense = add(trip, alice, amount='10.000')

        assert Expense.objects.get(id=expense.id).amount == Decimal('10.00')

    def test_float_amount(self, trip, alice):
        expense = add(trip, alice, amount=0.1 + 0.2)

        assert Expense.objects.get(id=expense.id).amount == Decimal('0.30')

    def test_split_value_too_precise(self, trip_with_bob, alice, bob):
        with pytest.raises(InvalidSplitError):
            add(
                trip_with_bob, alice, split_type='amounts',
                participant_ids=[alice.id, bob.id],
                provided_values={alice.id: '50.00001', bob.id: '50'},
            )

        assert not Expense.objects.exists()


@pytest.mark.django_db
class TestReadExpenses:

    def test_list_in_insertion_order(self, trip, alice):
        first = add(trip, alice, label='First')
        second = add(trip, alice, label='Second')

        expenses = list_expenses(group_id=trip.id, user=alice)

        assert [e.id for e in expenses] == [first.id, second.id]
        assert all(e.split_values == {alice.id: Decimal('100')} for e in expenses)

    def test_list_is_restartable(self, trip, alice):
        add(trip, alice)

        assert len(list_expenses(group_id=trip.id, user=alice)) == 1
        assert len(list_expenses(group_id=trip.id, user=alice)) == 1

    def test_list_requires_membership(self, trip, outsider):
        with pytest.raises(NotMemberError):
            list_expenses(group_id=trip.id, user=outsider)

    def test_get_missing_expense(self, trip, alice):
        with pytest.raises(ExpenseNotFoundError) as exc_info:
            get_expense(group_id=trip.id, expense_id=uuid4(), user=alice)

        assert isinstance(exc_info.value, NotFoundError)

    def test_get_expense_of_other_group(self, trip, alice, bob):
        other = create_group(name='Flat', owner=bob)
        expense = add(other, bob)
        join_group(join_code=other.join_code, user=alice)

        with pytest.raises(ExpenseNotFoundError):
            get_expense(group_id=trip.id, expense_id=expense.id, user=alice)

    def test_departed_member_split_retained(self, trip_with_bob, alice, bob):
        expense = add(trip_with_bob, alice, participant_ids=[alice.id, bob.id])
        leave_group(group_id=trip_with_bob.id, user=bob)

        fetched = get_expense(group_id=trip_with_bob.id, expense_id=expense.id, user=alice)

        assert set(fetched.split_values) == {alice.id, bob.id}


@pytest.mark.django_db
class TestUpdateExpense:
    """Tests for update_expense."""

    @pytest.fixture
    def hotel(self, trip_with_bob, alice, bob):
        return add(
            trip_with_bob, alice, label='Hotel', split_type='shares',
            participant_ids=[alice.id, bob.id],
            provided_values={alice.id: '60', bob.id: '40'},
        )

    def test_update_scalar_fields(self, trip_with_bob, alice, hotel):
        updated = update_expense(
            group_id=trip_with_bob.id, expense_id=hotel.id, user=alice,
            label='Hostel', currency='usd',
        )

        assert updated.label == 'Hostel'
        assert updated.currency == 'USD'
        assert updated.amount == Decimal('100')
        assert updated.split_values == hotel.split_values

    def test_replace_split_set(self, trip_with_bob, alice, bob, carol, hotel):
        """New participants replace the whole split set."""
        join_group(join_code=trip_with_bob.join_code, user=carol)

        updated = update_expense(
            group_id=trip_with_bob.id, expense_id=hotel.id, user=alice,
            participant_ids=[alice.id, bob.id, carol.id],
            provided_values={alice.id: '50', bob.id: '30', carol.id: '20'},
        )

        assert updated.split_values == {
            alice.id: Decimal('50'), bob.id: Decimal('30'), carol.id: Decimal('20'),
        }
        stored = dict(ExpenseSplit.objects.filter(expense=hotel).values_list('user_id', 'split_value'))
        assert stored == updated.split_values

    def test_failed_replacement_keeps_old_split(self, trip_with_bob, alice, bob, carol, hotel):
        join_group(join_code=trip_with_bob.join_code, user=carol)

        with pytest.raises(InvalidSplitError):
            update_expense(
                group_id=trip_with_bob.id, expense_id=hotel.id, user=alice,
                participant_ids=[alice.id, bob.id, carol.id],
                provided_values={alice.id: '50', bob.id: '30'},
            )

        stored = dict(ExpenseSplit.objects.filter(expense=hotel).values_list('user_id', 'split_value'))
        assert stored == {alice.id: Decimal('60'), bob.id: Decimal('40')}

    def test_provided_values_reuse_participants(self, trip_with_bob, alice, bob, hotel):
        updated = update_expense(
            group_id=trip_with_bob.id, expense_id=hotel.id, user=bob,
            provided_values={alice.id: '70', bob.id: '30'},
        )

        assert updated.split_values == {alice.id: Decimal('70'), bob.id: Decimal('30')}

    def test_switch_to_equal(self, trip_with_bob, alice, bob, hotel):
        updated = update_expense(
            group_id=trip_with_bob.id, expense_id=hotel.id, user=alice,
            split_type='equal',
        )

        assert updated.split_values == {alice.id: Decimal('50'), bob.id: Decimal('50')}

    def test_switch_to_amounts_requires_values(self, trip, alice):
        expense = add(trip, alice)

        with pytest.raises(InvalidSplitError):
            update_expense(group_id=trip.id, expense_id=expense.id, user=alice, split_type='amounts')

    def test_amount_change_breaking_shares(self, trip_with_bob, alice, hotel):
        with pytest.raises(InvalidSplitError):
            update_expense(group_id=trip_with_bob.id, expense_id=hotel.id, user=alice, amount='120')

    def test_amount_change_with_equal_split(self, trip, alice):
        expense = add(trip, alice)

        updated = update_expense(group_id=trip.id, expense_id=expense.id, user=alice, amount='42.50')

        assert updated.split_values == {alice.id: Decimal('42.50')}

    def test_update_records_activity(self, trip_with_bob, alice, hotel):
        update_expense(group_id=trip_with_bob.id, expense_id=hotel.id, user=alice, label='Hostel')

        entry = ActivityEntry.objects.get(group=trip_with_bob, type=ActivityType.EDIT_EXPENSE)
        assert entry.content == "I just edited the expense {Hostel}."

    def test_nothing_to_update(self, trip_with_bob, alice, hotel):
        with pytest.raises(ValidationError):
            update_expense(group_id=trip_with_bob.id, expense_id=hotel.id, user=alice)

    def test_unknown_field(self, trip_with_bob, alice, hotel):
        with pytest.raises(ValidationError):
            update_expense(group_id=trip_with_bob.id, expense_id=hotel.id, user=alice, payer_id=alice.id)

    def test_update_missing_expense(self, trip, alice):
        with pytest.raises(ExpenseNotFoundError):
            update_expense(group_id=trip.id, expense_id=uuid4(), user=alice, label='x')

    def test_update_requires_membership(self, trip_with_bob, outsider, hotel):
        with pytest.raises(NotMemberError):
            update_expense(group_id=trip_with_bob.id, expense_id=hotel.id, user=outsider, label='x')

    def test_replacing_image_releases_old(self, trip, alice, django_capture_on_commit_callbacks):
        expense = add(trip, alice)
        update_expense(group_id=trip.id, expense_id=expense.id, user=alice, image='expense/first.png')

        with django_capture_on_commit_callbacks() as callbacks:
            update_expense(group_id=trip.id, expense_id=expense.id, user=alice, image='expense/second.png')

        released = [cb.args for cb in callbacks if getattr(cb, 'args', None)]
        assert released == [('expense/first.png',)]

    def test_same_image_not_released(self, trip, alice, django_capture_on_commit_callbacks):
        expense = add(trip, alice)
        update_expense(group_id=trip.id, expense_id=expense.id, user=alice, image='expense/first.png')

        with django_capture_on_commit_callbacks() as callbacks:
            update_expense(group_id=trip.id, expense_id=expense.id, user=alice, image='expense/first.png')

        assert not [cb for cb in callbacks if getattr(cb, 'args', None) == ('expense/first.png',)]


@pytest.mark.django_db
class TestDeleteExpense:

    def test_delete_expense(self, trip_with_bob, alice, bob):
        expense = add(trip_with_bob, alice, label='Taxi', participant_ids=[alice.id, bob.id])

        delete_expense(group_id=trip_with_bob.id, expense_id=expense.id, user=bob)

        assert not Expense.objects.filter(id=expense.id).exists()
        assert not ExpenseSplit.objects.filter(expense_id=expense.id).exists()

        entry = ActivityEntry.objects.get(group=trip_with_bob, type=ActivityType.DELETE_EXPENSE)
        assert entry.author == bob
        assert entry.content == "I just deleted the expense {Taxi}."

    def test_delete_missing_expense(self, trip, alice):
        with pytest.raises(ExpenseNotFoundError):
            delete_expense(group_id=trip.id, expense_id=uuid4(), user=alice)

    def test_delete_releases_image(self, trip, alice, django_capture_on_commit_callbacks):
        expense = add(trip, alice)
        update_expense(group_id=trip.id, expense_id=expense.id, user=alice, image='expense/receipt.png')

        with django_capture_on_commit_callbacks() as callbacks:
            delete_expense(group_id=trip.id, expense_id=expense.id, user=alice)

        released = [cb for cb in callbacks if getattr(cb, 'args', None) == ('expense/receipt.png',)]
        assert len(released) == 1
