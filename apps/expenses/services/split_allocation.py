"""
Split allocation.

Turns an expense amount and a split strategy into the share of each
participant. Pure: no database access.

    equal    amount / n for every participant, no remainder redistribution
    shares   provided value of each participant, taken verbatim
    amounts  provided value of each participant, taken verbatim

The ``shares`` sum check belongs to the expense ledger, not to allocate().
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Hashable, Mapping, Optional, Sequence

from apps.expenses.models import SplitType

from .exceptions import InvalidSplitError

# Largest accepted gap between the sum of ``shares`` values and the amount
SPLIT_SUM_TOLERANCE = Decimal('0.01')


# ExpenseSplit.split_value is DecimalField(max_digits=14, decimal_places=4)
SPLIT_VALUE_MAX_INTEGER_DIGITS = 10
SPLIT_VALUE_QUANTUM = Decimal('0.0001')


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidOperation
    raw = format(value, '.14g') if isinstance(value, float) else str(value)
    result = Decimal(raw)
    if not result.is_finite():
        raise InvalidOperation
    if result and result.adjusted() >= SPLIT_VALUE_MAX_INTEGER_DIGITS:
        raise InvalidOperation
    if result != result.quantize(SPLIT_VALUE_QUANTUM):
        raise InvalidOperation
    return result


def allocate(
    amount: Decimal,
    split_type: str,
    participant_ids: Sequence[Hashable],
    provided_values: Optional[Mapping[Any, Any]] = None
) -> Dict[Hashable, Decimal]:
    """
    Compute the share of every participant.

    Args:
        amount: Expense amount
        split_type: One of SplitType
        participant_ids: Participants, in the caller's order
        provided_values: Value per participant id for shares/amounts.
            Keys are matched as strings, so UUID and str ids both work.

    Returns:
        Mapping of each participant id (as given) to its share

    Raises:
        InvalidSplitError: On empty or duplicate participants, an unknown
            strategy, or a missing or non-numeric provided value
    """
    if split_type not in SplitType.values:
        raise InvalidSplitError(f"Unknown split type: {split_type!r}")

    if not participant_ids:
        raise InvalidSplitError("An expense needs at least one participant")

    keys = [str(pid) for pid in participant_ids]
    if len(set(keys)) != len(keys):
        raise InvalidSplitError("A participant appears more than once")

    if split_type == SplitType.EQUAL:
        share = Decimal(amount) / len(participant_ids)
        return {pid: share for pid in participant_ids}

    values = {str(key): value for key, value in (provided_values or {}).items()}
    shares = {}
    for pid, key in zip(participant_ids, keys):
        if key not in values:
            raise InvalidSplitError(f"Missing {split_type} value for participant {key}")
        try:
            shares[pid] = _to_decimal(values[key])
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidSplitError(f"Invalid {split_type} value for participant {key}")

    return shares


def check_shares_sum(amount: Decimal, shares: Mapping[Any, Decimal]) -> None:
    """
    Raises:
        InvalidSplitError: If the shares do not add up to the amount
    """
    total = sum(shares.values(), Decimal('0'))
    if abs(total - Decimal(amount)) > SPLIT_SUM_TOLERANCE:
        raise InvalidSplitError(
            f"Shares add up to {total}, expected {amount}"
        )
