from __future__ import annotations

import dataclasses
import datetime as dt
import uuid
from typing import Iterator, List, Optional, Tuple

from fincoach_core.domain.models import RecurringFrequency, RecurringTransaction, Transaction
from fincoach_core.domain.periods import reference_time, shift_months

_DAY_STEPS = {
    RecurringFrequency.DAILY: 1,
    RecurringFrequency.WEEKLY: 7,
    RecurringFrequency.BIWEEKLY: 14,
}
_MONTH_STEPS = {
    RecurringFrequency.MONTHLY: 1,
    RecurringFrequency.QUARTERLY: 3,
    RecurringFrequency.YEARLY: 12,
}


def occurrence(recurring: RecurringTransaction, index: int) -> dt.datetime:
    """Date of the ``index``-th occurrence; index 0 is the start date."""
    if recurring.frequency in _DAY_STEPS:
        return recurring.start_date + dt.timedelta(days=_DAY_STEPS[recurring.frequency] * index)
    return shift_months(recurring.start_date, _MONTH_STEPS[recurring.frequency] * index)


def _occurrences(recurring: RecurringTransaction) -> Iterator[dt.datetime]:
    index = 0
    while True:
        yield occurrence(recurring, index)
        index += 1


def next_occurrence(recurring: RecurringTransaction) -> Optional[dt.datetime]:
    """First occurrence after the last processed date, None once past the end date."""
    last = recurring.last_processed_date or recurring.start_date
    for when in _occurrences(recurring):
        if recurring.end_date is not None and when > recurring.end_date:
            return None
        if when > last:
            return when
    return None  # pragma: no cover


def expand_recurring(
    recurring: RecurringTransaction,
    now: Optional[dt.datetime] = None,
) -> Tuple[List[Transaction], RecurringTransaction]:
    """
    Materialize every occurrence due up to ``now`` that has not been processed.

    Returns the new transactions (fresh ids) and the template with its last
    processed date moved to the last emitted occurrence.
    """
    now = reference_time(now)
    last = recurring.last_processed_date or recurring.start_date
    created: List[Transaction] = []

    for when in _occurrences(recurring):
        if when > now:
            break
        if recurring.end_date is not None and when > recurring.end_date:
            break
        if when <= last:
            continue
        created.append(dataclasses.replace(recurring.base_transaction, id=str(uuid.uuid4()), date=when))

    if not created:
        return [], recurring
    return created, dataclasses.replace(recurring, last_processed_date=created[-1].date)


def schedule_recurring(
    transaction: Transaction,
    frequency: RecurringFrequency,
    end_date: Optional[dt.datetime] = None,
) -> RecurringTransaction:
    """Template starting at the transaction's own date; that first instance counts as processed."""
    return RecurringTransaction(
        base_transaction=transaction,
        frequency=frequency,
        start_date=transaction.date,
        end_date=end_date,
        last_processed_date=transaction.date,
    )
