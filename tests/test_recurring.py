import datetime as dt

from fincoach_core.domain.models import Category, RecurringFrequency, Transaction, TransactionType
from fincoach_core.services.recurring import expand_recurring, next_occurrence, schedule_recurring


def _rent(when):
    return Transaction(
        amount=15000,
        type=TransactionType.EXPENSE,
        category=Category.HOUSING,
        date=when,
        note="Rent",
    )


def test_monthly_occurrences_clamp_to_month_end():
    template = schedule_recurring(_rent(dt.datetime(2024, 1, 31)), RecurringFrequency.MONTHLY)

    created, updated = expand_recurring(template, now=dt.datetime(2024, 4, 15))
    assert [tx.date for tx in created] == [dt.datetime(2024, 2, 29), dt.datetime(2024, 3, 31)]
    assert updated.last_processed_date == dt.datetime(2024, 3, 31)
    assert all(tx.note == "Rent" and tx.amount == 15000 for tx in created)

    again, unchanged = expand_recurring(updated, now=dt.datetime(2024, 4, 15))
    assert again == []
    assert unchanged == updated


def test_expansion_stops_at_end_date():
    template = schedule_recurring(
        _rent(dt.datetime(2024, 1, 31)),
        RecurringFrequency.MONTHLY,
        end_date=dt.datetime(2024, 3, 1),
    )
    created, _ = expand_recurring(template, now=dt.datetime(2024, 12, 31))
    assert [tx.date for tx in created] == [dt.datetime(2024, 2, 29)]


def test_weekly_catch_up():
    template = schedule_recurring(_rent(dt.datetime(2024, 1, 1)), RecurringFrequency.WEEKLY)
    created, _ = expand_recurring(template, now=dt.datetime(2024, 1, 22, 9, 0))
    assert [tx.date.day for tx in created] == [8, 15, 22]


def test_generated_transactions_get_fresh_ids():
    base = _rent(dt.datetime(2024, 1, 1))
    template = schedule_recurring(base, RecurringFrequency.DAILY)
    created, _ = expand_recurring(template, now=dt.datetime(2024, 1, 4))
    ids = {tx.id for tx in created}
    assert len(ids) == len(created) == 3
    assert base.id not in ids


def test_next_occurrence():
    template = schedule_recurring(_rent(dt.datetime(2024, 1, 15)), RecurringFrequency.QUARTERLY)
    assert next_occurrence(template) == dt.datetime(2024, 4, 15)

    yearly = schedule_recurring(
        _rent(dt.datetime(2024, 2, 29)), RecurringFrequency.YEARLY, end_date=dt.datetime(2024, 12, 31)
    )
    assert next_occurrence(yearly) is None
