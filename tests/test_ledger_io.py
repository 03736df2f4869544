import datetime as dt
import json
from pathlib import Path

import pytest

from fincoach_core.domain.models import (
    Category,
    Goal,
    Profile,
    RecurringFrequency,
    Transaction,
    TransactionType,
)
from fincoach_core.domain.periods import to_naive
from fincoach_core.io import config as config_io
from fincoach_core.io import ledger as ledger_io
from fincoach_core.io import profile as profile_io
from fincoach_core.services.recurring import schedule_recurring

FIXTURE = Path(__file__).parent / "data" / "ledger.csv"


def test_load_csv_fixture():
    transactions = ledger_io.load_ledger(FIXTURE)
    assert len(transactions) == 12

    first = transactions[0]
    assert first.type is TransactionType.INCOME
    assert first.category is Category.SALARY
    assert first.date == dt.datetime(2024, 1, 5)
    assert first.note == "January salary"
    assert len({tx.id for tx in transactions}) == 12


def test_csv_without_note_column(tmp_path: Path):
    path = tmp_path / "ledger.csv"
    path.write_text("date,amount,type,category\n2024-01-01,10,expense,food\n")
    (tx,) = ledger_io.load_ledger_csv(path)
    assert tx.note == ""
    assert tx.category is Category.FOOD
    assert tx.type is TransactionType.EXPENSE


def test_csv_missing_columns(tmp_path: Path):
    path = tmp_path / "ledger.csv"
    path.write_text("date,amount\n2024-01-01,10\n")
    with pytest.raises(ValueError, match="Missing columns"):
        ledger_io.load_ledger_csv(path)


def test_csv_unknown_category(tmp_path: Path):
    path = tmp_path / "ledger.csv"
    path.write_text("date,amount,type,category\n2024-01-01,10,Expense,Pets\n")
    with pytest.raises(ValueError, match="Unknown category"):
        ledger_io.load_ledger_csv(path)


def test_missing_csv(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        ledger_io.load_ledger(tmp_path / "nope.csv")


def test_blob_round_trip_keeps_ids(tmp_path: Path):
    path = tmp_path / "ledger.json"
    original = ledger_io.load_ledger(FIXTURE)
    ledger_io.save_ledger_blob(path, original)
    assert ledger_io.load_ledger(path) == original


def test_missing_blob_is_empty(tmp_path: Path):
    assert ledger_io.load_ledger_blob(tmp_path / "missing.json") == []


def test_ledger_store_persists_every_change(tmp_path: Path):
    path = tmp_path / "store" / "ledger.json"
    store = ledger_io.LedgerStore(path)
    coffee = Transaction(amount=120, type=TransactionType.EXPENSE, category=Category.FOOD, date=dt.datetime(2024, 6, 1))
    store.add(coffee)
    assert ledger_io.LedgerStore(path).transactions == [coffee]

    pricier = Transaction(
        amount=180,
        type=TransactionType.EXPENSE,
        category=Category.FOOD,
        date=coffee.date,
        id=coffee.id,
    )
    assert store.update(pricier) is True
    assert ledger_io.LedgerStore(path).transactions[0].amount == 180

    assert store.delete("unknown") is False
    assert store.delete(coffee.id) is True
    assert ledger_io.LedgerStore(path).transactions == []


def test_profile_round_trip(tmp_path: Path):
    path = tmp_path / "profile.json"
    profile = Profile(
        name="Asha",
        monthly_income=50000,
        monthly_budget=40000,
        financial_goal="Pay off debt",
        primary_expense_category=Category.HOUSING,
    )
    profile_io.save_profile(path, profile)
    loaded = profile_io.load_profile(path)
    assert loaded == profile
    assert loaded.goal is Goal.DEBT_PAYOFF


def test_missing_profile_is_default(tmp_path: Path):
    assert profile_io.load_profile(tmp_path / "profile.json") == Profile()


def test_recurring_round_trip(tmp_path: Path):
    path = tmp_path / "recurring.json"
    rent = Transaction(amount=15000, type=TransactionType.EXPENSE, category=Category.HOUSING, date=dt.datetime(2024, 1, 1))
    templates = [schedule_recurring(rent, RecurringFrequency.MONTHLY, end_date=dt.datetime(2024, 12, 31))]
    profile_io.save_recurring(path, templates)
    assert profile_io.load_recurring(path) == templates


def test_policy_overrides(tmp_path: Path):
    path = tmp_path / "policy.json"
    path.write_text(
        json.dumps(
            {
                "allocation": {
                    "base_allocations": {"Food": 0.2},
                    "savings_increases": {"EMERGENCY_FUND": 0.3, "Pay off debt": 0.1},
                    "history_weight": 0.5,
                },
                "goals": {"emergency_fund_multiple": 6, "lookback_months": 2},
            }
        )
    )

    allocation_policy = config_io.load_allocation_policy(path)
    assert allocation_policy.base_allocations[Category.FOOD] == 0.2
    assert allocation_policy.base_allocations[Category.HOUSING] == 0.30
    assert allocation_policy.savings_increase(Goal.EMERGENCY_FUND) == 0.3
    assert allocation_policy.savings_increase(Goal.DEBT_PAYOFF) == 0.1
    assert allocation_policy.history_weight == 0.5

    goal_policy = config_io.load_goal_policy(path)
    assert goal_policy.emergency_fund_multiple == 6
    assert goal_policy.lookback_months == 2
    assert goal_policy.fallback_months == 36


def test_policy_rejects_bad_weights(tmp_path: Path):
    path = tmp_path / "policy.json"
    path.write_text(json.dumps({"goals": {"fi_weights": [0.5, 0.5]}}))
    with pytest.raises(ValueError):
        config_io.load_goal_policy(path)


def test_csv_offsets_are_converted_to_utc(tmp_path: Path):
    path = tmp_path / "ledger.csv"
    path.write_text(
        "date,amount,type,category\n"
        "2024-05-01T10:00:00+05:30,100,Expense,Food\n"
        "2024-05-02,50,Expense,Food\n"
    )
    transactions = ledger_io.load_ledger_csv(path)
    assert [tx.date for tx in transactions] == [dt.datetime(2024, 5, 1, 4, 30), dt.datetime(2024, 5, 2)]
    assert all(tx.date.tzinfo is None for tx in transactions)


def test_json_offsets_are_converted_to_utc():
    tx = ledger_io.transaction_from_json(
        {"amount": 10, "type": "Expense", "category": "Food", "date": "2024-05-01T10:00:00+05:30"}
    )
    assert tx.date == dt.datetime(2024, 5, 1, 4, 30)
    assert tx.date.tzinfo is None


def test_to_naive():
    aware = dt.datetime(2024, 1, 1, 1, 0, tzinfo=dt.timezone(dt.timedelta(hours=2)))
    assert to_naive(aware) == dt.datetime(2023, 12, 31, 23, 0)
    assert to_naive(dt.datetime(2024, 1, 1)) == dt.datetime(2024, 1, 1)
