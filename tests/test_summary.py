from pathlib import Path

import pytest

from fincoach_core.domain.models import Category
from fincoach_core.io.ledger import load_ledger
from fincoach_core.services import summary

FIXTURE = Path(__file__).parent / "data" / "ledger.csv"


@pytest.fixture
def ledger():
    return load_ledger(FIXTURE)


def test_totals(ledger):
    assert summary.total_income(ledger) == pytest.approx(209000)
    assert summary.total_expense(ledger) == pytest.approx(23000)
    assert summary.balance(ledger) == pytest.approx(186000)


def test_empty_ledger():
    assert summary.balance([]) == 0
    assert summary.top_expense_category([]) == (None, 0.0)
    assert set(summary.monthly_expenses_by_category([], 1, 2024).values()) == {0.0}


def test_monthly_breakdown(ledger):
    april = summary.monthly_expenses_by_category(ledger, 4, 2024)
    assert list(april) == Category.expense_categories()
    assert april[Category.BILLS] == pytest.approx(3000)
    assert sum(april.values()) == pytest.approx(3000)


def test_transactions_for_month(ledger):
    june = summary.transactions_for_month(ledger, 6, 2024)
    assert [tx.category for tx in june] == [Category.TRANSPORTATION, Category.INVESTMENT]


def test_top_expense_category(ledger):
    assert summary.top_expense_category(ledger) == (Category.HOUSING, 15000.0)


def test_monthly_expense_total(ledger):
    # housing counts toward the total even though it has no breakdown row
    assert summary.monthly_expense_total(ledger, 4, 2024) == pytest.approx(18000)
    assert summary.monthly_expense_total(ledger, 3, 2024) == 0
    assert summary.monthly_expense_total([], 4, 2024) == 0
