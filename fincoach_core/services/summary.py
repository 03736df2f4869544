from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from fincoach_core.domain.models import Category, Transaction, TransactionType


def _frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {"date": tx.date, "amount": tx.amount, "type": tx.type.value, "category": tx.category.value}
        for tx in transactions
    ]
    return pd.DataFrame(rows, columns=["date", "amount", "type", "category"])


def _sum_of(df: pd.DataFrame, kind: TransactionType) -> float:
    if df.empty:
        return 0.0
    return float(df.loc[df["type"] == kind.value, "amount"].sum())


def total_income(transactions: Iterable[Transaction]) -> float:
    return _sum_of(_frame(transactions), TransactionType.INCOME)


def total_expense(transactions: Iterable[Transaction]) -> float:
    return _sum_of(_frame(transactions), TransactionType.EXPENSE)


def balance(transactions: Iterable[Transaction]) -> float:
    df = _frame(transactions)
    return _sum_of(df, TransactionType.INCOME) - _sum_of(df, TransactionType.EXPENSE)


def transactions_for_month(transactions: Iterable[Transaction], month: int, year: int) -> List[Transaction]:
    return [tx for tx in transactions if tx.date.month == month and tx.date.year == year]


def monthly_expense_total(transactions: Iterable[Transaction], month: int, year: int) -> float:
    return _sum_of(_frame(transactions_for_month(transactions, month, year)), TransactionType.EXPENSE)


def monthly_expenses_by_category(
    transactions: Iterable[Transaction], month: int, year: int
) -> Dict[Category, float]:
    """Expense totals for one calendar month; every expense category is present."""
    df = _frame(transactions_for_month(transactions, month, year))
    totals: Dict[Category, float] = {c: 0.0 for c in Category.expense_categories()}
    if df.empty:
        return totals

    expenses = df[df["type"] == TransactionType.EXPENSE.value]
    by_category = expenses.groupby("category")["amount"].sum()
    for category in totals:
        totals[category] = float(by_category.get(category.value, 0.0))
    return totals


def top_expense_category(transactions: Iterable[Transaction]) -> Tuple[Optional[Category], float]:
    df = _frame(transactions)
    if df.empty:
        return None, 0.0
    expenses = df[df["type"] == TransactionType.EXPENSE.value]
    if expenses.empty:
        return None, 0.0
    by_category = expenses.groupby("category")["amount"].sum().sort_values(ascending=False, kind="stable")
    return Category(by_category.index[0]), float(by_category.iloc[0])
