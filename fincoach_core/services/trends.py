from __future__ import annotations

import datetime as dt
import math
from typing import Iterable, List, Optional

from fincoach_core.domain.models import Category, CategoryAnalytics, Transaction, TrendDirection
from fincoach_core.domain.periods import reference_time, shift_months

INCOME_SETUP_MESSAGE = "Please set your monthly income to receive personalized insights."
NO_SAVINGS_MESSAGE = "No savings detected. Consider setting aside 10-20% of your income each month."
TRACK_CONSISTENTLY_MESSAGE = "Track your expenses consistently to receive personalized financial insights."

TOP_CATEGORY_INCOME_SHARE = 30.0
TOP_CATEGORY_INCREASE = 20.0
IMPROVEMENT_DECREASE = -15.0
EXPENSE_RATIO_WARNING = 90.0
LOW_SAVINGS_RATE = 10.0
HIGH_SAVINGS_RATE = 20.0

SAVINGS_CATEGORIES = (Category.INVESTMENT, Category.MISCELLANEOUS)


def spending_trends(
    transactions: Iterable[Transaction],
    timeframe_months: int = 3,
    now: Optional[dt.datetime] = None,
) -> List[CategoryAnalytics]:
    """
    Compare expense totals per category between the last ``timeframe_months``
    and the equally long period before it.
    """
    if timeframe_months <= 0:
        return []

    now = reference_time(now)
    current_start = shift_months(now, -timeframe_months)
    previous_start = shift_months(now, -2 * timeframe_months)

    current_totals = {c: 0.0 for c in Category.expense_categories()}
    previous_totals = {c: 0.0 for c in Category.expense_categories()}
    for tx in transactions:
        if not tx.is_expense or tx.category not in current_totals:
            continue
        if current_start <= tx.date <= now:
            current_totals[tx.category] += tx.amount
        elif previous_start <= tx.date < current_start:
            previous_totals[tx.category] += tx.amount

    analytics: List[CategoryAnalytics] = []
    for category in Category.expense_categories():
        current = current_totals[category]
        previous = previous_totals[category]
        if current <= 0 and previous <= 0:
            continue

        if previous > 0:
            change = (current - previous) / previous * 100
            if not math.isfinite(change):
                change = 0.0
        else:
            change = 100.0

        analytics.append(
            CategoryAnalytics(
                category=category,
                current_amount=current,
                previous_amount=previous,
                percentage_change=change,
            )
        )

    analytics.sort(key=lambda a: a.current_amount, reverse=True)
    return analytics


def _as_int(value: float) -> int:
    if not math.isfinite(value):
        return 0
    return int(value)


def smart_insights(
    transactions: Iterable[Transaction],
    monthly_income: float,
    now: Optional[dt.datetime] = None,
) -> List[str]:
    """Short observations about the ledger, most important first."""
    if not (math.isfinite(monthly_income) and monthly_income > 0):
        return [INCOME_SETUP_MESSAGE]

    txs = list(transactions)
    insights: List[str] = []
    trends = spending_trends(txs, now=now)

    if trends and trends[0].current_amount > 0:
        top = trends[0]
        name = top.category.value
        share = top.current_amount / monthly_income * 100
        if math.isfinite(share) and share > TOP_CATEGORY_INCOME_SHARE:
            insights.append(
                f"Your {name.lower()} expenses account for {_as_int(share)}% of your income. "
                "Consider setting a budget limit."
            )
        if top.trend is TrendDirection.INCREASING and top.percentage_change > TOP_CATEGORY_INCREASE:
            insights.append(
                f"{name} spending has increased by {_as_int(top.percentage_change)}% recently. "
                "Review these expenses to stay on track."
            )

    improvement = next(
        (
            a
            for a in trends
            if a.trend is TrendDirection.DECREASING and a.percentage_change < IMPROVEMENT_DECREASE
        ),
        None,
    )
    if improvement is not None:
        insights.append(
            f"Great job! You've reduced {improvement.category.value.lower()} spending by "
            f"{_as_int(abs(improvement.percentage_change))}%."
        )

    total_income = sum(tx.amount for tx in txs if tx.is_income)
    total_expense = sum(tx.amount for tx in txs if tx.is_expense)
    if total_income > 0 and total_expense > 0:
        ratio = total_expense / total_income * 100
        if math.isfinite(ratio) and ratio > EXPENSE_RATIO_WARNING:
            insights.append(
                f"Your expenses are {_as_int(ratio)}% of your income. Try to keep this under 90% to build savings."
            )

    savings = [tx.amount for tx in txs if tx.is_income and tx.category in SAVINGS_CATEGORIES]
    if not savings:
        insights.append(NO_SAVINGS_MESSAGE)
    else:
        average = sum(savings) / len(savings)
        rate = average / monthly_income * 100
        if math.isfinite(rate):
            if rate < LOW_SAVINGS_RATE:
                insights.append(
                    f"You're saving approximately {_as_int(rate)}% of your income. "
                    "Financial experts recommend saving at least 20%."
                )
            elif rate >= HIGH_SAVINGS_RATE:
                insights.append(
                    f"Excellent! You're saving {_as_int(rate)}% of your income, "
                    "which puts you ahead of most people."
                )

    if not insights:
        insights.append(TRACK_CONSISTENTLY_MESSAGE)
    return insights
