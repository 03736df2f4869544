from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional

from fincoach_core.domain.models import CategoryAllocation, CategoryAnalytics, GoalProgress, Profile, Transaction
from fincoach_core.domain.periods import reference_time
from fincoach_core.services import allocation, goals, trends


def allocations_to_json(items: List[CategoryAllocation]) -> list:
    return [
        {"category": a.category.value, "amount": round(a.amount, 2), "percentage": round(a.percentage, 2)}
        for a in items
    ]


def analytics_to_json(items: List[CategoryAnalytics]) -> list:
    return [
        {
            "category": a.category.value,
            "current_amount": a.current_amount,
            "previous_amount": a.previous_amount,
            "percentage_change": a.percentage_change,
            "trend": a.trend.value,
        }
        for a in items
    ]


def goal_to_json(status: GoalProgress) -> dict:
    return {
        "goal": status.goal.label,
        "progress": status.ratio,
        "months_remaining": status.months_remaining,
        "target_month": status.target_month.isoformat(),
    }


def insight_report(
    transactions: Iterable[Transaction],
    profile: Profile,
    now: Optional[dt.datetime] = None,
    timeframe_months: int = 3,
) -> dict:
    """Everything the dashboard shows for one profile, as plain JSON types."""
    now = reference_time(now)
    txs = list(transactions)
    income = profile.monthly_income
    return {
        "as_of": now.isoformat(),
        "allocations": allocations_to_json(
            allocation.compute_allocations(income, profile.goal, profile.primary_expense_category, txs)
        ),
        "goal": goal_to_json(goals.goal_status(txs, profile.goal, income, now=now)),
        "trends": analytics_to_json(trends.spending_trends(txs, timeframe_months, now=now)),
        "insights": trends.smart_insights(txs, income, now=now),
    }
