from __future__ import annotations

import datetime as dt
import math
from typing import Callable, Dict, Iterable, List, Optional

from fincoach_core.domain.models import Category, Goal, GoalProgress, Transaction
from fincoach_core.domain.periods import (
    days_in_month,
    month_start,
    reference_time,
    shift_months,
    start_of_day,
)
from fincoach_core.domain.policy import DEFAULT_GOAL_POLICY, GoalPolicy
from fincoach_core.logging_setup import get_logger

logger = get_logger(__name__)

DISCRETIONARY_CATEGORIES = (Category.ENTERTAINMENT, Category.SHOPPING, Category.TRAVEL)

Predicate = Callable[[Transaction], bool]


# Keyword heuristics on the free-text note, one predicate per goal.

def is_emergency_saving(tx: Transaction) -> bool:
    return tx.is_income and (tx.category is Category.MISCELLANEOUS or tx.note_mentions("savings", "emergency"))


def is_debt_payment(tx: Transaction) -> bool:
    return tx.is_expense and tx.category is Category.BILLS and tx.note_mentions("loan", "debt", "emi", "payment")


def is_purchase_saving(tx: Transaction) -> bool:
    return tx.is_income and (tx.category is Category.MISCELLANEOUS or tx.note_mentions("savings", "purchase"))


def is_portfolio_investment(tx: Transaction) -> bool:
    return tx.is_income and (tx.category is Category.INVESTMENT or tx.note_mentions("invest", "portfolio"))


def is_investment(tx: Transaction) -> bool:
    return tx.is_income and (tx.category is Category.INVESTMENT or tx.note_mentions("invest"))


def is_passive_income(tx: Transaction) -> bool:
    return tx.is_income and (tx.category is Category.INVESTMENT or tx.note_mentions("passive", "dividend"))


def is_general_saving(tx: Transaction) -> bool:
    return tx.is_income and tx.category is Category.MISCELLANEOUS


def _ratio(value: float, target: float) -> float:
    if not target > 0:
        return 0.0
    result = value / target
    if not math.isfinite(result):
        return 0.0
    return min(1.0, max(0.0, result))


def _total(transactions: Iterable[Transaction], predicate: Predicate) -> float:
    return sum(tx.amount for tx in transactions if predicate(tx))


def _this_year(transactions: List[Transaction], now: dt.datetime) -> List[Transaction]:
    return [tx for tx in transactions if tx.date.year == now.year]


def _emergency_fund(txs: List[Transaction], income: float, now: dt.datetime, policy: GoalPolicy) -> float:
    saved = _total(_this_year(txs, now), is_emergency_saving)
    return _ratio(saved, income * policy.emergency_fund_multiple)


def _debt_payoff(txs: List[Transaction], income: float, now: dt.datetime, policy: GoalPolicy) -> float:
    paid = _total(_this_year(txs, now), is_debt_payment)
    return _ratio(paid, income * policy.debt_income_share * policy.debt_months)


def _major_purchase(txs: List[Transaction], income: float, now: dt.datetime, policy: GoalPolicy) -> float:
    saved = _total(_this_year(txs, now), is_purchase_saving)
    return _ratio(saved, income * policy.major_purchase_multiple)


def _investment_portfolio(txs: List[Transaction], income: float, now: dt.datetime, policy: GoalPolicy) -> float:
    return _ratio(_total(txs, is_portfolio_investment), income * policy.investment_multiple)


def _day_to_day_tracking(txs: List[Transaction], income: float, now: dt.datetime, policy: GoalPolicy) -> float:
    window_end = start_of_day(now)
    window_start = shift_months(window_end, -1)
    days = {start_of_day(tx.date) for tx in txs if window_start <= tx.date < window_end}
    return min(1.0, len(days) / days_in_month(window_start))


def _reduce_spending(txs: List[Transaction], income: float, now: dt.datetime, policy: GoalPolicy) -> float:
    current_start = month_start(now)
    previous_start = shift_months(current_start, -1)

    def discretionary(tx: Transaction) -> bool:
        return tx.is_expense and tx.category in DISCRETIONARY_CATEGORIES

    previous = sum(tx.amount for tx in txs if discretionary(tx) and previous_start <= tx.date < current_start)
    current = sum(tx.amount for tx in txs if discretionary(tx) and current_start <= tx.date <= now)

    if previous == 0:
        return policy.no_baseline_progress

    decrease = (previous - current) / previous
    progress = decrease / policy.spending_reduction_target
    if not math.isfinite(progress):
        return 0.0
    return min(1.0, max(0.0, progress))


def _financial_independence(txs: List[Transaction], income: float, now: dt.datetime, policy: GoalPolicy) -> float:
    emergency = _ratio(_total(txs, is_emergency_saving), income * policy.fi_emergency_multiple)
    investment = _ratio(_total(txs, is_investment), income * policy.fi_investment_multiple)

    passive = [tx.amount for tx in txs if is_passive_income(tx)]
    monthly_passive = sum(passive) / len(passive) if passive else 0.0
    passive_progress = _ratio(monthly_passive, income * policy.fi_passive_income_share)

    w_emergency, w_investment, w_passive = policy.fi_weights
    blended = emergency * w_emergency + investment * w_investment + passive_progress * w_passive
    return min(1.0, max(0.0, blended))


def _general_savings(txs: List[Transaction], income: float, now: dt.datetime, policy: GoalPolicy) -> float:
    return _ratio(_total(txs, is_general_saving), income * policy.default_savings_multiple)


ProgressFn = Callable[[List[Transaction], float, dt.datetime, GoalPolicy], float]

_PROGRESS_BY_GOAL: Dict[Goal, ProgressFn] = {
    Goal.EMERGENCY_FUND: _emergency_fund,
    Goal.DEBT_PAYOFF: _debt_payoff,
    Goal.MAJOR_PURCHASE: _major_purchase,
    Goal.INVESTMENT_PORTFOLIO: _investment_portfolio,
    Goal.DAY_TO_DAY_TRACKING: _day_to_day_tracking,
    Goal.REDUCE_SPENDING: _reduce_spending,
    Goal.FINANCIAL_INDEPENDENCE: _financial_independence,
    Goal.OTHER: _general_savings,
}

_missing = set(Goal) - set(_PROGRESS_BY_GOAL)
if _missing:
    raise RuntimeError(f"No progress calculation for goals: {sorted(g.name for g in _missing)}")


def goal_progress(
    transactions: Iterable[Transaction],
    goal: Goal | str,
    monthly_income: float,
    now: Optional[dt.datetime] = None,
    policy: Optional[GoalPolicy] = None,
) -> float:
    """Progress toward ``goal`` as a ratio in [0, 1]."""
    policy = policy or DEFAULT_GOAL_POLICY
    now = reference_time(now)
    income = monthly_income if math.isfinite(monthly_income) else 0.0
    goal = Goal.from_label(goal)
    progress = _PROGRESS_BY_GOAL[goal](list(transactions), income, now, policy)
    return progress if math.isfinite(progress) else 0.0


def months_to_goal(
    transactions: Iterable[Transaction],
    goal: Goal | str,
    monthly_income: float,
    now: Optional[dt.datetime] = None,
    policy: Optional[GoalPolicy] = None,
) -> int:
    """
    Estimated months until the goal is reached, extrapolating the progress made
    over the lookback window (three months by default).
    """
    policy = policy or DEFAULT_GOAL_POLICY
    now = reference_time(now)
    txs = list(transactions)

    current = goal_progress(txs, goal, monthly_income, now=now, policy=policy)
    if current >= 1.0:
        return 0

    window_start = shift_months(now, -policy.lookback_months)
    if not any(tx.date >= window_start for tx in txs):
        return policy.fallback_months

    older = [tx for tx in txs if tx.date <= window_start]
    baseline = goal_progress(older, goal, monthly_income, now=now, policy=policy)
    rate = (current - baseline) / policy.lookback_months
    if not math.isfinite(rate):
        rate = policy.min_monthly_rate
    rate = max(policy.min_monthly_rate, rate)

    months = math.ceil((1.0 - current) / rate)
    logger.debug("months_to_goal: current=%.4f baseline=%.4f rate=%.4f -> %d", current, baseline, rate, months)
    return int(months)


def goal_status(
    transactions: Iterable[Transaction],
    goal: Goal | str,
    monthly_income: float,
    now: Optional[dt.datetime] = None,
    policy: Optional[GoalPolicy] = None,
) -> GoalProgress:
    now = reference_time(now)
    txs = list(transactions)
    goal = Goal.from_label(goal)
    ratio = goal_progress(txs, goal, monthly_income, now=now, policy=policy)
    months = months_to_goal(txs, goal, monthly_income, now=now, policy=policy)
    target = shift_months(month_start(now), months).date()
    return GoalProgress(goal=goal, ratio=ratio, months_remaining=months, target_month=target)
