from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional

from fincoach_core.domain.models import Category, CategoryAllocation, Goal, SavingsPlan, Transaction
from fincoach_core.domain.policy import DEFAULT_ALLOCATION_POLICY, AllocationPolicy
from fincoach_core.logging_setup import get_logger

logger = get_logger(__name__)

_CATEGORY_ORDER = {c: i for i, c in enumerate(Category)}


def compute_allocations(
    income: float,
    goal: Goal | str,
    primary_category: Category,
    recent_transactions: Iterable[Transaction],
    policy: Optional[AllocationPolicy] = None,
) -> List[CategoryAllocation]:
    """
    Recommended monthly budget split:
    - start from the base allocation table,
    - shift a goal-dependent share of income into savings,
    - trim the user's primary expense category,
    - blend with the actual spending mix of recent transactions,
    - normalize to 100% and sort by amount.
    """
    policy = policy or DEFAULT_ALLOCATION_POLICY
    goal = Goal.from_label(goal)
    income = income if math.isfinite(income) and income > 0 else 0.0

    shares = dict(policy.base_allocations)
    shares = _adjust_for_goal(shares, goal, policy)
    shares = _adjust_for_primary_category(shares, primary_category, policy)

    transactions = list(recent_transactions)
    if transactions:
        shares = _blend_with_history(shares, transactions, policy)

    shares = _normalize(shares, policy.normalization_tolerance)
    logger.debug("allocation shares for goal=%s: %s", goal.name, shares)

    allocations = [
        CategoryAllocation(category=category, amount=share * income, percentage=share * 100)
        for category, share in shares.items()
    ]
    allocations.sort(key=lambda a: (-a.amount, -a.percentage, _CATEGORY_ORDER[a.category]))
    return allocations


def _adjust_for_goal(shares: Dict[Category, float], goal: Goal, policy: AllocationPolicy) -> Dict[Category, float]:
    adjusted = dict(shares)
    if goal in policy.halving_goals:
        for category in policy.halved_categories:
            if category in adjusted:
                adjusted[category] *= 0.5

    increase = policy.savings_increase(goal)
    if increase <= 0:
        return adjusted

    savings = policy.savings_category
    # reductions are computed from a snapshot so iteration order cannot matter
    snapshot = dict(adjusted)
    reducible = sum(v for c, v in snapshot.items() if c != savings)
    if reducible > 0:
        for category, value in snapshot.items():
            if category != savings:
                adjusted[category] = max(0.0, value - (value / reducible) * increase)
    adjusted[savings] = snapshot.get(savings, 0.0) + increase
    return adjusted


def _adjust_for_primary_category(
    shares: Dict[Category, float], category: Category, policy: AllocationPolicy
) -> Dict[Category, float]:
    adjusted = dict(shares)
    current = adjusted.get(category, 0.0)
    if current > policy.primary_threshold:
        reduction = current * policy.primary_reduction
        adjusted[category] = current - reduction
        savings = policy.savings_category
        adjusted[savings] = adjusted.get(savings, 0.0) + reduction
    return adjusted


def _blend_with_history(
    shares: Dict[Category, float], transactions: List[Transaction], policy: AllocationPolicy
) -> Dict[Category, float]:
    spent: Dict[Category, float] = {}
    for tx in transactions:
        if tx.is_expense:
            spent[tx.category] = spent.get(tx.category, 0.0) + tx.amount

    total = sum(spent.values())
    if not total > 0 or not math.isfinite(total):
        return shares

    weight = policy.history_weight
    blended = dict(shares)
    for category, amount in spent.items():
        if category in blended:
            actual = amount / total
            blended[category] = blended[category] * (1 - weight) + actual * weight
    return blended


def _normalize(shares: Dict[Category, float], tolerance: float) -> Dict[Category, float]:
    total = sum(shares.values())
    if total > 0 and abs(total - 1.0) > tolerance:
        return {c: v / total for c, v in shares.items()}
    return dict(shares)


def compute_savings_plan(
    target_amount: float,
    months_to_target: int,
    monthly_income: float,
    policy: Optional[AllocationPolicy] = None,
) -> SavingsPlan:
    """
    Monthly contribution needed to reach ``target_amount`` in ``months_to_target``.
    Contributions above half of the monthly income are capped and the duration
    is stretched to fit.
    """
    if months_to_target <= 0:
        raise ValueError(f"months_to_target must be positive, got {months_to_target}")

    policy = policy or DEFAULT_ALLOCATION_POLICY
    target_amount = max(target_amount, 0.0) if math.isfinite(target_amount) else 0.0
    ideal = target_amount / months_to_target
    cap = monthly_income * policy.max_savings_share if math.isfinite(monthly_income) else 0.0

    if ideal <= cap:
        return SavingsPlan(monthly_contribution=ideal, is_realistic=True, adjusted_months=months_to_target)

    if cap <= 0:
        logger.debug("savings plan requested without income; target=%s", target_amount)
        return SavingsPlan(monthly_contribution=0.0, is_realistic=False, adjusted_months=months_to_target)

    adjusted = int(math.ceil(target_amount / cap))
    return SavingsPlan(monthly_contribution=cap, is_realistic=False, adjusted_months=adjusted)
