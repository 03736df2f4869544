from __future__ import annotations

import dataclasses
from typing import Dict, Tuple

from fincoach_core.domain.models import Category, Goal


def _base_allocations() -> Dict[Category, float]:
    return {
        Category.FOOD: 0.25,
        Category.TRANSPORTATION: 0.15,
        Category.HOUSING: 0.30,
        Category.ENTERTAINMENT: 0.05,
        Category.SHOPPING: 0.05,
        Category.BILLS: 0.10,
        Category.HEALTH: 0.05,
        Category.EDUCATION: 0.03,
        Category.TRAVEL: 0.02,
        Category.MISCELLANEOUS: 0.05,
    }


def _savings_increases() -> Dict[Goal, float]:
    return {
        Goal.EMERGENCY_FUND: 0.15,
        Goal.DEBT_PAYOFF: 0.20,
        Goal.MAJOR_PURCHASE: 0.15,
        Goal.INVESTMENT_PORTFOLIO: 0.20,
        Goal.DAY_TO_DAY_TRACKING: 0.05,
        Goal.REDUCE_SPENDING: 0.10,
        Goal.FINANCIAL_INDEPENDENCE: 0.25,
        Goal.OTHER: 0.10,
    }


@dataclasses.dataclass(frozen=True)
class AllocationPolicy:
    base_allocations: Dict[Category, float] = dataclasses.field(default_factory=_base_allocations)
    savings_increases: Dict[Goal, float] = dataclasses.field(default_factory=_savings_increases)
    savings_category: Category = Category.MISCELLANEOUS
    # goals that halve these categories before the savings shift
    halving_goals: Tuple[Goal, ...] = (Goal.REDUCE_SPENDING,)
    halved_categories: Tuple[Category, ...] = (Category.ENTERTAINMENT, Category.SHOPPING)
    primary_threshold: float = 0.15
    primary_reduction: float = 0.10
    history_weight: float = 0.30
    normalization_tolerance: float = 0.001
    max_savings_share: float = 0.5  # of monthly income, for savings plans

    def savings_increase(self, goal: Goal) -> float:
        return self.savings_increases.get(goal, self.savings_increases.get(Goal.OTHER, 0.10))


@dataclasses.dataclass(frozen=True)
class GoalPolicy:
    """Target multiples and thresholds used by goal progress.

    Multiples are expressed in months of income.
    """

    emergency_fund_multiple: float = 3.0
    debt_income_share: float = 0.5
    debt_months: float = 12.0
    major_purchase_multiple: float = 6.0
    investment_multiple: float = 12.0
    default_savings_multiple: float = 6.0
    fi_emergency_multiple: float = 6.0
    fi_investment_multiple: float = 24.0
    fi_passive_income_share: float = 0.5
    fi_weights: Tuple[float, float, float] = (0.3, 0.4, 0.3)
    spending_reduction_target: float = 0.2
    no_baseline_progress: float = 0.5
    lookback_months: int = 3
    min_monthly_rate: float = 0.01
    fallback_months: int = 36


DEFAULT_ALLOCATION_POLICY = AllocationPolicy()
DEFAULT_GOAL_POLICY = GoalPolicy()
