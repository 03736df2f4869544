from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from fincoach_core.domain.models import Category, Goal
from fincoach_core.domain.policy import AllocationPolicy, GoalPolicy

_ALLOCATION_DEFAULTS = AllocationPolicy()
_GOAL_DEFAULTS = GoalPolicy()


def load_allocation_policy(path: str | Path) -> AllocationPolicy:
    """
    Allocation policy from the ``"allocation"`` section of a JSON config.
    Tables are keyed by category value (``"Food"``) and goal label.
    """
    data = _read_json(path).get("allocation", {}) or {}
    d = _ALLOCATION_DEFAULTS

    base = dict(d.base_allocations)
    for key, value in (data.get("base_allocations", {}) or {}).items():
        base[Category.parse(key)] = float(value)

    increases = dict(d.savings_increases)
    for key, value in (data.get("savings_increases", {}) or {}).items():
        increases[_goal_key(key)] = float(value)

    return AllocationPolicy(
        base_allocations=base,
        savings_increases=increases,
        savings_category=Category.parse(data.get("savings_category", d.savings_category.value)),
        primary_threshold=float(data.get("primary_threshold", d.primary_threshold)),
        primary_reduction=float(data.get("primary_reduction", d.primary_reduction)),
        history_weight=float(data.get("history_weight", d.history_weight)),
        normalization_tolerance=float(data.get("normalization_tolerance", d.normalization_tolerance)),
        max_savings_share=float(data.get("max_savings_share", d.max_savings_share)),
    )


def load_goal_policy(path: str | Path) -> GoalPolicy:
    data = _read_json(path).get("goals", {}) or {}
    d = _GOAL_DEFAULTS
    weights = data.get("fi_weights", d.fi_weights)
    if len(weights) != 3:
        raise ValueError(f"fi_weights needs three values, got {weights!r}")
    return GoalPolicy(
        emergency_fund_multiple=float(data.get("emergency_fund_multiple", d.emergency_fund_multiple)),
        debt_income_share=float(data.get("debt_income_share", d.debt_income_share)),
        debt_months=float(data.get("debt_months", d.debt_months)),
        major_purchase_multiple=float(data.get("major_purchase_multiple", d.major_purchase_multiple)),
        investment_multiple=float(data.get("investment_multiple", d.investment_multiple)),
        default_savings_multiple=float(data.get("default_savings_multiple", d.default_savings_multiple)),
        fi_emergency_multiple=float(data.get("fi_emergency_multiple", d.fi_emergency_multiple)),
        fi_investment_multiple=float(data.get("fi_investment_multiple", d.fi_investment_multiple)),
        fi_passive_income_share=float(data.get("fi_passive_income_share", d.fi_passive_income_share)),
        fi_weights=tuple(float(w) for w in weights),
        spending_reduction_target=float(data.get("spending_reduction_target", d.spending_reduction_target)),
        no_baseline_progress=float(data.get("no_baseline_progress", d.no_baseline_progress)),
        lookback_months=int(data.get("lookback_months", d.lookback_months)),
        min_monthly_rate=float(data.get("min_monthly_rate", d.min_monthly_rate)),
        fallback_months=int(data.get("fallback_months", d.fallback_months)),
    )


def _goal_key(key: str) -> Goal:
    if key in Goal.__members__:
        return Goal[key]
    return Goal.from_label(key)


def _read_json(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
