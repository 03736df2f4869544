from __future__ import annotations

import math
from typing import List


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def project_savings(
    current_savings: float,
    monthly_contribution: float,
    annual_growth_rate: float,
    months: int,
) -> List[float]:
    """
    Month-end balances: each month the contribution is added first, then the
    monthly share of the annual rate is compounded onto the running total.
    """
    if months <= 0:
        return []

    balance = _finite(current_savings)
    contribution = _finite(monthly_contribution)
    monthly_rate = _finite(annual_growth_rate) / 12

    balances: List[float] = []
    for _ in range(months):
        balance += contribution
        balance += balance * monthly_rate
        balances.append(balance)
    return balances
