from fincoach_core.domain.models import (  # noqa: F401
    Category,
    CategoryAllocation,
    CategoryAnalytics,
    Goal,
    GoalProgress,
    Profile,
    RecurringFrequency,
    RecurringTransaction,
    SavingsPlan,
    Transaction,
    TransactionType,
    TrendDirection,
)
from fincoach_core.domain.policy import AllocationPolicy, GoalPolicy  # noqa: F401

__all__ = [
    "AllocationPolicy",
    "Category",
    "CategoryAllocation",
    "CategoryAnalytics",
    "Goal",
    "GoalPolicy",
    "GoalProgress",
    "Profile",
    "RecurringFrequency",
    "RecurringTransaction",
    "SavingsPlan",
    "Transaction",
    "TransactionType",
    "TrendDirection",
]
