from fincoach_core.services.allocation import compute_allocations, compute_savings_plan  # noqa: F401
from fincoach_core.services.goals import goal_progress, goal_status, months_to_goal  # noqa: F401
from fincoach_core.services.projection import project_savings  # noqa: F401
from fincoach_core.services.recurring import expand_recurring, schedule_recurring  # noqa: F401
from fincoach_core.services.trends import smart_insights, spending_trends  # noqa: F401

__all__ = [
    "compute_allocations",
    "compute_savings_plan",
    "goal_progress",
    "goal_status",
    "months_to_goal",
    "spending_trends",
    "smart_insights",
    "project_savings",
    "expand_recurring",
    "schedule_recurring",
]
