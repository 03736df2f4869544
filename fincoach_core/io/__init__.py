from fincoach_core.io.config import load_allocation_policy, load_goal_policy  # noqa: F401
from fincoach_core.io.ledger import LedgerStore, load_ledger, save_ledger_blob  # noqa: F401
from fincoach_core.io.profile import load_profile, load_recurring, save_profile, save_recurring  # noqa: F401

__all__ = [
    "LedgerStore",
    "load_allocation_policy",
    "load_goal_policy",
    "load_ledger",
    "load_profile",
    "load_recurring",
    "save_ledger_blob",
    "save_profile",
    "save_recurring",
]
