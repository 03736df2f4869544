from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import uuid
from typing import List, Optional


class TransactionType(str, enum.Enum):
    INCOME = "Income"
    EXPENSE = "Expense"

    @classmethod
    def parse(cls, raw: str) -> "TransactionType":
        txt = str(raw).strip().lower()
        for member in cls:
            if txt in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown transaction type: {raw!r}")


class Category(str, enum.Enum):
    # income
    SALARY = "Salary"
    INVESTMENT = "Investment"
    GIFT = "Gift"
    OTHER = "Other"
    # expense
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    HOUSING = "Housing"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    HEALTH = "Health"
    EDUCATION = "Education"
    TRAVEL = "Travel"
    MISCELLANEOUS = "Miscellaneous"

    @classmethod
    def parse(cls, raw: str) -> "Category":
        txt = str(raw).strip().lower()
        for member in cls:
            if txt in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown category: {raw!r}")

    @classmethod
    def expense_categories(cls) -> List["Category"]:
        """Categories covered by trend analysis and monthly breakdowns."""
        return [
            cls.FOOD,
            cls.TRANSPORTATION,
            cls.ENTERTAINMENT,
            cls.SHOPPING,
            cls.BILLS,
            cls.HEALTH,
            cls.EDUCATION,
            cls.TRAVEL,
            cls.MISCELLANEOUS,
        ]

    @classmethod
    def allocation_categories(cls) -> List["Category"]:
        """Categories of the budget allocation table (expense tags plus housing)."""
        return [
            cls.FOOD,
            cls.TRANSPORTATION,
            cls.HOUSING,
            cls.ENTERTAINMENT,
            cls.SHOPPING,
            cls.BILLS,
            cls.HEALTH,
            cls.EDUCATION,
            cls.TRAVEL,
            cls.MISCELLANEOUS,
        ]


class Goal(enum.Enum):
    EMERGENCY_FUND = "Save for an emergency fund"
    DEBT_PAYOFF = "Pay off debt"
    MAJOR_PURCHASE = "Save for a major purchase"
    INVESTMENT_PORTFOLIO = "Build investment portfolio"
    DAY_TO_DAY_TRACKING = "Track day-to-day expenses"
    REDUCE_SPENDING = "Reduce unnecessary spending"
    FINANCIAL_INDEPENDENCE = "Financial independence"
    OTHER = "Other"

    @classmethod
    def from_label(cls, label: "Goal | str | None") -> "Goal":
        """Map a stored goal label onto a goal; exact, case-sensitive match."""
        if isinstance(label, Goal):
            return label
        for member in cls:
            if member is not cls.OTHER and member.value == label:
                return member
        return cls.OTHER

    @property
    def label(self) -> str:
        return self.value


class TrendDirection(str, enum.Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"

    @classmethod
    def from_change(cls, percentage_change: float) -> "TrendDirection":
        if percentage_change > 5:
            return cls.INCREASING
        if percentage_change < -5:
            return cls.DECREASING
        return cls.STABLE


class RecurringFrequency(str, enum.Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    BIWEEKLY = "Bi-Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    YEARLY = "Yearly"

    @classmethod
    def parse(cls, raw: str) -> "RecurringFrequency":
        txt = str(raw).strip().lower()
        for member in cls:
            if txt in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown recurring frequency: {raw!r}")


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclasses.dataclass(frozen=True)
class Transaction:
    amount: float
    type: TransactionType
    category: Category
    date: dt.datetime
    note: str = ""
    id: str = dataclasses.field(default_factory=_new_id)

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    def note_mentions(self, *keywords: str) -> bool:
        note = self.note.lower()
        return any(k in note for k in keywords)


@dataclasses.dataclass
class Profile:
    name: str = ""
    currency: str = "₹"
    monthly_income: float = 0.0
    monthly_budget: float = 0.0
    financial_goal: str = ""
    primary_expense_category: Category = Category.FOOD

    @property
    def goal(self) -> Goal:
        return Goal.from_label(self.financial_goal)


@dataclasses.dataclass(frozen=True)
class CategoryAllocation:
    category: Category
    amount: float
    percentage: float  # 0..100


@dataclasses.dataclass(frozen=True)
class SavingsPlan:
    monthly_contribution: float
    is_realistic: bool
    adjusted_months: int


@dataclasses.dataclass(frozen=True)
class CategoryAnalytics:
    category: Category
    current_amount: float
    previous_amount: float
    percentage_change: float

    @property
    def trend(self) -> TrendDirection:
        return TrendDirection.from_change(self.percentage_change)


@dataclasses.dataclass(frozen=True)
class GoalProgress:
    goal: Goal
    ratio: float  # 0..1
    months_remaining: int
    target_month: dt.date


@dataclasses.dataclass(frozen=True)
class RecurringTransaction:
    base_transaction: Transaction
    frequency: RecurringFrequency
    start_date: dt.datetime
    end_date: Optional[dt.datetime] = None
    last_processed_date: Optional[dt.datetime] = None
    id: str = dataclasses.field(default_factory=_new_id)
