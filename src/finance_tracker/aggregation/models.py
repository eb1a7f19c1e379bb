"""
Derived views produced by the aggregation engine.

These are recomputed from scratch on every call and never persisted.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List

from finance_tracker.domain.models import BudgetCategory, Transaction

ZERO = Decimal("0")


@dataclass(frozen=True)
class Stats:
    """Income, expense and balance over a set of transactions"""
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    income_count: int = 0
    expense_count: int = 0
    skipped: int = 0

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense


@dataclass(frozen=True)
class MonthlyBucket:
    """Income and expense totals for one calendar month"""
    month: str  # YYYY-MM
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class CategorySummary:
    """Amount spent (or earned) in one category and its share of the total"""
    category_id: str
    category_name: str
    amount: Decimal
    color: str
    percentage: int


@dataclass(frozen=True)
class BudgetOverview:
    """Monthly budget totals across all budget categories"""
    monthly_budget: Decimal
    total_budget: Decimal
    total_spent: Decimal
    overall_progress: Decimal
    over_budget: List[BudgetCategory] = field(default_factory=list)

    @property
    def remaining(self) -> Decimal:
        """What is left of the monthly budget (negative when overspent)"""
        return self.monthly_budget - self.total_spent

    @property
    def unallocated(self) -> Decimal:
        """Monthly budget not yet assigned to a category"""
        return self.monthly_budget - self.total_budget


@dataclass(frozen=True)
class RejectedRecord:
    """An input record excluded from aggregation, and why"""
    record: Any
    reason: str


@dataclass
class ScreenResult:
    """
    Outcome of screening raw input before aggregation.

    Malformed records are set aside rather than aborting the
    computation, so one corrupt row cannot zero out a user's totals.
    """
    valid: List[Transaction] = field(default_factory=list)
    rejected: List[RejectedRecord] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.rejected)
