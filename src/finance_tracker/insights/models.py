from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from finance_tracker.domain.models import BillReminder, FinancialGoal


@dataclass(frozen=True)
class GoalProgress:
    """Where a financial goal stands on a given day"""
    goal: FinancialGoal
    percentage: Decimal
    days_left: int

    @property
    def remaining_amount(self) -> Decimal:
        return max(self.goal.target_amount - self.goal.current_amount, Decimal("0"))

    @property
    def is_overdue(self) -> bool:
        return self.days_left < 0 and not self.goal.is_completed


@dataclass
class BillSchedule:
    """Bill reminders split by status relative to a given day"""
    upcoming: List[BillReminder] = field(default_factory=list)
    overdue: List[BillReminder] = field(default_factory=list)
    paid: List[BillReminder] = field(default_factory=list)

    @property
    def amount_due(self) -> Decimal:
        """Total of everything unpaid, overdue or not"""
        return sum((bill.amount for bill in self.upcoming + self.overdue), Decimal("0"))
