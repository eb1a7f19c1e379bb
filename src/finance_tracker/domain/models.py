from dataclasses import dataclass
from decimal import Decimal
from datetime import date, datetime
from typing import Optional, Union

from finance_tracker.domain.enums import (
    AlertPriority,
    AlertType,
    RecurringType,
    TransactionType,
)

DateLike = Union[date, datetime]

DEFAULT_COLOR = "#607D8B"


@dataclass(frozen=True)
class Category:
    """A named, coloured label partitioning transactions for reporting"""
    id: str
    name: str
    type: TransactionType
    color: str = DEFAULT_COLOR


@dataclass(frozen=True)
class Transaction:
    """Core domain model representing a single dated money movement"""
    amount: Decimal
    type: TransactionType
    category: Category
    date: DateLike
    description: str = ""
    receipt_url: Optional[str] = None
    id: Optional[str] = None

    @property
    def signed_amount(self) -> Decimal:
        """Return amount with sign for net calculations"""
        return self.amount if self.type == TransactionType.INCOME else -self.amount

    def __repr__(self):
        sign = "+" if self.type == TransactionType.INCOME else "-"
        return f"Transaction({self.date}, {self.category.id}, {self.description[:30]}, {sign}{self.amount})"


@dataclass(frozen=True)
class BudgetCategory:
    """A spending limit for one canonical category, with what was spent against it"""
    id: str
    name: str
    budget_limit: Decimal
    current_spent: Decimal = Decimal("0")
    color: str = DEFAULT_COLOR
    is_custom: bool = False

    @property
    def is_over_budget(self) -> bool:
        return self.current_spent > self.budget_limit

    @property
    def remaining(self) -> Decimal:
        return self.budget_limit - self.current_spent


@dataclass(frozen=True)
class FinancialGoal:
    id: str
    title: str
    target_amount: Decimal
    current_amount: Decimal
    target_date: date
    category: Optional[str] = None
    description: Optional[str] = None
    is_completed: bool = False


@dataclass(frozen=True)
class BillReminder:
    id: str
    title: str
    amount: Decimal
    due_date: date
    category: Category
    is_recurring: bool = False
    recurring_type: Optional[RecurringType] = None
    is_paid: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class ExpenseAlert:
    id: str
    type: AlertType
    message: str
    created_at: datetime
    priority: AlertPriority = AlertPriority.LOW
    is_read: bool = False
