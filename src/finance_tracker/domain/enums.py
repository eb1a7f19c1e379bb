from enum import Enum

class TransactionType(Enum):
    """Represents whether money is coming in or going out"""
    INCOME = "income"
    EXPENSE = "expense"


class RecurringType(Enum):
    """How often a recurring bill comes due"""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class AlertType(Enum):
    BUDGET_LIMIT = "budget_limit"
    UNUSUAL_SPENDING = "unusual_spending"
    GOAL_DEADLINE = "goal_deadline"


class AlertPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
