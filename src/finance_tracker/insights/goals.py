from datetime import date
from decimal import Decimal
from typing import Iterable, List

from finance_tracker.domain.models import FinancialGoal
from finance_tracker.insights.models import GoalProgress


def goal_progress(goal: FinancialGoal) -> Decimal:
    """Percent of the target saved so far; not capped at 100"""
    if goal.target_amount <= 0:
        return Decimal("0")
    return goal.current_amount / goal.target_amount * 100


def days_left(goal: FinancialGoal, today: date) -> int:
    """Days until the target date; negative once it has passed"""
    return (goal.target_date - today).days


def summarize_goals(goals: Iterable[FinancialGoal], today: date) -> List[GoalProgress]:
    """Progress for each goal, soonest target date first"""
    progress = [
        GoalProgress(goal=goal, percentage=goal_progress(goal), days_left=days_left(goal, today))
        for goal in goals
    ]
    return sorted(progress, key=lambda p: (p.goal.target_date, p.goal.id))
