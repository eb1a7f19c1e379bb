"""
Goal, bill-reminder and alert insights.

Like the aggregation engine, these are pure functions over in-memory
domain objects; "today" is always passed in.
"""
from finance_tracker.insights.alerts import (
    AlertThresholds,
    generate_smart_alerts,
    mark_alert_read,
    merge_alerts,
    unread_alerts,
)
from finance_tracker.insights.bills import days_until_due, next_due_date, split_bills
from finance_tracker.insights.goals import days_left, goal_progress, summarize_goals
from finance_tracker.insights.models import BillSchedule, GoalProgress

__all__ = [
    "AlertThresholds",
    "BillSchedule",
    "GoalProgress",
    "days_left",
    "days_until_due",
    "generate_smart_alerts",
    "goal_progress",
    "mark_alert_read",
    "merge_alerts",
    "next_due_date",
    "split_bills",
    "summarize_goals",
    "unread_alerts",
]
