"""
Smart expense alerts.

Alerts are derived from the current transactions, budget status and
goals each time they are requested; merge_alerts folds them into the
alerts a user already has without repeating a message.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence
from uuid import uuid4

from finance_tracker.aggregation.models import ZERO
from finance_tracker.aggregation.screening import (
    TransactionRecord,
    month_key,
    screen_transactions,
)
from finance_tracker.config.settings import ConfigLoader
from finance_tracker.domain.enums import AlertPriority, AlertType, TransactionType
from finance_tracker.domain.models import BudgetCategory, ExpenseAlert, FinancialGoal
from finance_tracker.insights.goals import days_left
from finance_tracker.presentation.formatting import FormatOptions, format_currency


@dataclass(frozen=True)
class AlertThresholds:
    high_spending_threshold: Decimal = Decimal("50000")
    goal_deadline_days: int = 7

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "AlertThresholds":
        """
        Build thresholds from config.

        Args:
            config: Optional config dict. If None, loads from ConfigLoader.
        """
        if config is None:
            config = ConfigLoader.load_alert_thresholds()

        return cls(
            high_spending_threshold=Decimal(str(config.get("high_spending_threshold", "50000"))),
            goal_deadline_days=int(config.get("goal_deadline_days", 7)),
        )


def _new_alert(
    alert_type: AlertType,
    message: str,
    priority: AlertPriority,
    now: datetime,
) -> ExpenseAlert:
    return ExpenseAlert(
        id=f"alert-{uuid4().hex[:12]}",
        type=alert_type,
        message=message,
        created_at=now,
        priority=priority,
    )


def generate_smart_alerts(
    transactions: Iterable[TransactionRecord],
    now: datetime,
    budgets: Sequence[BudgetCategory] = (),
    goals: Sequence[FinancialGoal] = (),
    thresholds: Optional[AlertThresholds] = None,
    format_options: FormatOptions = FormatOptions(),
) -> List[ExpenseAlert]:
    """
    Derive alerts from spending, budgets and goals.

    - Unusual spending (high priority) when this month's expenses exceed
      the configured threshold
    - Budget limit (high priority) for each budget category spent past its limit
    - Goal deadline (medium priority) for unfinished goals whose target
      date is within the configured number of days

    Args:
        transactions: Transactions (or raw records) to inspect
        now: Current time; also decides which month is "this month"
        budgets: Budget categories with current_spent already populated
        goals: Financial goals
        thresholds: Alert thresholds; defaults to the bundled config
        format_options: How amounts appear in alert messages

    Returns:
        Newly generated alerts
    """
    if thresholds is None:
        thresholds = AlertThresholds.from_config()

    alerts: List[ExpenseAlert] = []
    this_month = month_key(now)

    spent_this_month = sum(
        (
            txn.amount
            for txn in screen_transactions(transactions).valid
            if txn.type == TransactionType.EXPENSE and month_key(txn.date) == this_month
        ),
        ZERO,
    )
    if spent_this_month > thresholds.high_spending_threshold:
        alerts.append(_new_alert(
            AlertType.UNUSUAL_SPENDING,
            f"High spending detected this month: {format_currency(spent_this_month, format_options)}",
            AlertPriority.HIGH,
            now,
        ))

    for budget in budgets:
        if budget.is_over_budget:
            alerts.append(_new_alert(
                AlertType.BUDGET_LIMIT,
                f"{budget.name} is over budget by "
                f"{format_currency(budget.current_spent - budget.budget_limit, format_options)}",
                AlertPriority.HIGH,
                now,
            ))

    today = now.date()
    for goal in goals:
        if goal.is_completed:
            continue
        remaining_days = days_left(goal, today)
        if 0 <= remaining_days <= thresholds.goal_deadline_days:
            alerts.append(_new_alert(
                AlertType.GOAL_DEADLINE,
                f"Goal '{goal.title}' is due in {remaining_days} day{'s' if remaining_days != 1 else ''}",
                AlertPriority.MEDIUM,
                now,
            ))

    return alerts


def merge_alerts(existing: Iterable[ExpenseAlert], new: Iterable[ExpenseAlert]) -> List[ExpenseAlert]:
    """
    Combine alert lists, dropping repeated messages.

    The first alert carrying a message wins, so existing alerts (and
    their read state) are kept over freshly generated duplicates.

    Returns:
        Alerts newest first
    """
    seen = set()
    merged = []
    for alert in [*existing, *new]:
        if alert.message in seen:
            continue
        seen.add(alert.message)
        merged.append(alert)

    return sorted(merged, key=lambda a: a.created_at, reverse=True)


def mark_alert_read(alerts: Iterable[ExpenseAlert], alert_id: str) -> List[ExpenseAlert]:
    """Copy of the alerts with the given one marked read; unknown ids change nothing"""
    return [replace(alert, is_read=True) if alert.id == alert_id else alert for alert in alerts]


def unread_alerts(alerts: Iterable[ExpenseAlert]) -> List[ExpenseAlert]:
    return [alert for alert in alerts if not alert.is_read]
