from calendar import monthrange
from datetime import date, timedelta
from typing import Iterable, Optional

from finance_tracker.domain.enums import RecurringType
from finance_tracker.domain.models import BillReminder
from finance_tracker.insights.models import BillSchedule


def days_until_due(bill: BillReminder, today: date) -> int:
    """Days until the bill is due; negative when overdue"""
    return (bill.due_date - today).days


def split_bills(bills: Iterable[BillReminder], today: date) -> BillSchedule:
    """
    Split bills into upcoming, overdue and paid.

    Upcoming bills are ordered by due date; overdue bills most overdue first.
    """
    schedule = BillSchedule()

    for bill in bills:
        if bill.is_paid:
            schedule.paid.append(bill)
        elif days_until_due(bill, today) >= 0:
            schedule.upcoming.append(bill)
        else:
            schedule.overdue.append(bill)

    schedule.upcoming.sort(key=lambda b: (b.due_date, b.id))
    schedule.overdue.sort(key=lambda b: (b.due_date, b.id))
    return schedule


def _add_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    year, month = index // 12, index % 12 + 1
    _, last_day = monthrange(year, month)
    return date(year, month, min(day.day, last_day))


def next_due_date(bill: BillReminder) -> Optional[date]:
    """
    Due date of the next occurrence of a recurring bill.

    Month-end dates are clamped, so a bill due Jan 31 next falls due Feb 28
    (or 29). Returns None for one-off bills.
    """
    if not bill.is_recurring or bill.recurring_type is None:
        return None

    if bill.recurring_type == RecurringType.WEEKLY:
        return bill.due_date + timedelta(days=7)
    if bill.recurring_type == RecurringType.MONTHLY:
        return _add_months(bill.due_date, 1)
    return _add_months(bill.due_date, 12)
