"""
Budget-vs-actual reconciliation and budget distribution.

Transaction category labels and budget category ids are not guaranteed
to agree, so every transaction is routed through a CategoryReconciler
before its spend is attributed to a budget category.
"""
from calendar import monthrange
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal, ROUND_FLOOR
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union
from uuid import uuid4

import structlog

from finance_tracker.aggregation.models import ZERO, BudgetOverview
from finance_tracker.aggregation.screening import (
    TransactionRecord,
    calendar_datetime,
    screen_transactions,
)
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import DEFAULT_COLOR, BudgetCategory, DateLike
from finance_tracker.reconciliation import CategoryReconciler

logger = structlog.get_logger(__name__)

Number = Union[int, Decimal]


def month_period(year: int, month: int) -> Tuple[date, date]:
    """Half-open period [first day of month, first day of next month)"""
    start = date(year, month, 1)
    _, last_day = monthrange(year, month)
    return start, date(year, month, last_day) + timedelta(days=1)


def compute_budget_status(
    budget_categories: Sequence[BudgetCategory],
    transactions: Iterable[TransactionRecord],
    period_start: DateLike,
    period_end: DateLike,
    reconciler: Optional[CategoryReconciler] = None,
) -> List[BudgetCategory]:
    """
    Populate current_spent on each budget category for a period.

    Only expense transactions dated in [period_start, period_end) count.
    Each transaction's category id is resolved to a canonical id; when
    that is not one of the budget categories, its name is tried instead.
    Labels nothing resolves are left out of every category rather than
    raising.

    Args:
        budget_categories: Budget categories to fill in (not modified)
        transactions: Transactions (or raw records) to attribute
        period_start: Inclusive start of the period
        period_end: Exclusive end of the period
        reconciler: Label resolver; defaults to the bundled table

    Returns:
        New BudgetCategory objects in the input order
    """
    if reconciler is None:
        reconciler = CategoryReconciler()

    start = calendar_datetime(period_start)
    end = calendar_datetime(period_end)
    known_ids = frozenset(category.id for category in budget_categories)
    spent: Dict[str, Decimal] = {category_id: ZERO for category_id in known_ids}

    for txn in screen_transactions(transactions).valid:
        if txn.type != TransactionType.EXPENSE:
            continue
        if not start <= calendar_datetime(txn.date) < end:
            continue

        category_id = reconciler.resolve(txn.category.id, known_ids)
        if category_id not in spent:
            category_id = reconciler.resolve(txn.category.name, known_ids)
        if category_id not in spent:
            logger.debug(
                "budget_category_unmatched",
                category_id=txn.category.id,
                category_name=txn.category.name,
                resolved=category_id,
            )
            continue

        spent[category_id] += txn.amount

    return [
        replace(category, current_spent=spent[category.id])
        for category in budget_categories
    ]


def distribute_evenly(total: Number, count: int, unit: Number = 1) -> List[Decimal]:
    """
    Split a total into count equal shares, in whole units.

    Each share is the total divided by count, rounded down to a multiple
    of unit. Whatever is left over goes entirely to the first share, so
    the shares always add up to the total exactly.

    Example:
        distribute_evenly(100, 3) -> [34, 33, 33]

    Raises:
        ValueError: If count is less than 1, total is negative or unit is not positive
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    total = Decimal(total)
    unit = Decimal(unit)
    if total < 0:
        raise ValueError(f"total must not be negative, got {total}")
    if unit <= 0:
        raise ValueError(f"unit must be positive, got {unit}")

    share = (total / count / unit).to_integral_value(rounding=ROUND_FLOOR) * unit
    remainder = total - share * count

    return [share + remainder] + [share] * (count - 1)


def auto_distribute_budget(
    total_budget: Number,
    categories: Sequence[BudgetCategory],
    unit: Number = 1,
) -> List[BudgetCategory]:
    """
    Spread a monthly budget evenly across categories.

    The remainder of the division lands on the first category.

    Returns:
        New BudgetCategory objects with budget_limit replaced, or an empty
        list when there are no categories
    """
    if not categories:
        return []

    shares = distribute_evenly(total_budget, len(categories), unit)
    return [
        replace(category, budget_limit=share)
        for category, share in zip(categories, shares)
    ]


def budget_progress(spent: Number, limit: Number) -> Decimal:
    """Percent of limit spent, capped at 100; 0 for a non-positive limit"""
    limit = Decimal(limit)
    if limit <= 0:
        return ZERO
    return min(Decimal(spent) / limit * 100, Decimal(100))


def summarize_budget(
    categories: Sequence[BudgetCategory],
    monthly_budget: Number,
) -> BudgetOverview:
    """Totals across budget categories against the overall monthly budget"""
    total_budget = sum((category.budget_limit for category in categories), ZERO)
    total_spent = sum((category.current_spent for category in categories), ZERO)

    return BudgetOverview(
        monthly_budget=Decimal(monthly_budget),
        total_budget=total_budget,
        total_spent=total_spent,
        overall_progress=budget_progress(total_spent, total_budget),
        over_budget=[category for category in categories if category.is_over_budget],
    )


def new_custom_category(
    name: str,
    budget_limit: Number,
    existing: Sequence[BudgetCategory],
    palette: Sequence[str] = (),
) -> BudgetCategory:
    """
    Create a user-defined budget category.

    The colour cycles through the palette by how many categories exist.

    Raises:
        ValueError: If the name is blank
    """
    name = name.strip()
    if not name:
        raise ValueError("Category name must not be empty")

    color = palette[len(existing) % len(palette)] if palette else DEFAULT_COLOR
    return BudgetCategory(
        id=f"custom-{uuid4().hex[:12]}",
        name=name,
        budget_limit=Decimal(budget_limit),
        color=color,
        is_custom=True,
    )
