"""
Aggregation engine.

Pure functions that turn already-loaded transactions (and budget
categories) into derived views: stats, monthly buckets, category
summaries and budget-vs-actual. No I/O beyond reading the bundled
reconciliation table, no shared state; safe to call from any thread.

Quick Start:
    >>> from finance_tracker.aggregation import compute_stats, compute_category_summary
    >>>
    >>> stats = compute_stats(transactions)
    >>> print(stats.balance)
"""
from finance_tracker.aggregation.budgets import (
    auto_distribute_budget,
    budget_progress,
    compute_budget_status,
    distribute_evenly,
    month_period,
    new_custom_category,
    summarize_budget,
)
from finance_tracker.aggregation.categories import compute_category_summary, percentage_of
from finance_tracker.aggregation.models import (
    BudgetOverview,
    CategorySummary,
    MonthlyBucket,
    RejectedRecord,
    ScreenResult,
    Stats,
)
from finance_tracker.aggregation.monthly import compute_monthly_buckets, trailing_month_keys
from finance_tracker.aggregation.screening import (
    MalformedTransactionError,
    coerce_transaction,
    screen_transactions,
)
from finance_tracker.aggregation.stats import compute_stats

__all__ = [
    "BudgetOverview",
    "CategorySummary",
    "MalformedTransactionError",
    "MonthlyBucket",
    "RejectedRecord",
    "ScreenResult",
    "Stats",
    "auto_distribute_budget",
    "budget_progress",
    "coerce_transaction",
    "compute_budget_status",
    "compute_category_summary",
    "compute_monthly_buckets",
    "compute_stats",
    "distribute_evenly",
    "month_period",
    "new_custom_category",
    "percentage_of",
    "screen_transactions",
    "summarize_budget",
    "trailing_month_keys",
]
