from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from finance_tracker.aggregation.models import ZERO, MonthlyBucket
from finance_tracker.aggregation.screening import TransactionRecord, month_key, screen_transactions
from finance_tracker.domain.enums import TransactionType


def trailing_month_keys(months: int, end: date) -> List[str]:
    """
    Keys for the trailing window of calendar months ending at end's month.

    Example:
        trailing_month_keys(3, date(2025, 2, 10)) -> ['2024-12', '2025-01', '2025-02']
    """
    if months < 1:
        raise ValueError(f"months must be at least 1, got {months}")

    last = end.year * 12 + (end.month - 1)
    return [
        f"{index // 12:04d}-{index % 12 + 1:02d}"
        for index in range(last - months + 1, last + 1)
    ]


def compute_monthly_buckets(
    transactions: Iterable[TransactionRecord],
    months: Optional[int] = None,
    end: Optional[date] = None,
) -> List[MonthlyBucket]:
    """
    Income and expense totals per calendar month, oldest month first.

    Without a window, every distinct month present in the input gets a
    bucket. With a window, each of the trailing ``months`` months is
    pre-seeded with zeros (so quiet months still show up) and
    transactions outside the window are ignored.

    Args:
        transactions: Transactions (or raw records) to bucket
        months: Size of the trailing window, or None for no window
        end: Last month of the window; defaults to today

    Returns:
        Buckets ordered by YYYY-MM key, which is also chronological order
    """
    screened = screen_transactions(transactions)

    totals: Dict[str, Dict[TransactionType, Decimal]] = {}
    if months is not None:
        for key in trailing_month_keys(months, end or date.today()):
            totals[key] = {TransactionType.INCOME: ZERO, TransactionType.EXPENSE: ZERO}

    for txn in screened.valid:
        key = month_key(txn.date)
        if key not in totals:
            if months is not None:
                continue
            totals[key] = {TransactionType.INCOME: ZERO, TransactionType.EXPENSE: ZERO}
        totals[key][txn.type] += txn.amount

    return [
        MonthlyBucket(
            month=key,
            income=totals[key][TransactionType.INCOME],
            expense=totals[key][TransactionType.EXPENSE],
        )
        for key in sorted(totals)
    ]
