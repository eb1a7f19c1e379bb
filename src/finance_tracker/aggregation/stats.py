from typing import Iterable

from finance_tracker.aggregation.models import ZERO, Stats
from finance_tracker.aggregation.screening import TransactionRecord, screen_transactions
from finance_tracker.domain.enums import TransactionType


def compute_stats(transactions: Iterable[TransactionRecord]) -> Stats:
    """
    Total income, total expense and balance.

    Order of the input is irrelevant and empty input yields all zeros.
    The balance may be negative.

    Args:
        transactions: Transactions (or raw records) to total

    Returns:
        Stats, with the number of malformed records skipped
    """
    screened = screen_transactions(transactions)

    total_income = ZERO
    total_expense = ZERO
    income_count = 0
    expense_count = 0

    for txn in screened.valid:
        if txn.type == TransactionType.INCOME:
            total_income += txn.amount
            income_count += 1
        else:
            total_expense += txn.amount
            expense_count += 1

    return Stats(
        total_income=total_income,
        total_expense=total_expense,
        income_count=income_count,
        expense_count=expense_count,
        skipped=screened.skipped,
    )
