from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List

from finance_tracker.aggregation.models import ZERO, CategorySummary
from finance_tracker.aggregation.screening import TransactionRecord, parse_type, screen_transactions
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import Category


def percentage_of(amount: Decimal, total: Decimal) -> int:
    """Whole-number share of total, rounding halves up; 0 when total is 0"""
    if total == 0:
        return 0
    return int((amount * 100 / total).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_category_summary(
    transactions: Iterable[TransactionRecord],
    transaction_type: TransactionType = TransactionType.EXPENSE,
) -> List[CategorySummary]:
    """
    Per-category totals and percentages for one transaction type.

    Name and colour come from the first transaction seen in each
    category. Percentages are rounded independently, so they may add up
    to slightly more or less than 100.

    Args:
        transactions: Transactions (or raw records) to summarize
        transaction_type: INCOME or EXPENSE, as the enum or its string value

    Returns:
        Largest category first; equal amounts are ordered by category id,
        descending. Empty when there is nothing to summarize.

    Raises:
        MalformedTransactionError: If transaction_type is not income or expense
    """
    transaction_type = parse_type(transaction_type)
    screened = screen_transactions(transactions)

    amounts: Dict[str, Decimal] = {}
    details: Dict[str, Category] = {}

    for txn in screened.valid:
        if txn.type != transaction_type:
            continue
        category_id = txn.category.id
        details.setdefault(category_id, txn.category)
        amounts[category_id] = amounts.get(category_id, ZERO) + txn.amount

    total = sum(amounts.values(), ZERO)
    if total == 0:
        return []

    summaries = [
        CategorySummary(
            category_id=category_id,
            category_name=details[category_id].name,
            amount=amount,
            color=details[category_id].color,
            percentage=percentage_of(amount, total),
        )
        for category_id, amount in amounts.items()
    ]

    return sorted(summaries, key=lambda s: (s.amount, s.category_id), reverse=True)
