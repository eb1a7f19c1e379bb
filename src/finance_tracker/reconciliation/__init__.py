"""
Category name reconciliation.

Transaction forms, bill reminders and budget categories label the same
category in different ways ("Transportation", "transport", ...). The
reconciler maps every known spelling to one canonical budget-category id
using an explicit, versioned lookup table.

Quick Start:
    >>> from finance_tracker.reconciliation import CategoryReconciler
    >>>
    >>> reconciler = CategoryReconciler()
    >>> reconciler.resolve("Transportation")
    'transport'
"""
from finance_tracker.reconciliation.reconciler import CategoryReconciler, flatten_table
from finance_tracker.reconciliation.base import ReconciliationRule, ReconciliationTableError
from finance_tracker.reconciliation.rules import (
    CanonicalIdRule,
    CaseInsensitiveAliasRule,
    ExactAliasRule,
    UnmatchedRule,
)

__all__ = [
    "CategoryReconciler",
    "ReconciliationRule",
    "ReconciliationTableError",
    "CanonicalIdRule",
    "CaseInsensitiveAliasRule",
    "ExactAliasRule",
    "UnmatchedRule",
    "flatten_table",
]
