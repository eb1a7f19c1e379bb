from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Optional

import structlog

from finance_tracker.aggregation import (
    BudgetOverview,
    CategorySummary,
    MonthlyBucket,
    Stats,
    auto_distribute_budget,
    coerce_transaction,
    compute_budget_status,
    compute_category_summary,
    compute_monthly_buckets,
    compute_stats,
    month_period,
    new_custom_category,
    summarize_budget,
)
from finance_tracker.aggregation.screening import TransactionRecord
from finance_tracker.config.settings import ConfigLoader
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import (
    BudgetCategory,
    Category,
    ExpenseAlert,
    FinancialGoal,
    Transaction,
)
from finance_tracker.insights import AlertThresholds, generate_smart_alerts, merge_alerts
from finance_tracker.presentation.formatting import FormatOptions
from finance_tracker.reconciliation import CategoryReconciler
from finance_tracker.repositories.base import BudgetRepository, TransactionRepository

logger = structlog.get_logger(__name__)


class BudgetCategoryNotFoundError(Exception):
    """Raised when a budget category id is not in the user's budget."""
    pass


class FinanceService:
    """
    Fetches a user's data from the repositories and hands it to the
    aggregation engine.

    The service owns no state of its own beyond its collaborators.
    """

    def __init__(
        self,
        transactions: TransactionRepository,
        budgets: BudgetRepository,
        reconciler: Optional[CategoryReconciler] = None,
        alert_thresholds: Optional[AlertThresholds] = None,
    ):
        self.transactions = transactions
        self.budgets = budgets
        self._reconciler = reconciler
        self._alert_thresholds = alert_thresholds

    @property
    def reconciler(self) -> CategoryReconciler:
        """Lazy-load the category reconciler"""
        if self._reconciler is None:
            self._reconciler = CategoryReconciler()
        return self._reconciler

    @property
    def alert_thresholds(self) -> AlertThresholds:
        """Lazy-load alert thresholds"""
        if self._alert_thresholds is None:
            self._alert_thresholds = AlertThresholds.from_config()
        return self._alert_thresholds

    # ── Transactions ─────────────────────────────────────────────

    def resolve_category(
        self,
        user_id: str,
        label: str,
        transaction_type: TransactionType,
    ) -> Category:
        """
        Build a Category for a label typed by the user.

        Expense labels that reconcile to one of the user's budget categories
        take that category's id, name and colour, so "Transportation" and
        "transport" end up as the same category.
        """
        if transaction_type == TransactionType.EXPENSE:
            budgets = self.budgets.list_budgets(user_id)
            category_id = self.reconciler.resolve(label, {b.id for b in budgets})
            for budget in budgets:
                if budget.id == category_id:
                    return Category(
                        id=budget.id,
                        name=budget.name,
                        type=transaction_type,
                        color=budget.color,
                    )

        label = label.strip()
        return Category(id=label.lower(), name=label, type=transaction_type)

    def add_transaction(
        self,
        user_id: str,
        amount: Decimal,
        transaction_type: TransactionType,
        category: str,
        transaction_date: date,
        description: str = "",
    ) -> Transaction:
        """
        Record a new transaction.

        Raises:
            MalformedTransactionError: If the amount, type or date is invalid
        """
        transaction = coerce_transaction({
            "amount": amount,
            "type": transaction_type,
            "category": self.resolve_category(user_id, category, transaction_type),
            "date": transaction_date,
            "description": description,
        })
        saved = self.transactions.create_transaction(user_id, transaction)
        logger.info("transaction_created", user_id=user_id, transaction_id=saved.id)
        return saved

    def get_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        """
        Query a user's transactions with optional filters.

        Example:
            ### Get all January 2025 expenses
            transactions = service.get_transactions(
                user_id,
                start_date=date(2025, 1, 1),
                end_date=date(2025, 1, 31),
                transaction_type=TransactionType.EXPENSE
            )
        """
        return self.transactions.list_transactions(
            user_id,
            start_date=start_date,
            end_date=end_date,
            transaction_type=transaction_type,
        )

    def _records(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> List[TransactionRecord]:
        """Unvalidated records for the engine, which skips and counts corrupt ones"""
        return self.transactions.list_transaction_records(
            user_id,
            start_date=start_date,
            end_date=end_date,
            transaction_type=transaction_type,
        )

    def update_transaction(self, user_id: str, transaction: Transaction) -> Transaction:
        return self.transactions.update_transaction(user_id, coerce_transaction(transaction))

    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        self.transactions.delete_transaction(user_id, transaction_id)
        logger.info("transaction_deleted", user_id=user_id, transaction_id=transaction_id)

    # ── Summaries ────────────────────────────────────────────────

    def get_stats(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Stats:
        return compute_stats(self._records(user_id, start_date, end_date))

    def get_monthly_trend(
        self,
        user_id: str,
        months: Optional[int] = None,
        end: Optional[date] = None,
    ) -> List[MonthlyBucket]:
        """Monthly income/expense buckets, optionally for a trailing window"""
        return compute_monthly_buckets(self._records(user_id), months=months, end=end)

    def get_category_summary(
        self,
        user_id: str,
        transaction_type: TransactionType = TransactionType.EXPENSE,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[CategorySummary]:
        return compute_category_summary(
            self._records(user_id, start_date, end_date),
            transaction_type,
        )

    # ── Budgets ──────────────────────────────────────────────────

    def get_budget_status(self, user_id: str, year: int, month: int) -> List[BudgetCategory]:
        """Budget categories with what was spent against each in the month"""
        period_start, period_end = month_period(year, month)
        transactions = self._records(
            user_id,
            start_date=period_start,
            end_date=period_end,
            transaction_type=TransactionType.EXPENSE,
        )
        return compute_budget_status(
            self.budgets.list_budgets(user_id),
            transactions,
            period_start,
            period_end,
            reconciler=self.reconciler,
        )

    def get_budget_overview(self, user_id: str, year: int, month: int) -> BudgetOverview:
        return summarize_budget(
            self.get_budget_status(user_id, year, month),
            self.budgets.get_monthly_budget(user_id),
        )

    def auto_distribute(self, user_id: str, total_budget: Optional[Decimal] = None) -> List[BudgetCategory]:
        """
        Spread the monthly budget evenly over the user's categories and save it.

        Args:
            user_id: Owner of the budget
            total_budget: New monthly budget; defaults to the current one
        """
        if total_budget is None:
            total_budget = self.budgets.get_monthly_budget(user_id)
        else:
            self.budgets.set_monthly_budget(user_id, total_budget)

        distributed = auto_distribute_budget(total_budget, self.budgets.list_budgets(user_id))
        return self.budgets.save_budgets(user_id, distributed)

    def set_budget_limit(self, user_id: str, category_id: str, amount: Decimal) -> List[BudgetCategory]:
        """
        Change the limit of one budget category.

        Raises:
            BudgetCategoryNotFoundError: If the category is not in the budget
        """
        budgets = self.budgets.list_budgets(user_id)
        if category_id not in {b.id for b in budgets}:
            raise BudgetCategoryNotFoundError(f"Budget category '{category_id}' not found")

        updated = [
            replace(b, budget_limit=Decimal(amount)) if b.id == category_id else b
            for b in budgets
        ]
        return self.budgets.save_budgets(user_id, updated)

    def add_budget_category(self, user_id: str, name: str, amount: Decimal) -> BudgetCategory:
        budgets = self.budgets.list_budgets(user_id)
        palette = ConfigLoader.load_budget_defaults().get("palette", [])
        category = new_custom_category(name, amount, budgets, palette)
        self.budgets.save_budgets(user_id, [*budgets, category])
        return category

    def remove_budget_category(self, user_id: str, category_id: str) -> List[BudgetCategory]:
        """
        Remove a budget category.

        Raises:
            BudgetCategoryNotFoundError: If the category is not in the budget
        """
        budgets = self.budgets.list_budgets(user_id)
        remaining = [b for b in budgets if b.id != category_id]
        if len(remaining) == len(budgets):
            raise BudgetCategoryNotFoundError(f"Budget category '{category_id}' not found")
        return self.budgets.save_budgets(user_id, remaining)

    # ── Alerts ───────────────────────────────────────────────────

    def get_alerts(
        self,
        user_id: str,
        now: datetime,
        existing: Iterable[ExpenseAlert] = (),
        goals: Iterable[FinancialGoal] = (),
        format_options: FormatOptions = FormatOptions(),
    ) -> List[ExpenseAlert]:
        """Fresh smart alerts merged into the user's existing ones, newest first"""
        generated = generate_smart_alerts(
            self._records(user_id),
            now,
            budgets=self.get_budget_status(user_id, now.year, now.month),
            goals=list(goals),
            thresholds=self.alert_thresholds,
            format_options=format_options,
        )
        return merge_alerts(existing, generated)
