import pytest
from datetime import date, datetime
from decimal import Decimal
from typing import List

from finance_tracker.aggregation.screening import MalformedTransactionError
from finance_tracker.domain.enums import AlertType, TransactionType
from finance_tracker.domain.models import BudgetCategory
from finance_tracker.insights import AlertThresholds
from finance_tracker.repositories.base import BudgetRepository, TransactionRepository
from finance_tracker.services.finance_service import BudgetCategoryNotFoundError, FinanceService

USER = "user-1"


@pytest.fixture
def mock_transactions(mocker) -> TransactionRepository:
    """Mock transaction repository"""
    return mocker.Mock()


@pytest.fixture
def mock_budgets(mocker, budget_categories) -> BudgetRepository:
    """Mock budget repository that echoes whatever it is asked to save"""
    repository = mocker.Mock()
    repository.list_budgets.return_value = budget_categories
    repository.get_monthly_budget.return_value = Decimal("2300")
    repository.save_budgets.side_effect = lambda user_id, budgets: list(budgets)
    return repository


@pytest.fixture
def service(mock_transactions, mock_budgets, reconciler) -> FinanceService:
    return FinanceService(
        transactions=mock_transactions,
        budgets=mock_budgets,
        reconciler=reconciler,
        alert_thresholds=AlertThresholds(high_spending_threshold=Decimal("1000")),
    )


@pytest.mark.unit
class TestFinanceServiceTransactions:
    """Test transaction operations"""

    def test_get_transactions_calls_repository(self, service, mock_transactions, make_transaction):
        """Test that get_transactions delegates to the repository"""
        # Arrange
        transactions = [make_transaction(5)]
        mock_transactions.list_transactions.return_value = transactions

        # Act
        result = service.get_transactions(
            USER,
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 31),
            transaction_type=TransactionType.EXPENSE,
        )

        # Assert
        mock_transactions.list_transactions.assert_called_once_with(
            USER,
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 31),
            transaction_type=TransactionType.EXPENSE,
        )
        assert result == transactions

    def test_add_transaction_reconciles_expense_label(self, service, mock_transactions):
        # Arrange
        mock_transactions.create_transaction.side_effect = lambda user_id, txn: txn

        # Act
        saved = service.add_transaction(
            USER, Decimal("12.30"), TransactionType.EXPENSE, "transportation", date(2025, 1, 3), "Bus",
        )

        # Assert
        user_id, created = mock_transactions.create_transaction.call_args.args
        assert user_id == USER
        assert created is saved
        assert created.category.id == "transport"
        assert created.category.name == "Transportation"
        assert created.amount == Decimal("12.30")
        assert created.description == "Bus"

    def test_add_income_keeps_label(self, service, mock_transactions, mock_budgets):
        mock_transactions.create_transaction.side_effect = lambda user_id, txn: txn

        saved = service.add_transaction(USER, Decimal("5000"), TransactionType.INCOME, " Salary ", date(2025, 1, 1))

        assert saved.category.id == "salary"
        assert saved.category.name == "Salary"
        assert saved.category.type == TransactionType.INCOME
        mock_budgets.list_budgets.assert_not_called()

    def test_add_unmatched_expense_label(self, service):
        category = service.resolve_category(USER, "Crypto", TransactionType.EXPENSE)

        assert (category.id, category.name) == ("crypto", "Crypto")

    def test_add_negative_amount_rejected(self, service, mock_transactions):
        with pytest.raises(MalformedTransactionError):
            service.add_transaction(USER, Decimal("-1"), TransactionType.EXPENSE, "food", date(2025, 1, 1))

        mock_transactions.create_transaction.assert_not_called()

    def test_delete_transaction(self, service, mock_transactions):
        service.delete_transaction(USER, "42")

        mock_transactions.delete_transaction.assert_called_once_with(USER, "42")

    def test_update_transaction(self, service, mock_transactions, make_transaction):
        txn = make_transaction(5)
        mock_transactions.update_transaction.return_value = txn

        assert service.update_transaction(USER, txn) is txn
        mock_transactions.update_transaction.assert_called_once_with(USER, txn)


@pytest.mark.unit
class TestFinanceServiceSummaries:
    """Test summaries delegate to the aggregation engine"""

    def test_get_stats(self, service, mock_transactions, make_transaction):
        # Arrange
        mock_transactions.list_transaction_records.return_value = [
            make_transaction(1000, TransactionType.INCOME),
            make_transaction(250),
        ]

        # Act
        stats = service.get_stats(USER)

        # Assert
        assert stats.total_income == Decimal("1000")
        assert stats.total_expense == Decimal("250")
        assert stats.balance == Decimal("750")

    def test_get_stats_skips_corrupt_records(self, service, mock_transactions, make_transaction):
        """Test that one unreadable stored record does not break the totals"""
        # Arrange
        mock_transactions.list_transaction_records.return_value = [
            make_transaction(500, TransactionType.INCOME),
            {"id": 2, "amount": "abc", "type": "expense", "category": {"id": "food"}, "date": "2025-01-02"},
        ]

        # Act
        stats = service.get_stats(USER)

        # Assert
        assert stats.total_income == Decimal("500")
        assert stats.total_expense == Decimal("0")
        assert stats.skipped == 1

    def test_get_monthly_trend(self, service, mock_transactions, make_transaction):
        mock_transactions.list_transaction_records.return_value = [make_transaction(10, on=date(2025, 1, 5))]

        buckets = service.get_monthly_trend(USER, months=2, end=date(2025, 1, 20))

        assert [b.month for b in buckets] == ["2024-12", "2025-01"]
        assert buckets[1].expense == Decimal("10")

    def test_get_category_summary(self, service, mock_transactions, make_transaction, transport):
        mock_transactions.list_transaction_records.return_value = [
            make_transaction(100),
            make_transaction(100, category=transport),
        ]

        summary = service.get_category_summary(USER)

        assert [s.category_id for s in summary] == ["transport", "food"]


@pytest.mark.unit
class TestFinanceServiceBudgets:
    """Test budget operations"""

    def test_get_budget_status_queries_month(self, service, mock_transactions, make_transaction):
        # Arrange
        mock_transactions.list_transaction_records.return_value = [
            make_transaction(40, on=date(2025, 1, 10)),
            make_transaction(60, on=date(2025, 2, 1)),
        ]

        # Act
        status = service.get_budget_status(USER, 2025, 1)

        # Assert
        mock_transactions.list_transaction_records.assert_called_once_with(
            USER,
            start_date=date(2025, 1, 1),
            end_date=date(2025, 2, 1),
            transaction_type=TransactionType.EXPENSE,
        )
        assert {b.id: b.current_spent for b in status}["food"] == Decimal("40")

    def test_get_budget_overview(self, service, mock_transactions, make_transaction):
        mock_transactions.list_transaction_records.return_value = [make_transaction(150)]

        overview = service.get_budget_overview(USER, 2025, 1)

        assert overview.monthly_budget == Decimal("2300")
        assert overview.total_budget == Decimal("800")
        assert overview.total_spent == Decimal("150")
        assert [b.id for b in overview.over_budget] == ["food"]

    def test_auto_distribute_current_budget(self, service, mock_budgets):
        # Act
        distributed = service.auto_distribute(USER)

        # Assert
        mock_budgets.set_monthly_budget.assert_not_called()
        mock_budgets.save_budgets.assert_called_once_with(USER, distributed)
        assert distributed[0].budget_limit == Decimal("291")
        assert sum(b.budget_limit for b in distributed) == Decimal("2300")

    def test_auto_distribute_new_total(self, service, mock_budgets):
        distributed = service.auto_distribute(USER, Decimal("800"))

        mock_budgets.set_monthly_budget.assert_called_once_with(USER, Decimal("800"))
        assert [b.budget_limit for b in distributed] == [Decimal("100")] * 8

    def test_set_budget_limit(self, service):
        updated = service.set_budget_limit(USER, "housing", Decimal("900"))

        assert {b.id: b.budget_limit for b in updated}["housing"] == Decimal("900")
        assert {b.id: b.budget_limit for b in updated}["food"] == Decimal("100")

    def test_set_budget_limit_unknown(self, service, mock_budgets):
        with pytest.raises(BudgetCategoryNotFoundError):
            service.set_budget_limit(USER, "pets", Decimal("10"))

        mock_budgets.save_budgets.assert_not_called()

    def test_add_budget_category(self, service, mock_budgets, budget_categories):
        category = service.add_budget_category(USER, "Pets", Decimal("50"))

        saved: List[BudgetCategory] = mock_budgets.save_budgets.call_args.args[1]
        assert saved[-1] is category
        assert len(saved) == len(budget_categories) + 1
        assert category.is_custom is True

    def test_remove_budget_category(self, service):
        remaining = service.remove_budget_category(USER, "other")

        assert "other" not in {b.id for b in remaining}
        assert len(remaining) == 7

    def test_remove_unknown_budget_category(self, service):
        with pytest.raises(BudgetCategoryNotFoundError):
            service.remove_budget_category(USER, "pets")


@pytest.mark.unit
class TestFinanceServiceAlerts:

    def test_get_alerts(self, service, mock_transactions, make_transaction):
        # Arrange
        mock_transactions.list_transaction_records.return_value = [make_transaction(1200, on=date(2025, 1, 10))]

        # Act
        alerts = service.get_alerts(USER, datetime(2025, 1, 15, 12, 0))

        # Assert
        assert {a.type for a in alerts} == {AlertType.UNUSUAL_SPENDING, AlertType.BUDGET_LIMIT}
        assert "Food & Dining is over budget by $1,100.00" in [a.message for a in alerts]

    def test_get_alerts_keeps_existing(self, service, mock_transactions, make_transaction):
        mock_transactions.list_transaction_records.return_value = [make_transaction(1200, on=date(2025, 1, 10))]
        first = service.get_alerts(USER, datetime(2025, 1, 15))

        second = service.get_alerts(USER, datetime(2025, 1, 16), existing=first)

        assert [a.id for a in second] == [a.id for a in first]
