import pytest
from datetime import date
from decimal import Decimal

from finance_tracker.config.settings import CONFIG_DIR_ENV_VAR
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import BudgetCategory, Category, Transaction
from finance_tracker.reconciliation import CategoryReconciler


@pytest.fixture
def food() -> Category:
    return Category(id="food", name="Food & Dining", type=TransactionType.EXPENSE, color="#FF5722")


@pytest.fixture
def transport() -> Category:
    return Category(id="transport", name="Transportation", type=TransactionType.EXPENSE, color="#2196F3")


@pytest.fixture
def salary() -> Category:
    return Category(id="salary", name="Salary", type=TransactionType.INCOME, color="#4CAF50")


@pytest.fixture
def make_transaction(food, salary):
    """Factory for transactions; amounts may be given as str or int"""
    counter = {"next": 1}

    def _make(
        amount,
        transaction_type: TransactionType = TransactionType.EXPENSE,
        category: Category = None,
        on=date(2025, 1, 15),
        description: str = "",
    ) -> Transaction:
        if category is None:
            category = salary if transaction_type == TransactionType.INCOME else food
        txn = Transaction(
            id=f"tx-{counter['next']}",
            amount=Decimal(str(amount)),
            type=transaction_type,
            category=category,
            date=on,
            description=description,
        )
        counter["next"] += 1
        return txn

    return _make


@pytest.fixture
def budget_categories():
    """The default budget categories, all limits at 100"""
    return [
        BudgetCategory(id=category_id, name=name, budget_limit=Decimal("100"))
        for category_id, name in [
            ("food", "Food & Dining"),
            ("transport", "Transportation"),
            ("utilities", "Utilities"),
            ("entertainment", "Entertainment"),
            ("health", "Healthcare"),
            ("shopping", "Shopping"),
            ("housing", "Housing"),
            ("other", "Other"),
        ]
    ]


@pytest.fixture
def reconciler() -> CategoryReconciler:
    """Reconciler over the bundled table"""
    return CategoryReconciler()


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Point user config overrides at an empty directory so only bundled defaults load"""
    config_dir = tmp_path / "user_config"
    config_dir.mkdir()
    monkeypatch.setenv(CONFIG_DIR_ENV_VAR, str(config_dir))
    return config_dir
