from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import List, Optional

from finance_tracker.aggregation.screening import TransactionRecord
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import BudgetCategory, Transaction


class TransactionNotFoundError(Exception):
    """Raised when a transaction cannot be found."""
    pass


class TransactionRepository(ABC):
    """
    Abstract repository for transaction persistence.

    Every operation is scoped to a user id; one user's transactions are
    never visible through another user's id.
    """

    @abstractmethod
    def create_transaction(self, user_id: str, transaction: Transaction) -> Transaction:
        """
        Save a new transaction.

        Args:
            user_id: Owner of the transaction
            transaction: Transaction to save (its id is ignored)

        Returns:
            Transaction with ID populated
        """
        pass

    @abstractmethod
    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        """
        Retrieve a transaction by ID.

        Returns:
            Transaction if found, None otherwise
        """
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        """
        Retrieve a user's transactions with optional filtering.

        Args:
            user_id: Owner of the transactions
            start_date: Filter transactions on or after this date
            end_date: Filter transactions on or before this date
            transaction_type: Filter by INCOME or EXPENSE

        Returns:
            List of matching transactions, newest first
        """
        pass

    def list_transaction_records(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> List[TransactionRecord]:
        """
        Same filters as list_transactions, but without validating what is stored.

        Aggregations read through this so a corrupt record is screened out
        and counted by the engine instead of failing the whole query.
        Backends that validate on read can rely on this default.
        """
        return self.list_transactions(
            user_id,
            start_date=start_date,
            end_date=end_date,
            transaction_type=transaction_type,
        )

    @abstractmethod
    def update_transaction(self, user_id: str, transaction: Transaction) -> Transaction:
        """
        Update an existing transaction.

        Raises:
            ValueError: If the transaction has no ID
            TransactionNotFoundError: If transaction doesn't exist for this user
        """
        pass

    @abstractmethod
    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        """
        Delete a transaction by ID.

        Raises:
            TransactionNotFoundError: If transaction doesn't exist for this user
        """
        pass


class BudgetRepository(ABC):
    """Abstract repository for a user's budget categories and monthly budget."""

    @abstractmethod
    def list_budgets(self, user_id: str) -> List[BudgetCategory]:
        """
        Retrieve a user's budget categories in display order.

        Users who never saved a budget get the default categories.
        """
        pass

    @abstractmethod
    def save_budgets(self, user_id: str, budgets: List[BudgetCategory]) -> List[BudgetCategory]:
        """
        Replace a user's budget categories.

        current_spent is derived and is not stored.
        """
        pass

    @abstractmethod
    def get_monthly_budget(self, user_id: str) -> Decimal:
        """The user's overall monthly budget, or the default one"""
        pass

    @abstractmethod
    def set_monthly_budget(self, user_id: str, amount: Decimal) -> None:
        pass
