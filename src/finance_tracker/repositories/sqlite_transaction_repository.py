import sqlite3
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional

from finance_tracker.aggregation.screening import coerce_transaction, screen_transactions
from finance_tracker.database.connection import DatabaseManager
from finance_tracker.domain.enums import TransactionType
from finance_tracker.domain.models import Transaction
from finance_tracker.repositories.base import TransactionRepository, TransactionNotFoundError


class SQLiteTransactionRepository(TransactionRepository):
    """
    SQLite implementation of the TransactionRepository.

    Handles all database operations for transactions using raw SQL.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager

    def create_transaction(self, user_id: str, transaction: Transaction) -> Transaction:
        """Save a single transaction."""
        with self.db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO transactions (
                    user_id, amount, type, category_id, category_name,
                    category_color, date, description, receipt_url
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    str(transaction.amount), # Store as string for precision
                    transaction.type.value,
                    transaction.category.id,
                    transaction.category.name,
                    transaction.category.color,
                    transaction.date.isoformat(),
                    transaction.description,
                    transaction.receipt_url,
                ),
            )

        return replace(transaction, id=str(cursor.lastrowid))

    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        """
        Retrieve a transaction by ID, or None if it doesn't exist

        Raises:
            MalformedTransactionError: If the stored row is corrupt
        """
        conn = self.db.get_connection()
        cursor = conn.execute(
            "SELECT * FROM transactions WHERE id = ? AND user_id = ?",
            (transaction_id, user_id)
        )
        row = cursor.fetchone()

        if row is None:
            return None

        return coerce_transaction(self._row_to_record(row))

    def list_transactions(
            self,
            user_id: str,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            transaction_type: Optional[TransactionType] = None,
    ) -> List[Transaction]:
        """Retrieve transactions with optional filtering; corrupt rows are skipped."""
        records = self.list_transaction_records(user_id, start_date, end_date, transaction_type)
        return screen_transactions(records).valid

    def list_transaction_records(
            self,
            user_id: str,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            transaction_type: Optional[TransactionType] = None,
    ) -> List[Dict[str, Any]]:
        """Rows as plain records, unvalidated, for the aggregation engine to screen."""
        query = "SELECT * FROM transactions WHERE user_id = ?"
        params: list = [user_id]

        # Stored dates may carry a time part; compare on the calendar date only
        if start_date:
            query += " AND substr(date, 1, 10) >= ?"
            params.append(start_date.isoformat())

        if end_date:
            query += " AND substr(date, 1, 10) <= ?"
            params.append(end_date.isoformat())

        if transaction_type:
            query += " AND type = ?"
            params.append(transaction_type.value)

        query += " ORDER BY date DESC, id DESC"

        conn = self.db.get_connection()
        rows = conn.execute(query, params).fetchall()

        return [self._row_to_record(row) for row in rows]

    def update_transaction(self, user_id: str, transaction: Transaction) -> Transaction:
        """Update an existing transaction."""
        if transaction.id is None:
            raise ValueError("Cannot update transaction without ID")

        with self.db.transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE transactions
                SET amount = ?, type = ?, category_id = ?, category_name = ?,
                    category_color = ?, date = ?, description = ?, receipt_url = ?
                WHERE id = ? AND user_id = ?
                """,
                (
                    str(transaction.amount),
                    transaction.type.value,
                    transaction.category.id,
                    transaction.category.name,
                    transaction.category.color,
                    transaction.date.isoformat(),
                    transaction.description,
                    transaction.receipt_url,
                    transaction.id,
                    user_id,
                )
            )

            if cursor.rowcount == 0:
                raise TransactionNotFoundError(
                    f"Transaction with ID {transaction.id} not found"
                )

        return transaction

    def delete_transaction(self, user_id: str, transaction_id: str) -> None:
        """Delete a transaction by ID."""
        with self.db.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ? AND user_id = ?",
                (transaction_id, user_id)
            )
            if cursor.rowcount == 0:
                raise TransactionNotFoundError(
                    f"Transaction with ID {transaction_id} not found"
                )

    def _row_to_record(self, row: sqlite3.Row) -> Dict[str, Any]:
        """Convert a database row to a transaction record."""
        return {
            "id": row["id"],
            "amount": row["amount"],
            "type": row["type"],
            "category": {
                "id": row["category_id"],
                "name": row["category_name"],
                "color": row["category_color"],
            },
            "date": row["date"],
            "description": row["description"],
            "receipt_url": row["receipt_url"],
        }
