from decimal import Decimal
from typing import Any, Dict, List, Optional

from finance_tracker.config.settings import ConfigLoader
from finance_tracker.database.connection import DatabaseManager
from finance_tracker.domain.models import DEFAULT_COLOR, BudgetCategory
from finance_tracker.repositories.base import BudgetRepository


def default_budget_categories(config: Dict[str, Any]) -> List[BudgetCategory]:
    """Budget categories from a budget defaults config"""
    return [
        BudgetCategory(
            id=entry["id"],
            name=entry["name"],
            budget_limit=Decimal(str(entry["budget_limit"])),
            color=entry.get("color", DEFAULT_COLOR),
            is_custom=entry.get("is_custom", False),
        )
        for entry in config.get("categories", [])
    ]


class SQLiteBudgetRepository(BudgetRepository):
    """
    SQLite implementation of the BudgetRepository.

    Users without a saved budget see the defaults from budget_defaults.json.
    """

    def __init__(self, db_manager: DatabaseManager, defaults: Optional[Dict[str, Any]] = None):
        """
        Args:
            db_manager: Database manager
            defaults: Optional budget defaults config. If None, loads from ConfigLoader.
        """
        self.db = db_manager
        self.defaults = defaults if defaults is not None else ConfigLoader.load_budget_defaults()

    def list_budgets(self, user_id: str) -> List[BudgetCategory]:
        conn = self.db.get_connection()
        rows = conn.execute(
            "SELECT * FROM budget_categories WHERE user_id = ? ORDER BY position",
            (user_id,)
        ).fetchall()

        if not rows:
            return default_budget_categories(self.defaults)

        return [
            BudgetCategory(
                id=row["id"],
                name=row["name"],
                budget_limit=Decimal(row["budget_limit"]),
                color=row["color"],
                is_custom=bool(row["is_custom"]),
            )
            for row in rows
        ]

    def save_budgets(self, user_id: str, budgets: List[BudgetCategory]) -> List[BudgetCategory]:
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM budget_categories WHERE user_id = ?", (user_id,))
            conn.executemany(
                """
                INSERT INTO budget_categories (
                    user_id, id, position, name, budget_limit, color, is_custom
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        user_id,
                        budget.id,
                        position,
                        budget.name,
                        str(budget.budget_limit),
                        budget.color,
                        int(budget.is_custom),
                    )
                    for position, budget in enumerate(budgets)
                ],
            )

        return list(budgets)

    def get_monthly_budget(self, user_id: str) -> Decimal:
        conn = self.db.get_connection()
        row = conn.execute(
            "SELECT amount FROM monthly_budgets WHERE user_id = ?",
            (user_id,)
        ).fetchone()

        if row is None:
            return Decimal(str(self.defaults.get("monthly_budget", 0)))

        return Decimal(row["amount"])

    def set_monthly_budget(self, user_id: str, amount: Decimal) -> None:
        if amount < 0:
            raise ValueError(f"Monthly budget must not be negative, got {amount}")

        with self.db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO monthly_budgets (user_id, amount) VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET amount = excluded.amount
                """,
                (user_id, str(amount)),
            )
