from typing import AbstractSet, Any, Dict, List, Optional

from finance_tracker.config.settings import ConfigLoader
from finance_tracker.reconciliation.base import ReconciliationRule, ReconciliationTableError
from finance_tracker.reconciliation.rules import (
    CanonicalIdRule,
    CaseInsensitiveAliasRule,
    ExactAliasRule,
    UnmatchedRule,
)


def flatten_table(table: Dict[str, Any]) -> Dict[str, str]:
    """
    Validate a reconciliation table and flatten it to alias -> canonical id.

    Table format:
        {
            "version": 2,
            "categories": {
                "transport": ["transport", "Transportation", ...],
                ...
            }
        }

    Every canonical id is also an alias of itself.

    Raises:
        ReconciliationTableError: If the table is missing a version, an entry
            is not a list of strings, or two ids claim the same alias
            (compared case-insensitively)
    """
    if "version" not in table:
        raise ReconciliationTableError("Reconciliation table has no 'version'")

    categories = table.get("categories")
    if not isinstance(categories, dict):
        raise ReconciliationTableError("Reconciliation table 'categories' must be an object")

    aliases: Dict[str, str] = {}
    owners: Dict[str, str] = {}

    for category_id, labels in categories.items():
        if not isinstance(labels, list) or not all(isinstance(label, str) for label in labels):
            raise ReconciliationTableError(
                f"Aliases for '{category_id}' must be a list of strings"
            )

        for label in [category_id, *labels]:
            folded = label.casefold()
            owner = owners.setdefault(folded, category_id)
            if owner != category_id:
                raise ReconciliationTableError(
                    f"Alias '{label}' maps to both '{owner}' and '{category_id}'"
                )
            aliases[label] = category_id

    return aliases


class CategoryReconciler:
    """
    Resolves inconsistent category labels to canonical budget-category ids.

    Builds a chain of rules in priority order:
    1. Exact alias lookup
    2. Case-insensitive alias lookup
    3. Label already is a budget-category id
    4. Unmatched (None)

    Usage:
        # Production - loads the bundled (or user-overridden) table
        reconciler = CategoryReconciler()

        # Testing - inject a custom table
        reconciler = CategoryReconciler(table={"version": 1, "categories": {...}})

        reconciler.resolve("Transportation")  # -> "transport"
    """

    def __init__(self, table: Optional[Dict[str, Any]] = None):
        """
        Args:
            table: Optional reconciliation table. If None, loads from ConfigLoader.
        """
        if table is None:
            table = ConfigLoader.load_reconciliation_table()

        self.aliases = flatten_table(table)
        self.version = table["version"]
        self._rule_chain = self._build_rule_chain()

    def _build_rule_chain(self) -> ReconciliationRule:
        rules: List[ReconciliationRule] = [
            ExactAliasRule(self.aliases),
            CaseInsensitiveAliasRule(self.aliases),
            CanonicalIdRule(),
            UnmatchedRule(),
        ]

        for i in range(len(rules) - 1):
            rules[i].set_next(rules[i + 1])

        return rules[0]

    @property
    def canonical_ids(self) -> List[str]:
        """All canonical ids the table knows about, sorted"""
        return sorted(set(self.aliases.values()))

    def resolve(self, label: Optional[str], known_ids: AbstractSet[str] = frozenset()) -> Optional[str]:
        """
        Resolve a raw category label to a canonical id.

        Args:
            label: Raw category label (an id or a display name)
            known_ids: Ids of the budget categories being reconciled against;
                lets custom categories match on their own id

        Returns:
            Canonical id, or None when the label is not attributable
        """
        if not label:
            return None

        return self._rule_chain.resolve(label.strip(), known_ids)

    def get_rule_chain_info(self) -> str:
        """Describe the active rule chain, one rule per line"""
        rules = []
        current = self._rule_chain
        priority = 1

        while current:
            rules.append(f"{priority}. {current}")
            current = current._next_rule
            priority += 1

        return "\n".join(rules)

    def __repr__(self) -> str:
        return f"CategoryReconciler(version={self.version}, {len(self.aliases)} aliases)"
