from abc import ABC, abstractmethod
from typing import AbstractSet, Optional


class ReconciliationTableError(ValueError):
    """Raised when a reconciliation table is structurally invalid."""
    pass


class ReconciliationRule(ABC):
    """
    Abstract base class for all category reconciliation rules.

    Implements Chain of Responsibility:
    - Each rule tries to resolve a raw category label to a canonical id
    - If it can't it passes to the next rule
    - Rules are tried in priority order

    Usage:
        Create chain: specific -> general -> unmatched
        ```
        exact = ExactAliasRule(aliases)
        folded = CaseInsensitiveAliasRule(aliases)
        fallback = UnmatchedRule()

        exact.set_next(folded).set_next(fallback)

        category_id = exact.resolve("Transportation")
        ```
    """

    def __init__(self):
        self._next_rule: Optional['ReconciliationRule'] = None

    def set_next(self, rule: 'ReconciliationRule') -> 'ReconciliationRule':
        """
        Set the next rule in the chain.

        Args:
            rule: The next rule to try if this one doesn't match

        Returns:
            The rule that was set (for chaining)

        Example:
            `rule1.set_next(rule2).set_next(rule3)`
        """
        self._next_rule = rule
        return rule

    @abstractmethod
    def _matches(self, label: str, known_ids: AbstractSet[str]) -> bool:
        """
        Check if this rule can resolve the label.

        Args:
            label: Raw category label from a transaction
            known_ids: Canonical ids of the budget categories in play

        Returns:
            True if this rule can resolve the label
        """
        pass

    @abstractmethod
    def _get_category_id(self, label: str, known_ids: AbstractSet[str]) -> Optional[str]:
        """
        Get the canonical id for the label.

        Called only if _matches() returns True.
        """
        pass

    def resolve(self, label: str, known_ids: AbstractSet[str] = frozenset()) -> Optional[str]:
        """
        Attempt to resolve a label to a canonical budget-category id.

        Args:
            label: Raw category label
            known_ids: Canonical ids of the budget categories in play

        Returns:
            Canonical id, or None if no rule matched
        """
        if self._matches(label, known_ids):
            return self._get_category_id(label, known_ids)

        if self._next_rule:
            return self._next_rule.resolve(label, known_ids)

        return None

    def __repr__(self):
        return f"{self.__class__.__name__}()"
