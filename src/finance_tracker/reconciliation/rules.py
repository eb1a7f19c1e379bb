from typing import AbstractSet, Dict, Optional

from finance_tracker.reconciliation.base import ReconciliationRule


class CaseInsensitiveAliasRule(ReconciliationRule):
    """
    Rule that looks a label up in the alias table ignoring case.

    Example:
        ```
        rule = CaseInsensitiveAliasRule({"Transportation": "transport"})
        rule.resolve("TRANSPORTATION")  # -> "transport"
        ```
    """

    def __init__(self, aliases: Dict[str, str]):
        """
        Args:
            aliases: Dict mapping alias labels to canonical ids
        """
        super().__init__()
        self._folded = {alias.casefold(): category_id for alias, category_id in aliases.items()}

    def _matches(self, label: str, known_ids: AbstractSet[str]) -> bool:
        return label.casefold() in self._folded

    def _get_category_id(self, label: str, known_ids: AbstractSet[str]) -> Optional[str]:
        return self._folded[label.casefold()]

    def __repr__(self):
        return f"CaseInsensitiveAliasRule({len(self._folded)} aliases)"


class ExactAliasRule(ReconciliationRule):
    """Rule that looks a label up in the alias table exactly as spelled."""

    def __init__(self, aliases: Dict[str, str]):
        super().__init__()
        self.aliases = dict(aliases)

    def _matches(self, label: str, known_ids: AbstractSet[str]) -> bool:
        return label in self.aliases

    def _get_category_id(self, label: str, known_ids: AbstractSet[str]) -> Optional[str]:
        return self.aliases[label]

    def __repr__(self):
        return f"ExactAliasRule({len(self.aliases)} aliases)"


class CanonicalIdRule(ReconciliationRule):
    """
    Rule that accepts a label which already is a budget-category id.

    Custom budget categories never appear in the alias table, so a
    transaction tagged with the custom id itself still lands on it.
    """

    def _matches(self, label: str, known_ids: AbstractSet[str]) -> bool:
        return label.casefold() in {known.casefold() for known in known_ids}

    def _get_category_id(self, label: str, known_ids: AbstractSet[str]) -> Optional[str]:
        folded = label.casefold()
        for known in sorted(known_ids):
            if known.casefold() == folded:
                return known
        raise RuntimeError("_get_category_id called but no match found")


class UnmatchedRule(ReconciliationRule):
    """
    Fallback rule that always matches and attributes nothing.

    Should be the last rule in the chain.
    """

    def _matches(self, label: str, known_ids: AbstractSet[str]) -> bool:
        """Always matches"""
        return True

    def _get_category_id(self, label: str, known_ids: AbstractSet[str]) -> Optional[str]:
        return None
