"""Enums for match classification."""

from enum import Enum


class MatchType(str, Enum):
    """Match tiers, declared in precedence order (strongest first)."""

    EXACT = "exact"
    EQUIVALENCY = "equivalency"
    PARTIAL = "partial"
    CATEGORY = "category"
    SUBSTITUTE = "substitute"

    @property
    def precedence(self) -> int:
        """Rank of this tier; 0 is the strongest."""
        return list(MatchType).index(self)
