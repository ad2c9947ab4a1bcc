"""SQLAlchemy models."""

from src.models.taxonomy import HouseholdTaxonomyOverride, IngredientTaxonomy

__all__ = [
    "IngredientTaxonomy",
    "HouseholdTaxonomyOverride",
]
