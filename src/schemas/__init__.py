"""Pydantic schemas for API requests and responses."""

from src.schemas.ingredient import (
    AvailabilityReport,
    AvailabilityRequest,
    AvailabilityResponse,
    IngredientMatch,
    InventoryProduct,
    MatchRequest,
    MatchResponse,
    RecipeIngredient,
    TaxonomyEntryResponse,
    TaxonomyRefreshResponse,
)

__all__ = [
    "InventoryProduct",
    "RecipeIngredient",
    "IngredientMatch",
    "AvailabilityReport",
    "MatchRequest",
    "MatchResponse",
    "AvailabilityRequest",
    "AvailabilityResponse",
    "TaxonomyEntryResponse",
    "TaxonomyRefreshResponse",
]
