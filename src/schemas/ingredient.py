"""Ingredient matching schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.enums import MatchType


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class InventoryProduct(CamelModel):
    """Read-only inventory snapshot entry supplied by the caller."""

    product_id: str
    product_name: str
    category: str | None = None
    brand: str | None = None
    quantity: float | None = None
    unit: str | None = None


class RecipeIngredient(CamelModel):
    """Ingredient line of a recipe."""

    name: str
    quantity: float | None = None
    unit: str | None = None
    optional: bool = False


class IngredientMatch(CamelModel):
    """One inventory product proposed for an ingredient."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    match_type: MatchType
    confidence: int = Field(..., ge=0, le=100)
    reason: str
    quantity: float | None = None
    unit: str | None = None


class AvailabilityReport(CamelModel):
    """Feasibility summary for a recipe."""

    can_make: bool
    available_count: int
    total_count: int
    missing_ingredients: list[str] = Field(default_factory=list)
    available_ingredients: list[str] = Field(default_factory=list)
    percentage_available: int = Field(..., ge=0, le=100)
    optional_missing: list[str] = Field(default_factory=list)


class MatchRequest(CamelModel):
    """Body of POST /api/ingredients/match."""

    ingredient_name: str | None = None
    inventory_products: list[InventoryProduct] | None = None
    household_id: str | None = None


class MatchResponse(CamelModel):
    """Ranked matches for one ingredient."""

    matches: list[IngredientMatch]


class AvailabilityRequest(CamelModel):
    """Body of POST /api/ingredients/availability."""

    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    inventory_products: list[InventoryProduct] | None = None
    household_id: str | None = None


class AvailabilityResponse(CamelModel):
    """Availability report plus the matches it was computed from."""

    report: AvailabilityReport
    matches: dict[str, list[IngredientMatch]]


class TaxonomyEntryResponse(CamelModel):
    """Resolved taxonomy entry for a term."""

    term: str
    equivalents: list[str]
    category: str | None
    subcategory: str | None
    substitutes: list[str]


class TaxonomyRefreshResponse(CamelModel):
    """Result of reloading the taxonomy table."""

    source: str
    entry_count: int
    loaded_at: datetime
