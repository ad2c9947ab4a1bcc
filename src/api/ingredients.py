"""Ingredient matching API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from src.api.dependencies import (
    get_ingredient_matcher,
    get_taxonomy_provider,
    get_taxonomy_resolver,
)
from src.schemas.ingredient import (
    AvailabilityRequest,
    AvailabilityResponse,
    MatchRequest,
    MatchResponse,
    TaxonomyEntryResponse,
    TaxonomyRefreshResponse,
)
from src.services.availability import check_recipe_availability
from src.services.matcher import IngredientMatcher
from src.services.taxonomy import TaxonomyResolver
from src.services.taxonomy_loader import TaxonomyProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ingredients", tags=["ingredients"])


def error_response(status_code: int, message: str) -> JSONResponse:
    """Stable machine-readable error body."""
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/match", response_model=MatchResponse)
def match_ingredient(
    matcher: Annotated[IngredientMatcher, Depends(get_ingredient_matcher)],
    payload: Annotated[MatchRequest | None, Body()] = None,
):
    """Rank inventory products that can satisfy one recipe ingredient.

    Unknown ingredients and empty inventories are not errors; they return an
    empty match list.
    """
    if payload is None or not payload.ingredient_name or not payload.ingredient_name.strip():
        return error_response(status.HTTP_400_BAD_REQUEST, "Ingredient name is required")

    try:
        matches = matcher.classify(
            payload.ingredient_name,
            payload.inventory_products or [],
            payload.household_id,
        )
    except Exception:
        logger.exception(f"Error matching ingredient '{payload.ingredient_name}'")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to match ingredients"
        )

    return MatchResponse(matches=matches)


@router.api_route("/match", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def match_method_not_allowed():
    """Only POST is supported."""
    return error_response(status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")


@router.post("/availability", response_model=AvailabilityResponse)
def recipe_availability(
    request: AvailabilityRequest,
    matcher: Annotated[IngredientMatcher, Depends(get_ingredient_matcher)],
):
    """Full server-side availability report for a recipe."""
    try:
        report, matches = check_recipe_availability(
            request.ingredients,
            request.inventory_products or [],
            matcher,
            request.household_id,
        )
    except Exception:
        logger.exception("Error checking recipe availability")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to check availability"
        )

    return AvailabilityResponse(report=report, matches=matches)


@router.get("/taxonomy", response_model=TaxonomyEntryResponse)
def get_taxonomy_entry(
    term: str,
    resolver: Annotated[TaxonomyResolver, Depends(get_taxonomy_resolver)],
    household_id: Annotated[str | None, Query(alias="householdId")] = None,
):
    """Resolved taxonomy entry for a term, with household overrides applied."""
    entry = resolver.resolve(term, household_id)
    if entry is None:
        return error_response(status.HTTP_404_NOT_FOUND, "No taxonomy entry")

    return TaxonomyEntryResponse(
        term=entry.term,
        equivalents=sorted(entry.equivalents),
        category=entry.category,
        subcategory=entry.subcategory,
        substitutes=sorted(entry.substitutes),
    )


@router.post("/taxonomy/refresh", response_model=TaxonomyRefreshResponse)
def refresh_taxonomy(
    provider: Annotated[TaxonomyProvider, Depends(get_taxonomy_provider)],
):
    """Reload the taxonomy table and swap it in for new requests."""
    try:
        table = provider.refresh()
    except Exception:
        logger.exception("Taxonomy refresh failed")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to refresh taxonomy"
        )

    return TaxonomyRefreshResponse(
        source=table.source,
        entry_count=len(table),
        loaded_at=table.loaded_at,
    )
