"""FastAPI dependencies for the matching engine."""

from typing import Annotated

from fastapi import Depends, Request

from src.services.matcher import IngredientMatcher
from src.services.taxonomy import TaxonomyResolver, TaxonomyTable
from src.services.taxonomy_loader import TaxonomyProvider


def get_taxonomy_provider(request: Request) -> TaxonomyProvider:
    """Process-wide taxonomy provider created at application startup."""
    return request.app.state.taxonomy_provider


def get_taxonomy_table(
    provider: Annotated[TaxonomyProvider, Depends(get_taxonomy_provider)],
) -> TaxonomyTable:
    """Snapshot of the taxonomy table held for the whole request."""
    return provider.current()


def get_taxonomy_resolver(
    table: Annotated[TaxonomyTable, Depends(get_taxonomy_table)],
) -> TaxonomyResolver:
    """Get a resolver bound to this request's taxonomy snapshot."""
    return TaxonomyResolver(table)


def get_ingredient_matcher(
    resolver: Annotated[TaxonomyResolver, Depends(get_taxonomy_resolver)],
) -> IngredientMatcher:
    """Get ingredient matcher with dependencies."""
    return IngredientMatcher(resolver)
