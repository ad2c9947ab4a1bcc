"""Recipe availability (feasibility) reports built from ingredient matches."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal

from src.schemas.ingredient import (
    AvailabilityReport,
    IngredientMatch,
    InventoryProduct,
    RecipeIngredient,
)
from src.services.matcher import IngredientMatcher
from src.services.normalizer import normalize

logger = logging.getLogger(__name__)

# An ingredient is available when one of its matches scores strictly above this.
# approximate_availability() uses the same constant.
AVAILABILITY_THRESHOLD = 30


def is_available_match(match: IngredientMatch) -> bool:
    return match.confidence > AVAILABILITY_THRESHOLD


def percentage(part: int, whole: int) -> int:
    """Rounded percentage (half-up); 0 for an empty whole."""
    if whole <= 0:
        return 0
    value = Decimal(100 * part) / Decimal(whole)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _matches_for(
    ingredient: RecipeIngredient,
    matches_by_ingredient: Mapping[str, Sequence[IngredientMatch]],
) -> Sequence[IngredientMatch]:
    if ingredient.name in matches_by_ingredient:
        return matches_by_ingredient[ingredient.name]
    return matches_by_ingredient.get(normalize(ingredient.name).text, ())


def _build_report(ingredients: Iterable[RecipeIngredient], is_available) -> AvailabilityReport:
    available: list[str] = []
    missing: list[str] = []
    optional_missing: list[str] = []
    total = 0
    available_count = 0

    for ingredient in ingredients:
        found = is_available(ingredient)
        if found:
            available.append(ingredient.name)
        elif ingredient.optional:
            optional_missing.append(ingredient.name)
        else:
            missing.append(ingredient.name)

        if not ingredient.optional:
            total += 1
            if found:
                available_count += 1

    return AvailabilityReport(
        can_make=not missing,
        available_count=available_count,
        total_count=total,
        missing_ingredients=missing,
        available_ingredients=available,
        percentage_available=percentage(available_count, total),
        optional_missing=optional_missing,
    )


def evaluate(
    ingredients: Iterable[RecipeIngredient],
    matches_by_ingredient: Mapping[str, Sequence[IngredientMatch]],
) -> AvailabilityReport:
    """Roll per-ingredient matches into a recipe availability report.

    matches_by_ingredient is keyed by ingredient name (raw, or normalized text).
    Optional ingredients never block can_make and are left out of the counts.
    An empty recipe can be made and reports 0 percent.
    """
    return _build_report(
        ingredients,
        lambda ingredient: any(
            is_available_match(m) for m in _matches_for(ingredient, matches_by_ingredient)
        ),
    )


def check_recipe_availability(
    ingredients: Sequence[RecipeIngredient],
    inventory: Sequence[InventoryProduct],
    matcher: IngredientMatcher,
    household_id: str | None = None,
) -> tuple[AvailabilityReport, dict[str, list[IngredientMatch]]]:
    """Run the full classifier for every ingredient and evaluate the recipe.

    Returns the report together with the matches it was computed from.
    """
    matches_by_ingredient = {
        ingredient.name: matcher.classify(ingredient, inventory, household_id)
        for ingredient in ingredients
    }
    report = evaluate(ingredients, matches_by_ingredient)
    logger.info(
        f"Recipe availability: {report.available_count}/{report.total_count} "
        f"ingredients ({report.percentage_available}%)"
    )
    return report, matches_by_ingredient


def approximate_availability(
    ingredients: Iterable[RecipeIngredient],
    matches: Iterable[IngredientMatch],
) -> AvailabilityReport:
    """Cheap availability estimate from an unkeyed list of already-fetched matches.

    This is NOT equivalent to evaluate(). Without knowing which ingredient a
    match was produced for, an ingredient counts as available when any match
    above AVAILABILITY_THRESHOLD has a product name whose first word appears
    in the lower-cased ingredient name. Equivalency and substitute matches
    ("Green Onion Bunch" for "scallions") are therefore missed, and unrelated
    products sharing a first word can be credited. Use it only where the full
    report is too expensive to fetch.
    """
    usable = [
        match.product_name.lower().split()[0]
        for match in matches
        if is_available_match(match) and match.product_name.strip()
    ]
    return _build_report(
        ingredients,
        lambda ingredient: any(word in ingredient.name.lower() for word in usable),
    )
