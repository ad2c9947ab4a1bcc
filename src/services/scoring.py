"""Confidence policy and deterministic ranking of ingredient matches."""

from src.models.enums import MatchType
from src.schemas.ingredient import IngredientMatch

EXACT_CONFIDENCE = 100
EQUIVALENCY_CONFIDENCE = 90
PARTIAL_MAX_CONFIDENCE = 60
PARTIAL_MIN_CONFIDENCE = 30
CATEGORY_CONFIDENCE = 40
SUBSTITUTE_CONFIDENCE = 35

BASE_CONFIDENCE = {
    MatchType.EXACT: EXACT_CONFIDENCE,
    MatchType.EQUIVALENCY: EQUIVALENCY_CONFIDENCE,
    MatchType.PARTIAL: PARTIAL_MAX_CONFIDENCE,
    MatchType.CATEGORY: CATEGORY_CONFIDENCE,
    MatchType.SUBSTITUTE: SUBSTITUTE_CONFIDENCE,
}


def score(match_type: MatchType, matched_tokens: int = 0, ingredient_tokens: int = 0) -> int:
    """Confidence (0-100) for a match of the given tier.

    Partial matches scale with the share of ingredient tokens that matched,
    never dropping below PARTIAL_MIN_CONFIDENCE.
    """
    if match_type is MatchType.PARTIAL:
        if ingredient_tokens <= 0:
            return PARTIAL_MIN_CONFIDENCE
        scaled = round(PARTIAL_MAX_CONFIDENCE * matched_tokens / ingredient_tokens)
        return max(PARTIAL_MIN_CONFIDENCE, min(PARTIAL_MAX_CONFIDENCE, scaled))
    return BASE_CONFIDENCE[match_type]


def ranking_key(match: IngredientMatch) -> tuple:
    """Sort key: confidence desc, tier precedence, product name, product id."""
    return (
        -match.confidence,
        match.match_type.precedence,
        match.product_name.lower(),
        match.product_name,
        match.product_id,
    )


def rank(matches: list[IngredientMatch]) -> list[IngredientMatch]:
    """Return matches in a total, reproducible order."""
    return sorted(matches, key=ranking_key)
