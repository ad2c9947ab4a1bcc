"""Ingredient-to-inventory match classification."""

import logging
from collections.abc import Iterable

from src.models.enums import MatchType
from src.schemas.ingredient import IngredientMatch, InventoryProduct, RecipeIngredient
from src.services.normalizer import NormalizedTerm, normalize
from src.services.scoring import rank, score
from src.services.taxonomy import TaxonomyEntry, TaxonomyResolver

logger = logging.getLogger(__name__)

# Tokens shorter than this only match identically (keeps "egg" off "eggplant")
MIN_SUBSTRING_TOKEN_LENGTH = 4

# Products carrying one of these are flavored/compound goods, not the ingredient
# itself ("butter" vs "butter toffee popcorn").
COMPOUND_PRODUCT_MARKERS = frozenset(
    {
        "flavored",
        "flavor",
        "chip",
        "cracker",
        "cookie",
        "candy",
        "toffee",
        "popcorn",
        "chocolate",
        "caramel",
        "fudge",
        "brittle",
        "pretzel",
        "bar",
    }
)

# Token pairs that must never match each other partially.
EXCLUDED_PARTIAL_PAIRS = (("soup", "broth"),)

NEGATION_PREFIXES = ("un", "non")


def is_compound_product(ingredient: NormalizedTerm, product: NormalizedTerm) -> bool:
    """Check whether the product is a flavored/compound variant of the ingredient."""
    if len(product) <= len(ingredient):
        return False
    markers = COMPOUND_PRODUCT_MARKERS.intersection(product.tokens)
    return bool(markers - set(ingredient.tokens))


def _is_excluded_pair(ingredient: NormalizedTerm, product: NormalizedTerm) -> bool:
    for first, second in EXCLUDED_PARTIAL_PAIRS:
        if (first in ingredient.tokens and second in product.tokens) or (
            second in ingredient.tokens and first in product.tokens
        ):
            return True
    return False


def tokens_match(ingredient_token: str, product_token: str) -> bool:
    """Identical tokens, or a long-enough ingredient token inside the product token."""
    if ingredient_token == product_token:
        return True
    if (
        len(ingredient_token) < MIN_SUBSTRING_TOKEN_LENGTH
        or len(product_token) < MIN_SUBSTRING_TOKEN_LENGTH
        or ingredient_token not in product_token
    ):
        return False
    # "unsalted" is not "salt"
    return not any(
        product_token.startswith(prefix + ingredient_token) for prefix in NEGATION_PREFIXES
    )


def partial_overlap(ingredient: NormalizedTerm, product: NormalizedTerm) -> int:
    """Number of ingredient tokens found in the product, or 0 if no partial match.

    The overlap must cover the first token of the ingredient or of the product.
    """
    if not ingredient or not product:
        return 0
    if _is_excluded_pair(ingredient, product) or is_compound_product(ingredient, product):
        return 0

    matched = [
        token
        for token in ingredient.tokens
        if any(tokens_match(token, product_token) for product_token in product.tokens)
    ]
    if not matched:
        return 0

    covers_dominant = ingredient.first_token in matched or any(
        tokens_match(token, product.first_token) for token in matched
    )
    return len(matched) if covers_dominant else 0


class IngredientMatcher:
    """Classify inventory products against a recipe ingredient.

    Each product is tested against the tiers in precedence order
    (exact, equivalency, partial, category, substitute) and keeps only the
    first tier that fires. Products that fire no tier are left out.
    """

    def __init__(self, resolver: TaxonomyResolver):
        self.resolver = resolver

    def classify(
        self,
        ingredient: RecipeIngredient | str,
        inventory: Iterable[InventoryProduct],
        household_id: str | None = None,
    ) -> list[IngredientMatch]:
        """Return ranked matches for one ingredient against the whole inventory."""
        name = ingredient.name if isinstance(ingredient, RecipeIngredient) else ingredient
        term = normalize(name)
        if not term:
            return []

        entry = self._resolve(term, household_id)
        matches = []
        for product in inventory:
            # Out of stock
            if product.quantity is not None and product.quantity <= 0:
                continue
            match = self._classify_product(name, term, entry, product, household_id)
            if match is not None:
                matches.append(match)

        ranked = rank(matches)
        logger.debug(f"Classified '{name}': {len(ranked)} matches")
        return ranked

    def best_match(
        self,
        ingredient: RecipeIngredient | str,
        inventory: Iterable[InventoryProduct],
        household_id: str | None = None,
    ) -> IngredientMatch | None:
        """Highest ranked match, or None."""
        matches = self.classify(ingredient, inventory, household_id)
        return matches[0] if matches else None

    def can_use_for_ingredient(
        self,
        ingredient_name: str,
        product_name: str,
        category: str | None = None,
        household_id: str | None = None,
    ) -> bool:
        """Check whether a single product satisfies the ingredient at any tier."""
        product = InventoryProduct(product_id="", product_name=product_name, category=category)
        return bool(self.classify(ingredient_name, [product], household_id))

    def _resolve(self, term: NormalizedTerm, household_id: str | None) -> TaxonomyEntry | None:
        try:
            return self.resolver.resolve(term, household_id)
        except Exception:
            # Malformed taxonomy data degrades to "no entry" for this term
            logger.exception(f"Taxonomy lookup failed for '{term}'")
            return None

    def _classify_product(
        self,
        name: str,
        term: NormalizedTerm,
        entry: TaxonomyEntry | None,
        product: InventoryProduct,
        household_id: str | None,
    ) -> IngredientMatch | None:
        product_term = normalize(product.product_name)
        if not product_term:
            return None
        product_entry = self._resolve(product_term, household_id)

        if product_term == term:
            return self._build_match(
                product,
                MatchType.EXACT,
                score(MatchType.EXACT),
                f'Exact match: "{product.product_name}" is "{name}"',
            )

        equivalent = self._find_equivalent(term, entry, product_term, product_entry)
        if equivalent is not None:
            return self._build_match(
                product,
                MatchType.EQUIVALENCY,
                score(MatchType.EQUIVALENCY),
                f'Equivalent: "{product.product_name}" ({equivalent}) is interchangeable '
                f'with "{name}"',
            )

        matched_tokens = partial_overlap(term, product_term)
        if matched_tokens:
            return self._build_match(
                product,
                MatchType.PARTIAL,
                score(MatchType.PARTIAL, matched_tokens, len(term)),
                f'Partial match: "{product.product_name}" for "{name}" '
                f"({matched_tokens}/{len(term)} words)",
            )

        if entry is not None and entry.category:
            product_category = (product.category or "").strip().lower() or (
                product_entry.category if product_entry else None
            )
            if product_category == entry.category:
                return self._build_match(
                    product,
                    MatchType.CATEGORY,
                    score(MatchType.CATEGORY),
                    f"Category match: both are {entry.category}",
                )

        if entry is not None:
            for substitute in sorted(entry.substitutes):
                if self._phrase_in_product(normalize(substitute), term, product_term):
                    return self._build_match(
                        product,
                        MatchType.SUBSTITUTE,
                        score(MatchType.SUBSTITUTE),
                        f'Substitute: "{product.product_name}" can replace "{name}"',
                    )

        return None

    def _find_equivalent(
        self,
        term: NormalizedTerm,
        entry: TaxonomyEntry | None,
        product_term: NormalizedTerm,
        product_entry: TaxonomyEntry | None,
    ) -> str | None:
        """Equivalent term linking ingredient and product, checked both ways."""
        if entry is not None:
            for equivalent in sorted(entry.equivalents):
                if self._phrase_in_product(normalize(equivalent), term, product_term):
                    return equivalent
        if product_entry is not None:
            for equivalent in sorted(product_entry.equivalents):
                if normalize(equivalent) == term:
                    return product_entry.term
        return None

    @staticmethod
    def _phrase_in_product(
        phrase: NormalizedTerm,
        term: NormalizedTerm,
        product_term: NormalizedTerm,
    ) -> bool:
        if phrase == product_term:
            return True
        return product_term.contains_phrase(phrase) and not is_compound_product(
            term, product_term
        )

    @staticmethod
    def _build_match(
        product: InventoryProduct,
        match_type: MatchType,
        confidence: int,
        reason: str,
    ) -> IngredientMatch:
        return IngredientMatch(
            product_id=product.product_id,
            product_name=product.product_name,
            match_type=match_type,
            confidence=confidence,
            reason=reason,
            quantity=product.quantity,
            unit=product.unit,
        )
