"""Deterministic text normalization for ingredient and product names."""

import re
from dataclasses import dataclass

# Words that carry no identity for matching: articles, connectives, units of
# measure, and preparation/packaging words.
STOPWORDS = frozenset(
    {
        # articles and connectives
        "a",
        "an",
        "the",
        "of",
        "and",
        "or",
        "for",
        "with",
        "to",
        "in",
        "per",
        "s",
        # units of measure
        "cup",
        "c",
        "tsp",
        "teaspoon",
        "tbsp",
        "tablespoon",
        "oz",
        "ounce",
        "fl",
        "lb",
        "lbs",
        "pound",
        "g",
        "gram",
        "kg",
        "kilogram",
        "ml",
        "l",
        "liter",
        "litre",
        "pint",
        "quart",
        "gallon",
        "pinch",
        "dash",
        "ct",
        "count",
        "pack",
        "pkg",
        "package",
        "can",
        "jar",
        "bottle",
        "bag",
        "box",
        # preparation
        "chopped",
        "minced",
        "diced",
        "sliced",
        "optional",
    }
)

# Plurals that the suffix heuristic gets wrong.
IRREGULAR_PLURALS = {
    "leaves": "leaf",
    "loaves": "loaf",
    "halves": "half",
    "knives": "knife",
    "cookies": "cookie",
    "pies": "pie",
    "brownies": "brownie",
    "calories": "calorie",
    "geese": "goose",
    "teeth": "tooth",
    "mice": "mouse",
}

# Tokens that end in "s" but are already singular.
INVARIANT_TOKENS = frozenset(
    {
        "asparagus",
        "brussels",
        "couscous",
        "citrus",
        "molasses",
        "hummus",
        "swiss",
        "grits",
        "oats",
        "series",
        "species",
        "lemongrass",
        "bass",
    }
)

_PUNCTUATION_RE = re.compile(r"[^\w\s-]|_")
_QUANTITY_RE = re.compile(r"^\d+[a-z]{0,3}$")
_ES_SUFFIXES = ("sses", "xes", "zes", "ches", "shes", "oes")
_KEEP_S_SUFFIXES = ("ss", "us", "is")


@dataclass(frozen=True)
class NormalizedTerm:
    """Lowercase, singularized, stopword-free token sequence."""

    tokens: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return " ".join(self.tokens)

    @property
    def first_token(self) -> str | None:
        """The dominant token, or None for an empty term."""
        return self.tokens[0] if self.tokens else None

    def contains_phrase(self, phrase: "NormalizedTerm") -> bool:
        """Check whether phrase occurs as a contiguous token run in this term."""
        size = len(phrase.tokens)
        if size == 0 or size > len(self.tokens):
            return False
        return any(
            self.tokens[i : i + size] == phrase.tokens for i in range(len(self.tokens) - size + 1)
        )

    def __bool__(self) -> bool:
        return bool(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __str__(self) -> str:
        return self.text


def singularize(token: str) -> str:
    """Reduce a plural token to its singular form by suffix stripping.

    Examples:
    - "tomatoes" -> "tomato"
    - "berries" -> "berry"
    - "eggs" -> "egg"
    - "molasses" -> "molasses"
    """
    if token in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[token]
    if token in INVARIANT_TOKENS or len(token) < 4 or not token.endswith("s"):
        return token
    if token.endswith("ies") and len(token) > 4:
        return token[:-3] + "y"
    if token.endswith(_ES_SUFFIXES):
        return token[:-2]
    if token.endswith(_KEEP_S_SUFFIXES):
        return token
    return token[:-1]


def _canonical_token(word: str) -> str:
    """Singularize and strip edge hyphens until the token stops changing."""
    token = word.strip("-")
    while token:
        reduced = singularize(token).strip("-")
        if reduced == token:
            break
        token = reduced
    return token


def _is_noise(token: str, singular: str) -> bool:
    if token in STOPWORDS or singular in STOPWORDS:
        return True
    return bool(_QUANTITY_RE.match(token) or _QUANTITY_RE.match(singular))


def normalize(raw: "str | NormalizedTerm | None") -> NormalizedTerm:
    """Canonicalize an ingredient or product name.

    Steps run in a fixed order: trim, lowercase, strip punctuation (internal
    hyphens survive), split on whitespace, drop stopwords and bare quantities,
    singularize. Applying it twice gives the same term.
    """
    if isinstance(raw, NormalizedTerm):
        return raw
    if not raw:
        return NormalizedTerm()

    text = _PUNCTUATION_RE.sub(" ", raw.strip().lower())

    tokens = []
    for word in text.split():
        word = word.strip("-")
        singular = _canonical_token(word)
        if not singular or _is_noise(word, singular):
            continue
        tokens.append(singular)

    return NormalizedTerm(tuple(tokens))
