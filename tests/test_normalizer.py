"""Tests for ingredient/product name normalization."""

import pytest

from src.services.normalizer import NormalizedTerm, normalize, singularize


class TestSingularize:
    """Tests for the suffix-stripping singularizer."""

    @pytest.mark.parametrize(
        ("plural", "singular"),
        [
            ("eggs", "egg"),
            ("tomatoes", "tomato"),
            ("berries", "berry"),
            ("peaches", "peach"),
            ("radishes", "radish"),
            ("glasses", "glass"),
            ("cheeses", "cheese"),
            ("olives", "olive"),
            ("leaves", "leaf"),
            ("cookies", "cookie"),
        ],
    )
    def test_plural_forms(self, plural, singular):
        """Test common plural suffixes are stripped."""
        assert singularize(plural) == singular

    @pytest.mark.parametrize("token", ["molasses", "hummus", "asparagus", "swiss", "bass", "gas"])
    def test_invariant_tokens_unchanged(self, token):
        """Test exception-list and short tokens are left alone."""
        assert singularize(token) == token

    def test_singular_is_stable(self):
        """Test singularizing a singular token is a no-op."""
        for token in ["egg", "tomato", "berry", "glass", "hummus", "leaf"]:
            assert singularize(token) == token


class TestNormalize:
    """Tests for normalize()."""

    def test_lowercases_and_singularizes(self):
        """Test case folding and singularization."""
        assert normalize("Scallions").text == "scallion"

    def test_strips_punctuation_keeps_internal_hyphen(self):
        """Test punctuation is removed but internal hyphens survive."""
        assert normalize("All-Purpose Flour, sifted!").text == "all-purpose flour sifted"
        assert normalize("- butter -").text == "butter"

    def test_drops_stopwords_and_units(self):
        """Test articles and units of measure are dropped."""
        assert normalize("2 cups of the milk").text == "milk"
        assert normalize("1 tbsp olive oil").text == "olive oil"

    def test_drops_quantity_tokens(self):
        """Test retailer pack sizes are dropped."""
        assert normalize("Kirkland Unsalted Butter 4ct").tokens == (
            "kirkland",
            "unsalted",
            "butter",
        )

    @pytest.mark.parametrize("raw", ["", "   ", "\t\n", None])
    def test_empty_input_gives_empty_term(self, raw):
        """Test empty or whitespace-only input yields an empty term."""
        term = normalize(raw)
        assert term == NormalizedTerm()
        assert not term
        assert term.first_token is None

    def test_only_stopwords_gives_empty_term(self):
        """Test input made entirely of noise words yields an empty term."""
        assert normalize("2 cups").text == ""

    def test_same_function_for_ingredients_and_products(self):
        """Test differently worded names converge on one term."""
        assert normalize("Green Onions") == normalize("green onion")

    @pytest.mark.parametrize(
        "raw",
        [
            "Scallions",
            "2 Cups All-Purpose Flour",
            "Kirkland Organic Unsalted Butter, 4 ct",
            "2cups sugar",
            "Crème Fraîche",
            "molasses & brown sugar",
            "  ",
            "boxes of cookies",
            "pre-s",
            "abc_s",
            "Jalapeño-s",
            "cookies-s",
            "- -s",
        ],
    )
    def test_idempotent(self, raw):
        """Test normalize(normalize(x)) == normalize(x)."""
        once = normalize(raw)
        assert normalize(once.text) == once
        assert normalize(once) is once

    def test_underscores_and_dangling_hyphens_removed(self):
        """Test only internal hyphens survive, even after singularizing."""
        assert normalize("pre-s").tokens == ("pre",)
        assert normalize("abc_s").tokens == ("abc",)
        assert normalize("brown_sugar").text == "brown sugar"
        assert normalize("Jalapeño-s").tokens == ("jalapeño",)

    def test_unicode_text_is_total(self):
        """Test non-ASCII text normalizes without error."""
        assert normalize("Jalapeños").text == "jalapeño"


class TestNormalizedTerm:
    """Tests for NormalizedTerm helpers."""

    def test_contains_phrase(self):
        """Test contiguous token-run containment."""
        product = normalize("Green Onion Bunch")
        assert product.contains_phrase(normalize("green onion"))
        assert product.contains_phrase(normalize("bunch"))
        assert not product.contains_phrase(normalize("onion green"))
        assert not product.contains_phrase(NormalizedTerm())

    def test_str_and_len(self):
        """Test string form and token count."""
        term = normalize("Chicken Thighs")
        assert str(term) == "chicken thigh"
        assert len(term) == 2
        assert term.first_token == "chicken"
