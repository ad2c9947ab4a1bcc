"""Ingredient taxonomy: equivalency groups, categories and declared substitutes."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

from src.services.normalizer import NormalizedTerm, normalize

logger = logging.getLogger(__name__)

OVERRIDE_FIELDS = ("equivalents", "category", "subcategory", "substitutes")


class TaxonomyDataError(ValueError):
    """Raised for a taxonomy record that cannot be interpreted."""


@dataclass(frozen=True)
class TaxonomyEntry:
    """Resolved taxonomy data for one canonical (normalized) term."""

    term: str
    equivalents: frozenset[str] = frozenset()
    category: str | None = None
    subcategory: str | None = None
    substitutes: frozenset[str] = frozenset()


@dataclass(frozen=True)
class TaxonomyOverride:
    """Household override; None fields inherit the global value."""

    household_id: str
    term: str
    equivalents: frozenset[str] | None = None
    category: str | None = None
    subcategory: str | None = None
    substitutes: frozenset[str] | None = None


@dataclass(frozen=True)
class TaxonomyTable:
    """Immutable reference table shared by all in-flight requests."""

    entries: Mapping[str, TaxonomyEntry] = field(default_factory=lambda: MappingProxyType({}))
    overrides: Mapping[tuple[str, str], TaxonomyOverride] = field(
        default_factory=lambda: MappingProxyType({})
    )
    source: str = "empty"
    loaded_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __len__(self) -> int:
        return len(self.entries)


def _term_set(value: Any, field_name: str) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise TaxonomyDataError(f"'{field_name}' must be a list of strings")
    terms = set()
    for item in value:
        if not isinstance(item, str):
            raise TaxonomyDataError(f"'{field_name}' contains a non-string value: {item!r}")
        normalized = normalize(item).text
        if normalized:
            terms.add(normalized)
    return frozenset(terms)


def _optional_label(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TaxonomyDataError(f"'{field_name}' must be a string")
    return value.strip().lower() or None


def _record_term(record: Mapping[str, Any]) -> str:
    if not isinstance(record, Mapping):
        raise TaxonomyDataError(f"record must be an object, got {type(record).__name__}")
    raw = record.get("term")
    if not isinstance(raw, str):
        raise TaxonomyDataError("'term' must be a non-empty string")
    term = normalize(raw).text
    if not term:
        raise TaxonomyDataError(f"'term' {raw!r} is empty after normalization")
    return term


def _parse_override(record: Mapping[str, Any]) -> TaxonomyOverride:
    term = _record_term(record)
    household_id = record.get("household_id", record.get("householdId"))
    if not isinstance(household_id, str) or not household_id:
        raise TaxonomyDataError("'household_id' must be a non-empty string")

    values: dict[str, Any] = {}
    for name in ("equivalents", "substitutes"):
        if record.get(name) is not None:
            values[name] = _term_set(record[name], name) - {term}
    for name in ("category", "subcategory"):
        values[name] = _optional_label(record.get(name), name)
    return TaxonomyOverride(household_id=household_id, term=term, **values)


def build_taxonomy_table(
    records: Iterable[Mapping[str, Any]],
    overrides: Iterable[Mapping[str, Any]] = (),
    source: str = "memory",
) -> TaxonomyTable:
    """Build an immutable taxonomy table from raw records.

    Each record's term plus its equivalents form a symmetric group: every member
    lists every other member as an equivalent. Members without a category of
    their own inherit the group's category. Substitutes stay attached to the
    record's term only. Malformed records are logged and skipped.
    """
    equivalents: dict[str, set[str]] = {}
    substitutes: dict[str, set[str]] = {}
    categories: dict[str, tuple[str | None, str | None]] = {}
    groups: list[tuple[frozenset[str], tuple[str | None, str | None]]] = []

    for index, record in enumerate(records):
        try:
            term = _record_term(record)
            group_terms = _term_set(record.get("equivalents"), "equivalents") | {term}
            record_subs = _term_set(record.get("substitutes"), "substitutes") - {term}
            label = (
                _optional_label(record.get("category"), "category"),
                _optional_label(record.get("subcategory"), "subcategory"),
            )
        except TaxonomyDataError as e:
            logger.warning(f"Skipping malformed taxonomy record #{index}: {e}")
            continue

        equivalents.setdefault(term, set())
        substitutes.setdefault(term, set()).update(record_subs)
        if label[0] and term not in categories:
            categories[term] = label
        groups.append((group_terms, label))

    for group_terms, label in groups:
        for member in group_terms:
            equivalents.setdefault(member, set()).update(group_terms - {member})
            if label[0] and member not in categories:
                categories[member] = label

    entries = {}
    for term, equivalent_terms in equivalents.items():
        category, subcategory = categories.get(term, (None, None))
        entries[term] = TaxonomyEntry(
            term=term,
            equivalents=frozenset(equivalent_terms),
            category=category,
            subcategory=subcategory,
            substitutes=frozenset(substitutes.get(term, ())),
        )

    parsed_overrides = {}
    for index, record in enumerate(overrides):
        try:
            override = _parse_override(record)
        except TaxonomyDataError as e:
            logger.warning(f"Skipping malformed household override #{index}: {e}")
            continue
        parsed_overrides[(override.household_id, override.term)] = override

    logger.info(
        f"Built taxonomy table from {source}: {len(entries)} terms, "
        f"{len(parsed_overrides)} household overrides"
    )
    return TaxonomyTable(
        entries=MappingProxyType(entries),
        overrides=MappingProxyType(parsed_overrides),
        source=source,
    )


class TaxonomyResolver:
    """Resolve normalized terms against a taxonomy table.

    The table is injected so tests can build one without process-wide setup.
    """

    def __init__(self, table: TaxonomyTable):
        self.table = table

    def resolve(
        self,
        term: "str | NormalizedTerm",
        household_id: str | None = None,
    ) -> TaxonomyEntry | None:
        """Return the entry for a term, with household overrides applied.

        Override fields replace the global fields wholesale. Unknown terms
        return None.
        """
        key = normalize(term).text
        if not key:
            return None

        entry = self.table.entries.get(key)
        if household_id is None:
            return entry

        override = self.table.overrides.get((household_id, key))
        if override is None:
            return entry

        base = entry or TaxonomyEntry(term=key)
        changes = {
            name: getattr(override, name)
            for name in OVERRIDE_FIELDS
            if getattr(override, name) is not None
        }
        return replace(base, **changes)
