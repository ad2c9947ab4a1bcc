"""Taxonomy loading and the process-wide copy-and-swap provider."""

import json
import logging
import time
from collections.abc import Callable
from pathlib import Path

from sqlalchemy.orm import Session

from src.config import Settings
from src.models.taxonomy import HouseholdTaxonomyOverride, IngredientTaxonomy
from src.services.taxonomy import TaxonomyTable, build_taxonomy_table

logger = logging.getLogger(__name__)

TaxonomyLoader = Callable[[], TaxonomyTable]


def load_taxonomy_file(path: Path) -> TaxonomyTable:
    """Load a taxonomy table from a JSON document.

    Expected shape:
        {
            "entries": [
                {"term": str, "equivalents": [str], "category": str,
                 "subcategory": str, "substitutes": [str]}
            ],
            "household_overrides": [
                {"household_id": str, "term": str, ...}
            ]
        }
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Taxonomy file {path} must contain a JSON object")

    return build_taxonomy_table(
        data.get("entries", []),
        data.get("household_overrides", []),
        source=f"file:{Path(path).name}",
    )


def load_taxonomy_from_db(db: Session) -> TaxonomyTable:
    """Load the global taxonomy and household overrides from the database."""
    rows = db.query(IngredientTaxonomy).order_by(IngredientTaxonomy.id).all()
    override_rows = (
        db.query(HouseholdTaxonomyOverride).order_by(HouseholdTaxonomyOverride.id).all()
    )

    records = [
        {
            "term": row.term,
            "equivalents": row.equivalents,
            "category": row.category,
            "subcategory": row.subcategory,
            "substitutes": row.substitutes,
        }
        for row in rows
    ]
    overrides = [
        {
            "household_id": row.household_id,
            "term": row.term,
            "equivalents": row.equivalents,
            "category": row.category,
            "subcategory": row.subcategory,
            "substitutes": row.substitutes,
        }
        for row in override_rows
    ]
    return build_taxonomy_table(records, overrides, source="database")


def seed_taxonomy_db(db: Session, path: Path) -> int:
    """Replace the taxonomy tables with the contents of a JSON taxonomy document.

    Returns the number of global records written.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Taxonomy file {path} must contain a JSON object")

    # Validate the whole document before touching the tables
    table = build_taxonomy_table(data.get("entries", []), data.get("household_overrides", []))

    db.query(HouseholdTaxonomyOverride).delete()
    db.query(IngredientTaxonomy).delete()
    for entry in sorted(table.entries.values(), key=lambda e: e.term):
        db.add(
            IngredientTaxonomy(
                term=entry.term,
                category=entry.category,
                subcategory=entry.subcategory,
                equivalents=sorted(entry.equivalents),
                substitutes=sorted(entry.substitutes),
            )
        )
    for (household_id, term), override in sorted(table.overrides.items()):
        db.add(
            HouseholdTaxonomyOverride(
                household_id=household_id,
                term=term,
                category=override.category,
                subcategory=override.subcategory,
                equivalents=_sorted_or_none(override.equivalents),
                substitutes=_sorted_or_none(override.substitutes),
            )
        )
    db.commit()

    logger.info(f"Seeded {len(table.entries)} taxonomy terms from {Path(path).name}")
    return len(table.entries)


def _sorted_or_none(values):
    return sorted(values) if values is not None else None


def make_taxonomy_loader(settings: Settings) -> TaxonomyLoader:
    """Pick the taxonomy loader configured for this process."""
    if settings.taxonomy_source == "database":
        from src.database import SessionLocal

        def load_from_database() -> TaxonomyTable:
            db = SessionLocal()
            try:
                return load_taxonomy_from_db(db)
            finally:
                db.close()

        return load_from_database

    path = settings.taxonomy_path
    return lambda: load_taxonomy_file(path)


class TaxonomyProvider:
    """Hold the current taxonomy table and replace it wholesale on refresh.

    Readers call current() and keep the returned table for the whole request.
    A refresh builds a complete new table and swaps the reference in a single
    assignment, so readers never observe a partially built table.
    """

    def __init__(
        self,
        loader: TaxonomyLoader,
        refresh_seconds: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self.refresh_seconds = refresh_seconds
        self._clock = clock
        self._table: TaxonomyTable | None = None
        self._loaded_at = 0.0

    @property
    def is_stale(self) -> bool:
        if self._table is None:
            return True
        if not self.refresh_seconds:
            return False
        return self._clock() - self._loaded_at >= self.refresh_seconds

    def refresh(self) -> TaxonomyTable:
        """Load a new table and swap it in. Raises if the loader fails."""
        table = self._loader()
        self._table = table
        self._loaded_at = self._clock()
        logger.info(f"Taxonomy table refreshed from {table.source} ({len(table)} terms)")
        return table

    def current(self) -> TaxonomyTable:
        """Return the current table, refreshing it first when stale.

        A failed refresh keeps the previous table; with no previous table an
        empty one is used so matching degrades to exact/partial tiers.
        """
        if self.is_stale:
            try:
                return self.refresh()
            except Exception:
                logger.exception("Taxonomy refresh failed")
                if self._table is None:
                    self._table = TaxonomyTable()
                # Retry after another full interval, not on every request
                self._loaded_at = self._clock()
        return self._table
