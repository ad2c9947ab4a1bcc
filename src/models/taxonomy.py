"""Taxonomy reference models read by the taxonomy loader."""

from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint, func

from src.database import Base


class IngredientTaxonomy(Base):
    """Global taxonomy record for a canonical ingredient term.

    Equivalents form a symmetric group with the term itself; substitutes are
    directional (each listed term may stand in for this one).
    """

    __tablename__ = "ingredient_taxonomy"

    id = Column(Integer, primary_key=True, index=True)
    term = Column(String(255), nullable=False, unique=True)
    category = Column(String(100), nullable=True)  # "dairy", "produce", ...
    subcategory = Column(String(100), nullable=True)
    equivalents = Column(JSON, nullable=False, default=list)
    substitutes = Column(JSON, nullable=False, default=list)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class HouseholdTaxonomyOverride(Base):
    """Household-scoped override of a taxonomy record.

    A NULL column inherits the global value; a non-NULL column replaces it.
    """

    __tablename__ = "household_taxonomy_overrides"
    __table_args__ = (
        UniqueConstraint("household_id", "term", name="uq_household_taxonomy_term"),
    )

    id = Column(Integer, primary_key=True, index=True)
    household_id = Column(String(64), nullable=False, index=True)
    term = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    subcategory = Column(String(100), nullable=True)
    equivalents = Column(JSON, nullable=True)
    substitutes = Column(JSON, nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
