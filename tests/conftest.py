"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.api.dependencies import get_taxonomy_table
from src.database import Base
from src.main import app
from src.schemas.ingredient import InventoryProduct
from src.services.matcher import IngredientMatcher
from src.services.taxonomy import TaxonomyResolver, build_taxonomy_table

# Use test database - PostgreSQL if configured, SQLite locally
if os.getenv("TEST_DATABASE_URL"):
    SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DATABASE_URL")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TAXONOMY_RECORDS = [
    {
        "term": "scallion",
        "equivalents": ["green onion"],
        "category": "produce",
        "substitutes": ["leek"],
    },
    {
        "term": "milk",
        "equivalents": ["whole milk"],
        "category": "dairy",
        "substitutes": ["oat milk"],
    },
    {"term": "cheddar", "category": "dairy"},
    {"term": "flour", "equivalents": ["all-purpose flour"], "category": "baking"},
    {"term": "chicken broth", "equivalents": ["chicken stock"], "category": "canned"},
]

TAXONOMY_OVERRIDES = [
    {"household_id": "house-1", "term": "milk", "substitutes": ["almond milk"]},
    {"household_id": "house-1", "term": "scallion", "substitutes": ["chives"]},
]


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    from src import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function")
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def taxonomy_table():
    """Small taxonomy table with one household override."""
    return build_taxonomy_table(TAXONOMY_RECORDS, TAXONOMY_OVERRIDES, source="test")


@pytest.fixture
def resolver(taxonomy_table):
    return TaxonomyResolver(taxonomy_table)


@pytest.fixture
def matcher(resolver):
    return IngredientMatcher(resolver)


@pytest.fixture
def make_product():
    """Factory for inventory products."""

    def _make(product_id, product_name, **kwargs):
        return InventoryProduct(product_id=product_id, product_name=product_name, **kwargs)

    return _make


@pytest.fixture(scope="function")
def client(taxonomy_table):
    """Create a test client serving the test taxonomy table."""
    app.dependency_overrides[get_taxonomy_table] = lambda: taxonomy_table
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
