"""
conftest.py — Shared pytest fixtures for the SiteCalc estimator test suite.

Engine and parser tests are pure unit tests. Service and route tests run
against the in-memory document store; no database is required.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``sitecalc.*`` imports resolve correctly regardless of where pytest is
    invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any sitecalc imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def engine():
    """EstimateEngine (stateless, one instance serves every calculator)."""
    from sitecalc.services.estimate_engine import EstimateEngine
    return EstimateEngine()


def _blank_estimate(variant, name):
    from sitecalc.models.estimate_models import Estimate
    return Estimate(name=name, variant=variant)


@pytest.fixture
def sqft_estimate():
    """Empty SquareFootage calculator: no sections, grand total 0."""
    return _blank_estimate("SquareFootage", "Drywall")


@pytest.fixture
def three_field_estimate():
    return _blank_estimate("ThreeField", "Allowances")


@pytest.fixture
def seven_field_estimate():
    return _blank_estimate("SevenField", "Deck railing")


@pytest.fixture
def measurement_estimate():
    return _blank_estimate("Measurement", "Takeoff")


@pytest.fixture
def catalog_products():
    """
    Small product list keyed by code, as the engine's product lookup sees it.

      PC-100 : Post cap,       5.00
      RL-200 : Top rail 2x6,  12.50
    """
    from sitecalc.models.estimate_models import ProductRecord
    return {
        "PC-100": ProductRecord(id="p-1", code="PC-100", name="Post cap", price=5.0),
        "RL-200": ProductRecord(id="p-2", code="RL-200", name="Top rail 2x6", price=12.5),
    }


@pytest.fixture
def product_lookup(catalog_products):
    """Synchronous code → ProductRecord lookup (None on a miss)."""
    return catalog_products.get


# ---------------------------------------------------------------------------
# Service fixtures (in-memory store)
# ---------------------------------------------------------------------------

@pytest.fixture
def sql_store(tmp_path):
    """
    SqlDocumentStore over a throwaway SQLite file (aiosqlite).

    NullPool gives every session a fresh connection, so each asyncio.run in
    a test gets connections bound to its own event loop.
    """
    import asyncio
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import NullPool
    from sitecalc.db import Base
    from sitecalc.models import orm_models  # noqa: F401
    from sitecalc.services.document_store import SqlDocumentStore

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sitecalc.db'}", poolclass=NullPool)

    async def _create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create_tables())
    yield SqlDocumentStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
    asyncio.run(engine.dispose())


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Every service test runs once per document store implementation."""
    if request.param == "sql":
        return request.getfixturevalue("sql_store")
    from sitecalc.services.document_store import InMemoryDocumentStore
    return InMemoryDocumentStore()


@pytest.fixture
def catalog(store):
    from sitecalc.services.product_catalog import ProductCatalog
    return ProductCatalog(store)


@pytest.fixture
def project_service(store):
    from sitecalc.services.project_service import ProjectService
    return ProjectService(store)


@pytest.fixture
def calculator_service(store, catalog):
    from sitecalc.services.calculator_service import CalculatorService
    return CalculatorService(store, catalog)


@pytest.fixture(autouse=True)
def _reset_perf_tracker():
    """The mutation tracker is a module singleton; start every test at zero."""
    from sitecalc.services.perf_monitor import tracker
    tracker.reset()
    yield
    tracker.reset()


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def client():
    """TestClient over a fresh app with its own in-memory store."""
    from fastapi.testclient import TestClient
    from sitecalc.main import create_app
    from sitecalc.services.document_store import InMemoryDocumentStore
    return TestClient(create_app(InMemoryDocumentStore()))


@pytest.fixture
def auth_headers():
    """Build a Bearer header for a signed-in user id."""
    from jose import jwt
    from sitecalc.config import JWT_ALGORITHM, JWT_SECRET_KEY

    def _headers(user_id: str) -> dict:
        token = jwt.encode({"sub": user_id}, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
        return {"Authorization": f"Bearer {token}"}

    return _headers
