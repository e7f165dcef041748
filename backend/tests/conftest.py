"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- HTTP client for API testing (skip list and database overridden)
- Result join rows shaped like the data layer's output
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from labreport.database import get_db
from labreport.main import app
from labreport.routes.skip_ranges import get_skip_list
from labreport.schemas.results import ExceptionEntry, ResultJoinRow
from labreport.services.skip_list import SkipListStore


def make_row(
    value,
    parameter_id,
    parameter_name,
    test_type_id,
    test_type_name,
    category_id,
    category_name,
    *,
    unit=None,
    reference_range=None,
    order=0,
) -> dict:
    """Build a raw join row as returned by the result_value query."""
    return {
        "value": value,
        "parameter": {
            "id": parameter_id,
            "name": parameter_name,
            "unit": unit,
            "reference_range": reference_range,
            "order": order,
            "test_type": {
                "id": test_type_id,
                "name": test_type_name,
                "category": {"id": category_id, "name": category_name},
            },
        },
    }


# =============================================================================
# Result data fixtures
# =============================================================================


@pytest.fixture
def raw_rows() -> list[dict]:
    """A small report: blood count, biochemistry and serology."""
    return [
        make_row("13,5", "p-hb", "Hémoglobine", "t-nfs", "NFS", "c-hema", "Hématologie",
                 unit="g/dL", reference_range="12 - 16", order=1),
        make_row("11.2", "p-gb", "Globules blancs", "t-nfs", "NFS", "c-hema", "Hématologie",
                 unit="10^3/µL", reference_range="4 - 10", order=0),
        make_row("250", "p-plq", "Plaquettes", "t-nfs", "NFS", "c-hema", "Hématologie",
                 unit="10^3/µL", reference_range="150 - 400", order=2),
        make_row("42", "p-vs", "VS 1ère heure", "t-vs", "Vitesse de sédimentation", "c-hema",
                 "Hématologie", unit="mm", reference_range="< 20", order=0),
        make_row("0,95", "p-gly", "Glycémie", "t-gly", "Glycémie à jeun", "c-bio", "Biochimie",
                 unit="g/L", reference_range="0,70 - 1,10", order=0),
        make_row("Négatif", "p-hiv", "Ac anti-VIH", "t-hiv", "Sérologie VIH", "c-sero",
                 "Sérologie", reference_range="Négatif", order=0),
    ]


@pytest.fixture
def rows(raw_rows) -> list[ResultJoinRow]:
    return [ResultJoinRow.model_validate(r) for r in raw_rows]


@pytest.fixture
def skip_entries() -> list[ExceptionEntry]:
    return [ExceptionEntry(value="Sérologie", type="category")]


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest.fixture
def skip_list_store() -> SkipListStore:
    return SkipListStore()


@pytest.fixture
def mock_db():
    return AsyncMock()


@pytest_asyncio.fixture
async def client(skip_list_store, mock_db):
    """Async test client for the FastAPI app.

    The skip list snapshot and database session are overridden, so no
    database is needed. Lifespan events do not run under ASGITransport.
    """

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_skip_list] = lambda: skip_list_store
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.pop(get_skip_list, None)
    app.dependency_overrides.pop(get_db, None)
