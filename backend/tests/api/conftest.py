"""
Pytest fixtures for API tests.

Provides:
- Test HTTP client with the database dependency pointed at in-memory SQLite
- CSV upload helpers for the admin import endpoint

Database engine, sessions and the seeded sample catalog come from the
top-level conftest.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from autoparts.db.postgres.session import get_db
from autoparts.main import app


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client whose requests each get their own test session."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# =============================================================================
# CSV Fixtures
# =============================================================================


@pytest.fixture
def vehicles_csv() -> bytes:
    """Two importable rows, one duplicate and one row with a blank brand."""
    return "\n".join([
        "Marka;Model;Başlangıç Yılı;Bitiş Yılı;Motor",
        "Hyundai;i20;2015;2020;1.4 MPI",
        "HYUNDAI;I20;2015;2020;1.4 mpi",
        "Dacia;Sandero;2020;2013;",
        ";Duster;2018;2022;",
    ]).encode("utf-8")
