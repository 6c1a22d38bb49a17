"""Pytest configuration and fixtures for Carrier Lookup tests.

Every test gets its own in-memory SQLite database with the full schema,
an HTTP client wired to it, and bearer headers for both demo accounts.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DATABASE_URL_SYNC"] = "sqlite:///:memory:"

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from carrier_lookup.auth.jwt import create_access_token
from carrier_lookup.database import Base, get_db
from carrier_lookup.main import app


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test; StaticPool keeps it on one connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client with get_db pointed at the per-test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Auth Fixtures ────────────────────────────────────────────────

@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id='1', role='admin')}"}


@pytest.fixture
def user_headers() -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id='2', role='user')}"}


# ── Reference Data Fixtures ──────────────────────────────────────

SEED_PORTS = [
    ("Shanghai", "China", "CNSHA"),
    ("Ningbo", "China", "CNNGB"),
    ("Qingdao", "China", "CNTAO"),
    ("Rotterdam", "Netherlands", "NLRTM"),
    ("Hamburg", "Germany", "DEHAM"),
    ("Los Angeles", "United States", "USLAX"),
]


@pytest_asyncio.fixture
async def carriers(client: AsyncClient, admin_headers: dict) -> dict:
    """Maersk and MSC, keyed by name."""
    created = {}
    for name in ("Maersk", "MSC"):
        response = await client.post(
            "/api/carriers/",
            json={"name": name, "carrierType": "MLO"},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        created[name] = response.json()
    return created


@pytest_asyncio.fixture
async def ports(client: AsyncClient, admin_headers: dict) -> dict:
    """Six seaports, keyed by name."""
    created = {}
    for name, country, unloc in SEED_PORTS:
        response = await client.post(
            "/api/ports/",
            json={"name": name, "country": country, "unloc": unloc},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        created[name] = response.json()
    return created


@pytest_asyncio.fixture
async def service(client: AsyncClient, admin_headers: dict, carriers: dict, ports: dict) -> dict:
    """Maersk "Asia-Europe Express" with Shanghai → Rotterdam and Ningbo → Hamburg."""
    response = await client.post(
        "/api/services/",
        json={
            "name": "Asia-Europe Express",
            "carrierId": carriers["Maersk"]["id"],
            "partnerServices": "MSC",
            "routes": [
                {
                    "polId": ports["Shanghai"]["id"],
                    "podId": ports["Rotterdam"]["id"],
                    "transitTime": "30 days",
                },
                {
                    "polId": ports["Ningbo"]["id"],
                    "podId": ports["Hamburg"]["id"],
                    "transitTime": "28 days",
                },
            ],
        },
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: API endpoint tests")
