"""Pytest configuration and fixtures for the storefront service."""

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient

from storefront.config import settings
from storefront.services.storage.document_store import DocumentStore, get_redis_client


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    from storefront.main import app

    client = fakeredis.FakeRedis(decode_responses=True)
    app.dependency_overrides[get_redis_client] = lambda: client
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()
        app.dependency_overrides.pop(get_redis_client, None)


@pytest_asyncio.fixture()
async def store(redis_client):
    """Document store sharing the fake Redis used by the API."""
    return DocumentStore(redis_client, settings.STORE_KEY_PREFIX)


@pytest_asyncio.fixture()
async def client(redis_client):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from storefront.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


def _product_document(**overrides):
    document = {
        "title": "Toyota 4-Button Remote",
        "sku": "1001",
        "price": "100.00",
        "categoryId": "remotes",
        "status": "active",
    }
    document.update(overrides)
    return document


def _discount_document(**overrides):
    document = {
        "name": "Spring Sale",
        "type": "percentage",
        "value": 20,
        "active": True,
        "hasStartDate": False,
        "hasEndDate": False,
        "applicableProducts": [],
        "applicableCategories": [],
        "usedCount": 0,
    }
    document.update(overrides)
    return document


@pytest.fixture()
def product_document():
    """Factory for a minimal stored product."""
    return _product_document


@pytest.fixture()
def discount_document():
    """Factory for an active percentage discount with no validity window."""
    return _discount_document
