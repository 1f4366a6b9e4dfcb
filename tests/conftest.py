import asyncio

import httpx
import pytest

from courier_client.app import CourierApp
from courier_client.core_settings import Settings
from courier_client.infrastructure.api import CourierApi
from courier_client.infrastructure.token_store import MemoryTokenStore

from tests.fake_backend import FakeBackend, VALID_TOKEN

BASE_URL = "http://testserver"


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def settings():
    return Settings(API_BASE_URL=BASE_URL, HISTORY_PAGE_SIZE=2, ORDER_CACHE_SIZE=16, ORDER_CACHE_TTL=60)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http_client(backend):
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=backend.app), base_url=BASE_URL)


@pytest.fixture
def api(settings, http_client):
    return CourierApi(settings, client=http_client)


@pytest.fixture
def store():
    return MemoryTokenStore()


@pytest.fixture
def app(settings, store, http_client):
    return CourierApp(settings=settings, store=store, http_client=http_client)


@pytest.fixture
def signed_in_app(app, store):
    """App whose session was restored from a valid stored token."""
    store.set(VALID_TOKEN)
    run(app.session.restore())
    return app
