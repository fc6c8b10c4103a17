"""Shared fixtures: offline HTTP transport, in-memory database, test settings."""

from typing import Callable, Dict

import httpx
import pytest
import pytest_asyncio

from questlayer.config import Settings
from questlayer.db import create_engine
from questlayer.services.store import SqlProjectStore

Route = Callable[[httpx.Request], httpx.Response]


def html_page(body: str, status: int = 200) -> Route:
    return lambda request: httpx.Response(status, html=body)


def text_page(body: str, status: int = 200) -> Route:
    return lambda request: httpx.Response(status, text=body)


def make_client(routes: Dict[str, Route]) -> httpx.AsyncClient:
    """Build an AsyncClient answering from *routes* (full URL → factory); 404 otherwise."""

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def no_dns(monkeypatch):
    """Skip DNS lookups in the SSRF guard; every test host counts as public."""
    monkeypatch.setattr(
        "questlayer.services.normalizer._is_private_address", lambda hostname: False
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        enable_rewrite=False,
        enable_browser=False,
        llm_api_key="",
    )


@pytest_asyncio.fixture
async def store():
    engine = create_engine("sqlite+aiosqlite://")
    sql_store = SqlProjectStore(engine)
    await sql_store.ensure_schema()
    yield sql_store
    await engine.dispose()
