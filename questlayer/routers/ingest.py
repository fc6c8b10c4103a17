import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from questlayer.config import Settings, get_settings
from questlayer.db import create_engine
from questlayer.errors import ConfigurationError
from questlayer.models.request import IngestRequest
from questlayer.models.response import IngestResponse
from questlayer.services.pipeline import ingest_urls
from questlayer.services.store import ProjectStore, SqlProjectStore

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


@lru_cache
def _store_for(database_url: str) -> SqlProjectStore:
    return SqlProjectStore(create_engine(database_url))


async def open_store(settings: Settings) -> ProjectStore:
    """Return the project store for *settings*, creating tables on first use.

    Raises:
        ConfigurationError: if no database URL is configured.
    """
    if not settings.database_url:
        raise ConfigurationError("Missing database credentials.")
    store = _store_for(settings.database_url)
    await store.ensure_schema()
    return store


@router.post(
    "/ingest",
    response_model=IngestResponse,
    summary="Ingest websites as quest projects",
    description=(
        "Fetches each URL, extracts brand signals (title, description, socials, "
        "images), scores SEO completeness and stores the project together with "
        "six generated quest tasks.  URLs are processed one after another; a "
        "failing URL is reported inline and never aborts the batch."
    ),
)
@limiter.limit("10/minute")
async def ingest(
    request: Request,
    body: IngestRequest,
    settings: Settings = Depends(get_settings),
) -> IngestResponse:
    urls = body.targets()
    logger.info("Ingest request received", extra={"url_count": len(urls)})

    store = await open_store(settings)
    results = await ingest_urls(urls, store=store, settings=settings)
    return IngestResponse(results=results)
