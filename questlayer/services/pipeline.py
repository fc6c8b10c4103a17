"""Ingestion pipeline: URL → fetched page → brand profile → project + quest tasks."""

import logging
import random
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse

import httpx

from questlayer.config import Settings
from questlayer.errors import FetchFailedError, IngestError
from questlayer.models.profile import ExtractedProfile
from questlayer.models.response import IngestFailure, IngestResult, IngestSuccess
from questlayer.services.copywriter import build_seo_description
from questlayer.services.extractor import extract
from questlayer.services.fetcher import fetch_via_reader
from questlayer.services.normalizer import normalize_url, validate_url
from questlayer.services.readable import extract_text_links
from questlayer.services.rewriter import rewrite
from questlayer.services.scoring import compute_seo_score
from questlayer.services.sitemap import discover_urls_via_sitemap
from questlayer.services.socials import brand_tokens, extract_socials
from questlayer.services.store import ProjectStore
from questlayer.services.strategy import fetch_page
from questlayer.services.tasks import build_tasks

logger = logging.getLogger(__name__)

DEFAULT_POSITION = "bottom-right"
DEFAULT_THEME = "sleek"
ACCENT_PALETTE = ("#6366f1", "#8b5cf6", "#ec4899", "#14b8a6", "#f59e0b", "#3b82f6")


async def _secondary_socials(
    profile: ExtractedProfile, settings: Settings, client: httpx.AsyncClient
) -> Dict[str, str]:
    """Look for social links in the relay rendition of a page.

    Catches icons injected by JavaScript that the raw HTML does not contain.
    """
    text = await fetch_via_reader(profile.url, settings, client)
    if not text:
        return {}
    return extract_socials(extract_text_links(text), brand_tokens(profile.title, profile.domain))


def _project_fields(
    profile: ExtractedProfile, name: str, description: str, rng: random.Random
) -> Dict[str, Any]:
    return {
        "name": name,
        "domain": profile.domain,
        "description": description,
        "social_links": dict(profile.social_links) or None,
        "accent_color": profile.theme_color or rng.choice(ACCENT_PALETTE),
        "position": DEFAULT_POSITION,
        "theme": DEFAULT_THEME,
        "logo_url": profile.icon_url,
        "banner_url": profile.og_image or profile.icon_url,
    }


async def ingest_url(
    raw_url: str,
    *,
    store: ProjectStore,
    settings: Settings,
    rng: random.Random,
    client: httpx.AsyncClient,
) -> IngestSuccess:
    """Run the full pipeline for one URL.

    Raises:
        ValueError: if *raw_url* is not a public http(s) URL.
        FetchFailedError: if no fetch strategy produced content.
        PersistenceError: if the project or its tasks could not be stored.
    """
    project_url = normalize_url(raw_url)
    validate_url(project_url)

    fetched = await fetch_page(project_url, settings, client)
    if fetched is None:
        raise FetchFailedError("Failed to fetch HTML (bot protection or network error)")

    profile = extract(fetched, project_url)
    if not profile.social_links and fetched.source_kind != "extracted-text":
        profile.social_links = await _secondary_socials(profile, settings, client)

    copy = await rewrite(profile, settings, client)
    if copy is not None:
        name, description = copy.title, copy.description
    else:
        name = profile.title
        description = build_seo_description(
            name, profile.domain, rng, profile.description, profile.keywords
        )

    parsed = urlparse(project_url)
    profile.sitemap_urls = await discover_urls_via_sitemap(
        f"{parsed.scheme}://{parsed.netloc}", settings, client
    )

    seo_score = compute_seo_score(
        description=profile.description,
        og_image=profile.og_image,
        logo_url=profile.declared_icon,
        socials=profile.social_links,
        sitemap_urls=profile.sitemap_urls,
        title=profile.title,
        hostname=profile.domain,
    )
    tasks = build_tasks(
        project_url,
        name,
        profile.domain,
        profile.social_links,
        profile.sitemap_urls,
        seo_score,
        rng,
    )

    project_id = await store.find_project_id_by_domain(profile.domain)
    project_id = await store.upsert_project(
        project_id, _project_fields(profile, name, description, rng)
    )
    await store.replace_tasks(project_id, tasks)

    logger.info(
        "Ingested %s as project %s (score %d, %d tasks)",
        profile.domain,
        project_id,
        seo_score,
        len(tasks),
    )
    return IngestSuccess(
        url=project_url,
        project_id=project_id,
        name=name,
        domain=profile.domain,
        seo_score=seo_score,
        socials=list(profile.social_links),
        tasks=len(tasks),
    )


async def ingest_urls(
    urls: Sequence[str],
    *,
    store: ProjectStore,
    settings: Settings,
    rng: Optional[random.Random] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[IngestResult]:
    """Ingest *urls* one after another; a failing URL never stops the batch.

    Results are returned in input order.
    """
    rng = rng or random.Random()
    results: List[IngestResult] = []
    for raw_url in urls:
        try:
            if client is not None:
                result = await ingest_url(
                    raw_url, store=store, settings=settings, rng=rng, client=client
                )
            else:
                async with httpx.AsyncClient(follow_redirects=True) as own_client:
                    result = await ingest_url(
                        raw_url, store=store, settings=settings, rng=rng, client=own_client
                    )
        except (IngestError, ValueError) as exc:
            logger.warning("Ingest failed for %s: %s", raw_url, exc)
            results.append(IngestFailure(url=raw_url, error=str(exc) or "Failed to ingest"))
            continue
        except Exception:
            logger.exception("Unexpected error while ingesting %s", raw_url)
            results.append(IngestFailure(url=raw_url, error="Failed to ingest"))
            continue
        results.append(result)
    return results
