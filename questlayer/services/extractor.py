"""Brand-signal extraction from fetched pages (raw HTML or relay text)."""

from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from questlayer.models.profile import ExtractedProfile
from questlayer.services.normalizer import clean_title, favicon_url, normalize_domain, resolve_url
from questlayer.services.readable import extract_readable
from questlayer.services.socials import brand_tokens, extract_socials
from questlayer.services.strategy import FetchResult

# Checked in order; the first declared icon wins
_ICON_RELS = (
    "apple-touch-icon",
    "apple-touch-icon-precomposed",
    "icon",
    "shortcut icon",
    "mask-icon",
)


def _tag_text(soup: BeautifulSoup, name: str) -> Optional[str]:
    tag = soup.find(name)
    if tag:
        text = tag.get_text(" ", strip=True)
        return text or None
    return None


def meta_content(soup: BeautifulSoup, key: str) -> Optional[str]:
    """Return the ``content`` of the ``<meta>`` whose property or name is *key*."""
    key = key.lower()
    for meta in soup.find_all("meta"):
        prop = str(meta.get("property") or "").strip().lower()
        name = str(meta.get("name") or "").strip().lower()
        if key in (prop, name):
            content = str(meta.get("content") or "").strip()
            if content:
                return content
    return None


def _first_meta(soup: BeautifulSoup, *keys: str) -> Optional[str]:
    for key in keys:
        value = meta_content(soup, key)
        if value:
            return value
    return None


def _icon_href(soup: BeautifulSoup, rel_value: str) -> Optional[str]:
    for link in soup.find_all("link", href=True):
        rel = link.get("rel") or []
        if isinstance(rel, str):
            rel = rel.split()
        if " ".join(rel).lower() == rel_value:
            return str(link["href"]).strip()
    return None


def _extract_og_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    image = _first_meta(soup, "og:image", "twitter:image", "twitter:image:src")
    if not image:
        return None
    if image.startswith("//"):
        image = f"https:{image}"
    return resolve_url(image, base_url)


def _extract_icon(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    for rel_value in _ICON_RELS:
        resolved = resolve_url(_icon_href(soup, rel_value), base_url)
        if resolved:
            return resolved
    return None


def extract_links(soup: BeautifulSoup, base_url: str) -> List[str]:
    links: List[str] = []
    for a in soup.find_all("a", href=True):
        href = str(a["href"]).strip()
        if not href or href.lower().startswith(("mailto:", "javascript:")):
            continue
        try:
            absolute = urljoin(base_url, href)
            parsed = urlparse(absolute)
        except ValueError:
            continue
        if parsed.scheme and parsed.netloc:
            links.append(absolute)
    return links


def extract_html(html: str, url: str) -> ExtractedProfile:
    """Extract brand signals from a raw HTML page fetched from *url*."""
    soup = BeautifulSoup(html, "lxml")
    domain = normalize_domain(url)

    raw_title = _tag_text(soup, "title")
    h1 = _tag_text(soup, "h1")
    title = clean_title(raw_title) or clean_title(h1) or domain

    declared_icon = _extract_icon(soup, url)
    links = extract_links(soup, url)

    return ExtractedProfile(
        url=url,
        domain=domain,
        source_kind="html",
        title=title,
        raw_title=raw_title,
        h1=h1,
        description=_first_meta(soup, "description", "og:description", "twitter:description"),
        keywords=meta_content(soup, "keywords"),
        theme_color=meta_content(soup, "theme-color"),
        og_image=_extract_og_image(soup, url),
        declared_icon=declared_icon,
        icon_url=declared_icon or favicon_url(url) or None,
        links=links,
        social_links=extract_socials(links, brand_tokens(title, domain)),
    )


def extract_text(text: str, url: str) -> ExtractedProfile:
    """Extract brand signals from the text-extraction relay's output for *url*."""
    domain = normalize_domain(url)
    raw_title, description, links = extract_readable(text)
    title = clean_title(raw_title) or domain

    return ExtractedProfile(
        url=url,
        domain=domain,
        source_kind="extracted-text",
        title=title,
        raw_title=raw_title,
        description=description,
        icon_url=favicon_url(url) or None,
        links=links,
        social_links=extract_socials(links, brand_tokens(title, domain)),
    )


def extract(result: FetchResult, url: str) -> ExtractedProfile:
    """Dispatch to the HTML or readable-text extraction path."""
    if result.source_kind == "extracted-text":
        return extract_text(result.content, url)
    return extract_html(result.content, url)
