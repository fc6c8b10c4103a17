"""Normalisation utilities: canonical project URLs, domains, brand titles, favicon fallback."""

import ipaddress
import re
import socket
from typing import Optional
from urllib.parse import urljoin, urlparse

ALLOWED_SCHEMES = {"http", "https"}
MAX_TITLE_WORDS = 3

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_TITLE_SEPARATORS = re.compile(r"[|·—–\-:]")

FAVICON_SERVICE_URL = (
    "https://t1.gstatic.com/faviconV2?client=SOCIAL&type=FAVICON"
    "&fallback_opts=TYPE,SIZE,URL&url=https://{hostname}&size=128"
)


def normalize_url(raw: str) -> str:
    """Return *raw* as an absolute URL with a scheme and without a fragment.

    Raises:
        ValueError: if no hostname can be derived from *raw*.
    """
    value = raw.strip()
    if not _SCHEME_RE.match(value):
        value = f"https://{value}"
    parsed = urlparse(value)
    if not parsed.hostname:
        raise ValueError(f"Invalid URL: {raw!r}")
    if not parsed.path:
        parsed = parsed._replace(path="/")
    return parsed._replace(fragment="").geturl()


def normalize_domain(url: str) -> str:
    """Return the hostname of *url*, lowercased and with ``www.`` stripped."""
    hostname = (urlparse(url).hostname or "").lower()
    return re.sub(r"^www\.", "", hostname)


def clean_title(raw: Optional[str]) -> str:
    """Reduce a page title to a short brand name.

    Keeps the text before the first separator and at most three words, so
    ``"Acme Protocol | Fast Bridges"`` becomes ``"Acme Protocol"``.
    """
    if not raw:
        return ""
    value = _TITLE_SEPARATORS.split(raw.strip(), maxsplit=1)[0]
    words = value.split()
    return " ".join(words[:MAX_TITLE_WORDS])


def strip_scheme(url: str) -> str:
    return _SCHEME_RE.sub("", url)


def resolve_url(value: Optional[str], base_url: str) -> Optional[str]:
    """Resolve *value* against *base_url*; return *None* unless the result is http(s)."""
    if not value:
        return None
    try:
        absolute = urljoin(base_url, value.strip())
        parsed = urlparse(absolute)
    except ValueError:
        return None
    if parsed.scheme not in ALLOWED_SCHEMES or not parsed.netloc:
        return None
    return absolute


def favicon_url(link: str) -> str:
    """Build a favicon-service URL for the host of *link*.

    Returns an empty string when the hostname does not look like a public
    domain (fewer than two labels, or a final label shorter than two chars).
    """
    if not link or len(link) < 4:
        return ""
    value = re.sub(r"[/.]+$", "", link.strip())
    if not _SCHEME_RE.match(value):
        value = f"https://{value}"
    try:
        hostname = urlparse(value).hostname or ""
    except ValueError:
        return ""
    hostname = hostname.rstrip(".")
    parts = hostname.split(".")
    if len(parts) < 2 or len(parts[-1]) < 2:
        return ""
    return FAVICON_SERVICE_URL.format(hostname=hostname)


def _is_private_address(hostname: str) -> bool:
    """Return True if *hostname* resolves to a private, loopback, or link-local address."""
    try:
        infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror:
        return False

    for info in infos:
        # Strip IPv6 zone IDs (e.g. "::1%eth0" → "::1")
        raw_ip = info[4][0].split("%")[0]
        try:
            addr = ipaddress.ip_address(raw_ip)
        except ValueError:
            continue
        if addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_reserved:
            return True
    return False


def validate_url(url: str) -> None:
    """Raise ValueError if *url* fails SSRF / scheme validation."""
    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError("URL must have a valid hostname.")

    if _is_private_address(hostname):
        raise ValueError("Requests to private/internal addresses are not allowed.")
