"""Social profile detection from a page's outbound links."""

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

# Platform key → hosts whose links (or subdomains) belong to that platform
SOCIAL_PLATFORMS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("twitter", ("twitter.com", "x.com")),
    ("discord", ("discord.gg", "discord.com")),
    ("telegram", ("t.me", "telegram.me")),
    ("github", ("github.com",)),
    ("medium", ("medium.com",)),
    ("linkedin", ("linkedin.com",)),
    ("youtube", ("youtube.com", "youtu.be")),
    ("instagram", ("instagram.com",)),
    ("tiktok", ("tiktok.com",)),
    ("facebook", ("facebook.com", "fb.com")),
)

_SHORT_LINK_LENGTH = 60


def _link_host(url: str) -> Optional[str]:
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    return re.sub(r"^www\.", "", hostname.lower())


def platform_for_host(host: str) -> Optional[str]:
    """Return the platform key whose allowed hosts cover *host*, if any."""
    for key, hosts in SOCIAL_PLATFORMS:
        if any(host == domain or host.endswith(f".{domain}") for domain in hosts):
            return key
    return None


def brand_tokens(title: str, domain: str) -> List[str]:
    """Lowercased title words plus the first label of *domain*, deduplicated."""
    candidates = title.lower().split() + [domain.split(".")[0].lower()]
    tokens: List[str] = []
    for token in candidates:
        if token and token not in tokens:
            tokens.append(token)
    return tokens


def score_social_link(link: str, tokens: Sequence[str]) -> int:
    """Score how likely *link* is the brand's own profile.

    +2 for every brand token found in the link, +1 for a short link.  Plain
    substring matching means generic title words ("the", "app") can match
    unrelated profiles.
    """
    lower = link.lower()
    score = sum(2 for token in tokens if token and token in lower)
    if len(link) < _SHORT_LINK_LENGTH:
        score += 1
    return score


def extract_socials(links: Iterable[str], tokens: Sequence[str] = ()) -> Dict[str, str]:
    """Pick at most one profile URL per platform from *links*.

    When several links match a platform the highest-scoring one wins; ties
    keep the link found first.
    """
    socials: Dict[str, str] = {}
    scores: Dict[str, int] = {}
    for href in links:
        host = _link_host(href)
        if host is None:
            continue
        key = platform_for_host(host)
        if key is not None:
            score = score_social_link(href, tokens)
            if key not in scores or score > scores[key]:
                socials[key] = href
                scores[key] = score
        if len(socials) >= len(SOCIAL_PLATFORMS):
            break
    return socials
