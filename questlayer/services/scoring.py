"""SEO completeness score used to scale quest rewards."""

from typing import Mapping, Optional, Sequence

MAX_SEO_SCORE = 8
_MIN_DESCRIPTION_LENGTH = 40


def compute_seo_score(
    description: Optional[str] = None,
    og_image: Optional[str] = None,
    logo_url: Optional[str] = None,
    socials: Optional[Mapping[str, str]] = None,
    sitemap_urls: Optional[Sequence[str]] = None,
    title: Optional[str] = None,
    hostname: Optional[str] = None,
) -> int:
    """Return a 0–8 score from the presence and quality of brand signals."""
    score = 0
    if description and len(description.strip()) > _MIN_DESCRIPTION_LENGTH:
        score += 2
    if og_image:
        score += 2
    if logo_url:
        score += 1
    if socials:
        score += 1
    if sitemap_urls:
        score += 1
    if title and hostname and title.lower() != hostname.lower():
        score += 1
    return score
