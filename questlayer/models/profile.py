from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

SourceKind = Literal["html", "extracted-text"]


class ExtractedProfile(BaseModel):
    """Brand signals extracted from one fetched page.

    Every URL field is absolute and scheme-qualified.
    """

    url: str
    domain: str
    source_kind: SourceKind
    title: str  # cleaned, at most three words
    raw_title: Optional[str] = None
    h1: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[str] = None
    theme_color: Optional[str] = None
    og_image: Optional[str] = None
    declared_icon: Optional[str] = None  # icon the page itself links to
    icon_url: Optional[str] = None  # declared icon, else favicon-service fallback
    links: List[str] = Field(default_factory=list)
    social_links: Dict[str, str] = Field(default_factory=dict)
    sitemap_urls: List[str] = Field(default_factory=list)
