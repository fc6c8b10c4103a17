"""Heuristic project copy used when no rewritten copy is available."""

import random
import re
from collections import Counter
from typing import List, Optional

MAX_DESCRIPTION_LENGTH = 180

_STOP_WORDS = frozenset(
    "the and for with from that this your you are our their into over about more "
    "less was were has have will can all any its it on in at by to of a an as or".split()
)

_OPENINGS = (
    "{name} powers its web presence from {hostname}.",
    "{name} is headquartered on {hostname}, where its core experience lives.",
    "{name} runs its official hub at {hostname}.",
    "The official {name} experience is published on {hostname}.",
    "{hostname} is the primary home for {name}.",
)
_MIDDLES = (
    "Find product updates, docs, and launch details in one place.",
    "Browse documentation, announcements, and ecosystem links.",
    "Explore releases, developer resources, and community touchpoints.",
    "Catch the latest product news, guides, and official resources.",
    "Discover what's new, how it works, and where the community gathers.",
)
_KEYWORD_LINES = (
    "Common topics include {keywords}.",
    "Key themes: {keywords}.",
    "Expect coverage of {keywords}.",
)
_CLOSINGS = (
    "Use this page as the trusted starting point.",
    "This is the authoritative source for the project.",
    "Start here for verified links and updates.",
    "Ideal for first-time visitors and returning users.",
    "The canonical place to learn and connect.",
)


def extract_keywords(text: str, limit: int = 6) -> List[str]:
    """Return the most frequent non-stop-words longer than three characters."""
    words = re.sub(r"[^a-z0-9\s-]", " ", text.lower()).split()
    counts = Counter(w for w in words if len(w) > 3 and w not in _STOP_WORDS)
    return [word for word, _ in counts.most_common(limit)]


def clamp_description(value: str, limit: int = MAX_DESCRIPTION_LENGTH) -> str:
    if len(value) <= limit:
        return value
    return value[: limit - 1].rstrip() + "…"


def build_seo_description(
    name: str,
    hostname: str,
    rng: random.Random,
    meta_description: Optional[str] = None,
    meta_keywords: Optional[str] = None,
) -> str:
    if meta_keywords:
        keyword_list = [k.strip() for k in meta_keywords.split(",") if k.strip()][:5]
    elif meta_description:
        keyword_list = extract_keywords(meta_description)[:4]
    else:
        keyword_list = []

    parts = [
        rng.choice(_OPENINGS).format(name=name, hostname=hostname),
        rng.choice(_MIDDLES),
        rng.choice(_CLOSINGS),
    ]
    if keyword_list:
        parts.append(rng.choice(_KEYWORD_LINES).format(keywords=", ".join(keyword_list)))
    rng.shuffle(parts)
    return clamp_description(" ".join(parts))
