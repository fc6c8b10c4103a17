"""Parsing of readable-text relay output (``Title:`` header + Markdown body)."""

import re
from typing import List, Optional, Tuple

from questlayer.services.normalizer import clean_title

CONTENT_MARKER = "Markdown Content:"
MIN_SENTENCE_LENGTH = 20
MAX_SENTENCES = 2

_TITLE_RE = re.compile(r"^Title:\s*(.+)$", re.MULTILINE)
_URL_TOKEN_RE = re.compile(r"https?://[^\s)]+")

_CODE_FENCE_RE = re.compile(r"```.*?```", re.DOTALL)
_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
# Heading markers, emphasis runs, blockquotes and inline-code ticks
_MARKUP_RE = re.compile(r"[#*_`~>|]+")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")

# Lines matching any of these are navigation / legal / placeholder noise
_BOILERPLATE_RE = re.compile(
    r"\b(?:skip to (?:main )?content|navigation|main menu|toggle menu|"
    r"cookies?|privacy(?: policy)?|terms of (?:service|use)|copyright|"
    r"all rights reserved|opens in (?:a )?new (?:window|tab)|"
    r"sign in|log in|subscribe to our newsletter)\b"
    r"|©"
    r"|^\s*(?:image|img)\s*\d*\s*:?\s*$"
    r"|^\s*!?\[?image\s*\d+",
    re.IGNORECASE,
)

_TRAILING_URL_PUNCTUATION = ".,;:!?'\"]>"


def parse_title(text: str) -> Optional[str]:
    match = _TITLE_RE.search(text)
    if match:
        return match.group(1).strip() or None
    return None


def strip_header(text: str) -> str:
    """Return the readable body that follows the relay's metadata header."""
    idx = text.find(CONTENT_MARKER)
    if idx == -1:
        return text
    return text[idx + len(CONTENT_MARKER):].strip()


def extract_text_links(text: str) -> List[str]:
    """Scan *text* for bare ``http(s)://`` tokens."""
    links = []
    for token in _URL_TOKEN_RE.findall(text):
        token = token.rstrip(_TRAILING_URL_PUNCTUATION)
        if token:
            links.append(token)
    return links


def _strip_markdown(body: str) -> str:
    body = _CODE_FENCE_RE.sub(" ", body)
    body = _IMAGE_RE.sub(" ", body)
    body = _LINK_RE.sub(r"\1", body)
    return _MARKUP_RE.sub(" ", body)


def _is_boilerplate(line: str) -> bool:
    return bool(_BOILERPLATE_RE.search(line))


def summarize_body(body: str, title: Optional[str] = None) -> Optional[str]:
    """Derive a short description from a Markdown body.

    Boilerplate lines and the page title are removed; the first two sentences
    of at least 20 characters are kept, or the whole cleaned text when no
    sentence qualifies.
    """
    lines = [line.strip() for line in _strip_markdown(body).splitlines()]
    kept = [line for line in lines if line and not _is_boilerplate(line)]
    text = " ".join(kept)

    if title:
        title_re = re.compile(rf"(?<!\w){re.escape(title)}(?!\w)", re.IGNORECASE)
        text = title_re.sub(" ", text)

    text = re.sub(r"\s+", " ", text).strip()
    if not text:
        return None

    sentences = [
        s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if len(s.strip()) >= MIN_SENTENCE_LENGTH
    ]
    if not sentences:
        return text
    return " ".join(sentences[:MAX_SENTENCES])


def extract_readable(text: str) -> Tuple[Optional[str], Optional[str], List[str]]:
    """Extract *(title, description, links)* from relay output."""
    raw_title = parse_title(text)
    description = summarize_body(strip_header(text), clean_title(raw_title))
    return raw_title, description, extract_text_links(text)
