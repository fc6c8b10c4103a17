"""Marketing-copy rewrite through an OpenAI-compatible chat-completions endpoint."""

import json
import logging
import re
from typing import List, NamedTuple, Optional, Set, Tuple

import httpx
from openai import AsyncOpenAI, OpenAIError

from questlayer.config import Settings
from questlayer.models.profile import ExtractedProfile
from questlayer.services.normalizer import clean_title

logger = logging.getLogger(__name__)

MAX_REWRITE_LENGTH = 360
SHINGLE_SIZE = 6
TEMPERATURE = 0.7
RETRY_TEMPERATURE = 1.0

_WORD_RE = re.compile(r"[a-z0-9']+")


class RewriteResult(NamedTuple):
    title: str
    description: str


def find_json_object(text: str) -> Optional[str]:
    """Return the first balanced top-level ``{...}`` block in *text*.

    Braces inside quoted strings (including escaped quotes) are ignored.
    """
    start = -1
    depth = 0
    in_string = False
    escaped = False
    for idx, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            if depth > 0:
                in_string = True
        elif char == "{":
            if depth == 0:
                start = idx
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                return text[start : idx + 1]
    return None


def parse_rewrite(text: str) -> Optional[RewriteResult]:
    """Decode ``{"title": ..., "description": ...}`` from a model reply."""
    block = find_json_object(text)
    if block is None:
        return None
    try:
        data = json.loads(block)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    title = data.get("title")
    description = data.get("description")
    if not isinstance(title, str) or not isinstance(description, str):
        return None
    title = clean_title(title)
    description = " ".join(description.split())[:MAX_REWRITE_LENGTH]
    if not title or not description:
        return None
    return RewriteResult(title=title, description=description)


def _shingles(text: str, size: int) -> Set[Tuple[str, ...]]:
    words = _WORD_RE.findall(text.lower())
    return {tuple(words[i : i + size]) for i in range(len(words) - size + 1)}


def shares_shingle(candidate: str, source: Optional[str], size: int = SHINGLE_SIZE) -> bool:
    """Return True when *candidate* repeats any *size*-word run of *source*."""
    if not source:
        return False
    return bool(_shingles(candidate, size) & _shingles(source, size))


def build_prompt(profile: ExtractedProfile, avoid: Optional[str] = None) -> str:
    signals: List[str] = [
        f"Domain: {profile.domain}",
        f"Page title: {profile.raw_title or profile.title}",
    ]
    if profile.h1:
        signals.append(f"Main heading: {profile.h1}")
    if profile.description:
        signals.append(f"Meta description: {profile.description}")
    if profile.keywords:
        signals.append(f"Keywords: {profile.keywords}")
    if profile.social_links:
        signals.append(f"Social channels: {', '.join(sorted(profile.social_links))}")

    lines = [
        "You write short marketing copy for a web3 project's quest page.",
        "Using the signals below, return ONLY a JSON object with the keys "
        '"title" and "description". No markdown, no commentary.',
        "Rules:",
        "- title: the brand name, at most 3 words.",
        f"- description: 2-3 sentences, at most {MAX_REWRITE_LENGTH} characters.",
        "- Do not copy phrases verbatim from the signals; write fresh copy.",
    ]
    if avoid:
        lines.append(f'- Avoid reusing any wording from this text: "{avoid}"')
    lines.append("")
    lines.extend(signals)
    return "\n".join(lines)


async def _complete(
    llm: AsyncOpenAI, prompt: str, temperature: float, settings: Settings
) -> str:
    response = await llm.chat.completions.create(
        model=settings.llm_model,
        messages=[{"role": "user", "content": prompt}],
        temperature=temperature,
        timeout=settings.rewrite_timeout,
    )
    return response.choices[0].message.content or ""


async def _attempt(
    llm: AsyncOpenAI, prompt: str, temperature: float, settings: Settings
) -> Optional[RewriteResult]:
    try:
        text = await _complete(llm, prompt, temperature, settings)
    except (OpenAIError, AttributeError, IndexError, TypeError) as exc:
        logger.warning("Rewrite request failed (%s)", exc)
        return None
    return parse_rewrite(text)


async def rewrite(
    profile: ExtractedProfile, settings: Settings, client: httpx.AsyncClient
) -> Optional[RewriteResult]:
    """Return rewritten title/description copy, or *None* when unavailable.

    A description that echoes a six-word run of the scraped meta description
    gets exactly one retry at a higher temperature.
    """
    if not settings.enable_rewrite or not settings.llm_api_key:
        return None

    llm = AsyncOpenAI(
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        http_client=client,
        max_retries=0,
    )
    result = await _attempt(llm, build_prompt(profile), TEMPERATURE, settings)
    if result is None:
        return None

    if shares_shingle(result.description, profile.description):
        logger.info("Rewrite for %s echoes the meta description; retrying", profile.domain)
        retry = await _attempt(
            llm,
            build_prompt(profile, avoid=profile.description),
            RETRY_TEMPERATURE,
            settings,
        )
        if retry is not None:
            return retry
    return result
