"""Quest task generation: three link missions and three onboarding quizzes."""

import random
from typing import Dict, List, Mapping, NamedTuple, Sequence, Tuple

from questlayer.models.task import LinkTask, QuizTask, Task
from questlayer.services.scoring import MAX_SEO_SCORE
from questlayer.services.sitemap import (
    APP_PATTERNS,
    BLOG_PATTERNS,
    DOCS_PATTERNS,
    pick_url_by_pattern,
)

LINK_TASK_COUNT = 3
MAX_LINK_CANDIDATES = 6
MIN_XP = 10
MISSION_SPREAD = 5
QUIZ_SPREAD = 10

# Socials that become missions, in priority order
_SOCIAL_MISSIONS = (
    ("twitter", "Follow on X", "Follow {name} on X for updates."),
    ("discord", "Join Discord", "Join the {name} Discord community."),
    ("telegram", "Join Telegram", "Join the {name} Telegram community."),
    ("github", "View GitHub", "Review {name} repositories on GitHub."),
    ("medium", "Read Blog", "Read the latest {name} updates."),
)

_COMMUNITY_PRIORITY = ("discord", "twitter", "telegram", "github")


class _LinkCandidate(NamedTuple):
    title: str
    link: str
    description: str


def xp_rewards(seo_score: int) -> Tuple[int, int]:
    """Return the *(mission, quiz)* base rewards for *seo_score*."""
    clamped = max(0, min(seo_score, MAX_SEO_SCORE))
    return 40 + clamped * 5, 80 + clamped * 10


def build_xp_set(base: int, spread: int, rng: random.Random) -> List[int]:
    """Return ``base - spread``, ``base`` and ``base + spread`` in random order."""
    values = [max(MIN_XP, round(v)) for v in (base - spread, base, base + spread)]
    rng.shuffle(values)
    return values


def primary_community(socials: Mapping[str, str]) -> str:
    for key in _COMMUNITY_PRIORITY:
        if socials.get(key):
            return key
    return "community"


def _link_candidates(
    project_url: str,
    name: str,
    socials: Mapping[str, str],
    sitemap_urls: Sequence[str],
) -> List[_LinkCandidate]:
    candidates = [
        _LinkCandidate("Visit Website", project_url, f"Explore the official {name} website.")
    ]
    for key, title, description in _SOCIAL_MISSIONS:
        if socials.get(key):
            candidates.append(_LinkCandidate(title, socials[key], description.format(name=name)))

    docs_url = pick_url_by_pattern(sitemap_urls, DOCS_PATTERNS)
    if docs_url:
        candidates.append(_LinkCandidate("Read Docs", docs_url, f"Review the {name} documentation."))

    blog_url = pick_url_by_pattern(sitemap_urls, BLOG_PATTERNS)
    if blog_url:
        candidates.append(_LinkCandidate("Read Blog", blog_url, f"Catch the latest {name} updates."))

    app_url = pick_url_by_pattern(sitemap_urls, APP_PATTERNS)
    if app_url:
        candidates.append(_LinkCandidate("Open App", app_url, f"Launch the {name} app experience."))

    unique: Dict[str, _LinkCandidate] = {}
    for candidate in candidates:
        if len(unique) >= MAX_LINK_CANDIDATES:
            break
        if candidate.link and candidate.link not in unique:
            unique[candidate.link] = candidate
    return list(unique.values())


def build_tasks(
    project_url: str,
    name: str,
    hostname: str,
    socials: Mapping[str, str],
    sitemap_urls: Sequence[str],
    seo_score: int,
    rng: random.Random,
) -> List[Task]:
    """Build the six quest tasks for a project.

    Link missions come from the website, known socials and sitemap pages,
    padded with "Explore {name}" entries when fewer than three exist.  XP
    amounts scale with *seo_score* and are shuffled across slots.
    """
    mission_base, quiz_base = xp_rewards(seo_score)
    mission_xp = build_xp_set(mission_base, MISSION_SPREAD, rng)
    quiz_xp = build_xp_set(quiz_base, QUIZ_SPREAD, rng)

    links = _link_candidates(project_url, name, socials, sitemap_urls)[:LINK_TASK_COUNT]
    while len(links) < LINK_TASK_COUNT:
        links.append(
            _LinkCandidate(
                f"Explore {name}", project_url, f"Learn more about {name} on the official site."
            )
        )

    tasks: List[Task] = [
        LinkTask(
            title=item.title,
            link=item.link,
            xp_reward=mission_xp[idx],
            order_index=idx,
            description=item.description,
        )
        for idx, item in enumerate(links)
    ]

    tasks.extend(
        [
            QuizTask(
                title="Project Name",
                question="What is this project called?",
                answer=name,
                # The name itself is the answer, so it stays out of the prompt
                description="Answer the project name to continue.",
                xp_reward=quiz_xp[0],
                order_index=0,
            ),
            QuizTask(
                title="Official Domain",
                question="Which domain hosts the official site?",
                answer=hostname,
                description=f"Type the main domain of {name}.",
                xp_reward=quiz_xp[1],
                order_index=1,
            ),
            QuizTask(
                title="Community Channel",
                question="Name one official community channel.",
                answer=primary_community(socials),
                description=f"Answer with a {name} community channel (e.g. Discord).",
                xp_reward=quiz_xp[2],
                order_index=2,
            ),
        ]
    )
    return tasks
