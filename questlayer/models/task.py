from typing import Literal, Union

from pydantic import BaseModel


class LinkTask(BaseModel):
    """A mission that sends the player to an external link."""

    task_kind: Literal["link"] = "link"
    task_section: Literal["missions"] = "missions"
    title: str
    link: str
    xp_reward: int
    order_index: int
    description: str


class QuizTask(BaseModel):
    """An onboarding question with a single free-text answer."""

    task_kind: Literal["quiz"] = "quiz"
    task_section: Literal["onboarding"] = "onboarding"
    title: str
    question: str
    answer: str
    xp_reward: int
    order_index: int
    description: str


Task = Union[LinkTask, QuizTask]
