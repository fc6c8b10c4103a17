from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field


class IngestSuccess(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    project_id: str = Field(alias="projectId")
    name: str
    domain: str
    seo_score: int
    socials: List[str]
    tasks: int


class IngestFailure(BaseModel):
    url: str
    error: str


IngestResult = Union[IngestSuccess, IngestFailure]


class IngestResponse(BaseModel):
    results: List[IngestResult]
