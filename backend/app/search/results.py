"""Result shapes returned by the federated search.

Each content domain has its own result model; they differ only in the
reference fields they carry and are discriminated by ``type``.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

Score = Annotated[float, Field(ge=0.0, le=1.0)]


class MemoryResult(BaseModel):
    """A matching memory note file."""

    type: Literal["memory"] = "memory"
    title: str  # file name
    snippet: str
    score: Score
    path: str
    line: int  # 1-based line of the first match


class ProjectResult(BaseModel):
    type: Literal["project"] = "project"
    title: str
    snippet: str
    score: Score
    id: str


class TaskResult(BaseModel):
    type: Literal["task"] = "task"
    title: str
    snippet: str
    score: Score
    id: str


class ActivityResult(BaseModel):
    type: Literal["activity"] = "activity"
    title: str
    snippet: str
    score: Score
    id: str
    timestamp: str | None = None  # ISO-8601


SearchResult = Annotated[
    MemoryResult | ProjectResult | TaskResult | ActivityResult,
    Field(discriminator="type"),
]


class SearchCounts(BaseModel):
    """Per-domain result counts, taken before the merged list is truncated."""

    memory: int = 0
    projects: int = 0
    tasks: int = 0
    activities: int = 0


class SearchPage(BaseModel):
    query: str
    results: list[SearchResult]
    counts: SearchCounts
