"""Federated search over memory notes and dashboard records."""

from app.search.engine import FederatedSearchEngine, SearchFailedError, parse_domains
from app.search.results import (
    ActivityResult,
    MemoryResult,
    ProjectResult,
    SearchCounts,
    SearchPage,
    SearchResult,
    TaskResult,
)

__all__ = [
    "ActivityResult",
    "FederatedSearchEngine",
    "MemoryResult",
    "ProjectResult",
    "SearchCounts",
    "SearchFailedError",
    "SearchPage",
    "SearchResult",
    "TaskResult",
    "parse_domains",
]
