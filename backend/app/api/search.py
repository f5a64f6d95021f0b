"""Search API endpoint for Mission Control.

Provides:
- ``GET /search`` -- Free-text search across memory notes, projects, tasks,
  and the activity log, merged into one score-ordered list.

Query parameters:
- ``q``: search text (blank returns no results and zero counts)
- ``limit``: maximum merged results (default 20, clamped to 1..200;
  unparseable values fall back to the default)
- ``domains``: comma-separated subset of ``memory,projects,tasks,activities``
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.database import get_db
from app.search.engine import DEFAULT_LIMIT, MAX_LIMIT, FederatedSearchEngine, SearchFailedError, parse_domains
from app.search.results import SearchPage
from app.search.sources import (
    ActivitySearchSource,
    MemorySearchSource,
    ProjectSearchSource,
    TaskSearchSource,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


# ---------------------------------------------------------------------------
# Engine factory (extracted for easy mocking in tests)
# ---------------------------------------------------------------------------


def _build_search_engine(session: AsyncSession, settings: Settings | None = None) -> FederatedSearchEngine:
    """Create a FederatedSearchEngine wired to the memory directory and the store."""
    if settings is None:
        settings = get_settings()
    return FederatedSearchEngine(
        sources=[
            MemorySearchSource(settings.MEMORY_ROOT, max_file_bytes=settings.SEARCH_MAX_FILE_BYTES),
            ProjectSearchSource(session),
            TaskSearchSource(session),
            ActivitySearchSource(session),
        ]
    )


def parse_limit(raw: str | None, default: int = DEFAULT_LIMIT) -> int:
    """Parse the ``limit`` parameter, clamping to ``1..MAX_LIMIT``."""
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return min(max(1, value), MAX_LIMIT)


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


@router.get("")
async def search(
    db: Annotated[AsyncSession, Depends(get_db)],
    q: str = Query("", description="Search query"),  # noqa: B008
    limit: str | None = Query(None, description="Maximum number of results"),  # noqa: B008
    domains: str | None = Query(None, description="Comma-separated domains to search"),  # noqa: B008
) -> SearchPage:
    """Search memory notes, projects, tasks and activities.

    Returns:
        SearchPage with the trimmed query echo, merged results, and
        per-domain counts taken before truncation.
    """
    settings = get_settings()
    parsed_limit = parse_limit(limit, settings.SEARCH_DEFAULT_LIMIT)
    selected = parse_domains(domains)
    logger.info(
        "Search request: query=%r, domains=%s, limit=%d",
        q,
        ",".join(sorted(domain.value for domain in selected)),
        parsed_limit,
    )

    engine = _build_search_engine(db, settings)
    try:
        return await engine.search(q, domains=selected, limit=parsed_limit)
    except SearchFailedError:
        raise HTTPException(status_code=500, detail="Search failed") from None
    except Exception:
        logger.exception("Search failed")
        raise HTTPException(status_code=500, detail="Search failed") from None
