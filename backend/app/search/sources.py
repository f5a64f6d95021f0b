"""Per-domain search sources.

Each source turns a query into scored results for one content domain:

- :class:`MemorySearchSource` scans ``MEMORY.md`` and ``memory/*.md`` on disk.
- :class:`ProjectSearchSource`, :class:`TaskSearchSource` and
  :class:`ActivitySearchSource` run case-insensitive ``ILIKE`` queries
  against the relational store.

Sources are independent of one another. Scores are clamped to ``[0, 1]``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants import SearchDomain
from app.models import Activity, Project, Task
from app.search.matching import best_snippet, build_snippet, contains, score_match
from app.search.results import ActivityResult, MemoryResult, ProjectResult, TaskResult
from app.utils.datetime_utils import datetime_to_iso, utc_date_str

logger = logging.getLogger(__name__)

MEMORY_FILE_NAME = "MEMORY.md"
MEMORY_DIR_NAME = "memory"
DEFAULT_MAX_FILE_BYTES = 300_000

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_LIKE_ESCAPE = "\\"


def _like_pattern(query: str) -> str:
    """Build an ILIKE pattern that matches ``query`` as a literal substring."""
    escaped = (
        query.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _clamp(score: float) -> float:
    return max(0.0, min(1.0, score))


# ---------------------------------------------------------------------------
# Memory notes (filesystem)
# ---------------------------------------------------------------------------


@dataclass
class _FileMatch:
    match_count: int
    first_line: str
    line_number: int  # 1-based


class MemorySearchSource:
    """Line-oriented substring search over markdown memory notes.

    Args:
        root: Directory containing ``MEMORY.md`` and the ``memory/`` folder.
        max_file_bytes: Files larger than this are skipped unread.
    """

    domain = SearchDomain.MEMORY

    def __init__(self, root: str | Path, max_file_bytes: int = DEFAULT_MAX_FILE_BYTES) -> None:
        self._root = Path(root)
        self._max_file_bytes = max_file_bytes

    async def search(self, query: str, limit: int | None = None) -> list[MemoryResult]:
        """Search every memory file. ``limit`` is accepted for symmetry and ignored."""
        return await asyncio.to_thread(self._search_files, query)

    def collect_files(self) -> list[Path]:
        """Return the root memory file (if any) followed by ``memory/*.md``."""
        files: list[Path] = []
        memory_file = self._root / MEMORY_FILE_NAME
        if memory_file.exists():
            files.append(memory_file)

        memory_dir = self._root / MEMORY_DIR_NAME
        if memory_dir.is_dir():
            files.extend(
                sorted(
                    (entry for entry in memory_dir.iterdir() if entry.is_file() and entry.name.endswith(".md")),
                    key=lambda entry: entry.name,
                )
            )
        return files

    def _search_files(self, query: str) -> list[MemoryResult]:
        results: list[MemoryResult] = []
        for path in self.collect_files():
            try:
                if path.stat().st_size > self._max_file_bytes:
                    logger.debug("Skipping oversized memory file: %s", path)
                    continue
                match = self._match_file(path, query)
            except (OSError, UnicodeDecodeError):
                logger.exception("Failed to search memory file: %s", path)
                continue

            if match is None:
                continue

            name_bonus = 0.15 if contains(path.name, query) else 0.0
            score = _clamp(0.55 + match.match_count * 0.05 + name_bonus)
            results.append(
                MemoryResult(
                    title=path.name,
                    snippet=build_snippet(match.first_line, query),
                    score=score,
                    path=str(path),
                    line=match.line_number,
                )
            )
        return results

    @staticmethod
    def _match_file(path: Path, query: str) -> _FileMatch | None:
        content = path.read_text(encoding="utf-8", errors="replace")
        match_count = 0
        first: tuple[int, str] | None = None
        for index, line in enumerate(_LINE_SPLIT_RE.split(content)):
            if contains(line, query):
                match_count += 1
                if first is None:
                    first = (index, line)
        if first is None:
            return None
        return _FileMatch(match_count=match_count, first_line=first[1], line_number=first[0] + 1)


# ---------------------------------------------------------------------------
# Store-backed sources
# ---------------------------------------------------------------------------


class _StoreSearchSource:
    """Base for sources sharing one AsyncSession.

    Each query runs inside a SAVEPOINT; a failed statement rolls back only
    that savepoint, leaving the session usable for later queries.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _fetch_rows(self, stmt) -> list:
        async with self._session.begin_nested():
            result = await self._session.execute(stmt)
            return result.fetchall()


class ProjectSearchSource(_StoreSearchSource):
    """Projects whose title or description contains the query."""

    domain = SearchDomain.PROJECTS

    async def search(self, query: str, limit: int = 20) -> list[ProjectResult]:
        pattern = _like_pattern(query)
        stmt = (
            select(Project.id, Project.title, Project.description, Project.due_date)
            .where(
                or_(
                    Project.title.ilike(pattern, escape=_LIKE_ESCAPE),
                    Project.description.ilike(pattern, escape=_LIKE_ESCAPE),
                )
            )
            .limit(limit)
        )
        rows = await self._fetch_rows(stmt)

        results = []
        for row in rows:
            score = _clamp(0.5 + score_match(row.title, query) + score_match(row.description, query))
            snippet = best_snippet([row.description, row.title], query)
            if row.due_date is not None:
                snippet = f"{snippet} Due {utc_date_str(row.due_date)}".strip()
            results.append(ProjectResult(title=row.title, snippet=snippet, score=score, id=str(row.id)))
        return results


class TaskSearchSource(_StoreSearchSource):
    """Tasks whose own title or parent project title contains the query."""

    domain = SearchDomain.TASKS

    async def search(self, query: str, limit: int = 20) -> list[TaskResult]:
        pattern = _like_pattern(query)
        stmt = (
            select(Task.id, Task.title, Project.title.label("project_title"))
            .outerjoin(Project, Task.project_id == Project.id)
            .where(
                or_(
                    Task.title.ilike(pattern, escape=_LIKE_ESCAPE),
                    Project.title.ilike(pattern, escape=_LIKE_ESCAPE),
                )
            )
            .limit(limit)
        )
        rows = await self._fetch_rows(stmt)

        results = []
        for row in rows:
            project_title = row.project_title or ""
            score = _clamp(0.45 + score_match(row.title, query) + score_match(project_title, query))
            snippet = best_snippet(
                [row.title, f"Project: {project_title}" if project_title else None],
                query,
            )
            results.append(TaskResult(title=row.title, snippet=snippet, score=score, id=str(row.id)))
        return results


class ActivitySearchSource(_StoreSearchSource):
    """Activity log entries matching title, description, action or category."""

    domain = SearchDomain.ACTIVITIES

    async def search(self, query: str, limit: int = 20) -> list[ActivityResult]:
        pattern = _like_pattern(query)
        stmt = (
            select(
                Activity.id,
                Activity.title,
                Activity.description,
                Activity.action,
                Activity.category,
                Activity.timestamp,
            )
            .where(
                or_(
                    Activity.title.ilike(pattern, escape=_LIKE_ESCAPE),
                    Activity.description.ilike(pattern, escape=_LIKE_ESCAPE),
                    Activity.action.ilike(pattern, escape=_LIKE_ESCAPE),
                    Activity.category.ilike(pattern, escape=_LIKE_ESCAPE),
                )
            )
            .order_by(Activity.timestamp.desc())
            .limit(limit)
        )
        rows = await self._fetch_rows(stmt)

        # Category matches add no score; they only make the entry eligible.
        return [
            ActivityResult(
                title=row.title,
                snippet=best_snippet([row.description, row.action, row.category], query),
                score=_clamp(
                    0.4
                    + score_match(row.title, query)
                    + score_match(row.description, query)
                    + score_match(row.action, query)
                ),
                id=str(row.id),
                timestamp=datetime_to_iso(row.timestamp),
            )
            for row in rows
        ]
