"""Board, column, project and task queries shared by the kanban endpoints.

Positions are plain integer counters per parent: a new item is appended
after the current maximum. Nested reads issue one query per level and group
the children in memory.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.constants import DEFAULT_BOARD_NAME, DEFAULT_COLUMNS
from app.models import Board, Column, Project, Task

logger = logging.getLogger(__name__)


@dataclass
class ProjectTree:
    project: Project
    tasks: list[Task] = field(default_factory=list)
    column_name: str | None = None


@dataclass
class ColumnTree:
    column: Column
    projects: list[ProjectTree] = field(default_factory=list)


@dataclass
class BoardTree:
    board: Board
    columns: list[ColumnTree] = field(default_factory=list)


async def next_position(
    db: AsyncSession,
    position_attr: InstrumentedAttribute,
    parent_attr: InstrumentedAttribute,
    parent_id: str,
) -> int:
    """Return the position after the highest one under ``parent_id`` (0 if none)."""
    result = await db.execute(select(func.max(position_attr)).where(parent_attr == parent_id))
    current = result.scalar()
    return (current if current is not None else -1) + 1


async def load_tasks(db: AsyncSession, project_ids: list[str]) -> dict[str, list[Task]]:
    """Tasks for the given projects keyed by project id, ordered by position."""
    if not project_ids:
        return {}
    result = await db.execute(
        select(Task).where(Task.project_id.in_(project_ids)).order_by(Task.project_id, Task.position)
    )
    grouped: dict[str, list[Task]] = defaultdict(list)
    for task in result.scalars().all():
        grouped[task.project_id].append(task)
    return grouped


async def load_projects(
    db: AsyncSession,
    column_id: str | None = None,
    column_ids: list[str] | None = None,
) -> list[ProjectTree]:
    """Projects ordered by position, each with its ordered tasks and column name."""
    stmt = select(Project, Column.name).join(Column, Project.column_id == Column.id).order_by(Project.position)
    if column_id is not None:
        stmt = stmt.where(Project.column_id == column_id)
    if column_ids is not None:
        if not column_ids:
            return []
        stmt = stmt.where(Project.column_id.in_(column_ids))

    result = await db.execute(stmt)
    rows = result.all()
    tasks_by_project = await load_tasks(db, [project.id for project, _ in rows])
    return [
        ProjectTree(project=project, tasks=tasks_by_project.get(project.id, []), column_name=column_name)
        for project, column_name in rows
    ]


async def load_project(db: AsyncSession, project_id: str) -> ProjectTree | None:
    result = await db.execute(
        select(Project, Column.name).join(Column, Project.column_id == Column.id).where(Project.id == project_id)
    )
    row = result.first()
    if row is None:
        return None
    project, column_name = row
    tasks_by_project = await load_tasks(db, [project.id])
    return ProjectTree(project=project, tasks=tasks_by_project.get(project.id, []), column_name=column_name)


async def load_columns(db: AsyncSession, board_id: str | None = None) -> list[ColumnTree]:
    """Columns ordered by position with nested projects and tasks."""
    stmt = select(Column).order_by(Column.position)
    if board_id is not None:
        stmt = stmt.where(Column.board_id == board_id)
    result = await db.execute(stmt)
    columns = list(result.scalars().all())

    projects = await load_projects(db, column_ids=[column.id for column in columns])
    by_column: dict[str, list[ProjectTree]] = defaultdict(list)
    for tree in projects:
        by_column[tree.project.column_id].append(tree)
    return [ColumnTree(column=column, projects=by_column.get(column.id, [])) for column in columns]


async def get_or_create_board(db: AsyncSession) -> BoardTree:
    """Return the first board, creating it with the default columns if absent."""
    result = await db.execute(select(Board).order_by(Board.created_at).limit(1))
    board = result.scalar_one_or_none()

    if board is None:
        board = Board(name=DEFAULT_BOARD_NAME)
        db.add(board)
        await db.flush()
        for column_defaults in DEFAULT_COLUMNS:
            db.add(Column(board_id=board.id, **column_defaults))
        await db.flush()
        await db.refresh(board)
        logger.info("Created default board %s", board.id)

    return BoardTree(board=board, columns=await load_columns(db, board_id=board.id))
