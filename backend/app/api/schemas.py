"""Response and request schemas shared by the kanban endpoints.

Request bodies accept both snake_case and the dashboard's camelCase keys.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.constants import Priority
from app.models import Task
from app.services.board_service import BoardTree, ColumnTree, ProjectTree
from app.utils.datetime_utils import datetime_to_iso


class CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ProjectCreate(CamelRequest):
    column_id: str | None = None
    title: str | None = None
    description: str | None = None
    assignee: str | None = None
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    labels: list[str] | None = None


class ProjectUpdate(CamelRequest):
    column_id: str | None = None
    title: str | None = None
    description: str | None = None
    assignee: str | None = None
    priority: Priority | None = None
    due_date: datetime | None = None
    position: int | None = None
    labels: list[str] | None = None


class TaskCreate(CamelRequest):
    project_id: str | None = None
    title: str | None = None
    completed: bool = False


class TaskUpdate(CamelRequest):
    project_id: str | None = None
    title: str | None = None
    completed: bool | None = None
    position: int | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TaskResponse(BaseModel):
    id: str
    project_id: str
    title: str
    completed: bool
    position: int
    created_at: str | None
    updated_at: str | None


class ProjectResponse(BaseModel):
    id: str
    column_id: str
    column_name: str | None = None
    title: str
    description: str | None
    assignee: str | None
    priority: str
    due_date: str | None
    position: int
    labels: list[str]
    tasks: list[TaskResponse] = []
    created_at: str | None
    updated_at: str | None


class ColumnResponse(BaseModel):
    id: str
    board_id: str
    name: str
    position: int
    color: str | None
    projects: list[ProjectResponse] = []
    created_at: str | None


class BoardResponse(BaseModel):
    id: str
    name: str
    columns: list[ColumnResponse]
    created_at: str | None
    updated_at: str | None


class DeleteResponse(BaseModel):
    success: bool = True


def task_to_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        project_id=task.project_id,
        title=task.title,
        completed=task.completed,
        position=task.position,
        created_at=datetime_to_iso(task.created_at),
        updated_at=datetime_to_iso(task.updated_at),
    )


def project_to_response(tree: ProjectTree) -> ProjectResponse:
    project = tree.project
    return ProjectResponse(
        id=project.id,
        column_id=project.column_id,
        column_name=tree.column_name,
        title=project.title,
        description=project.description,
        assignee=project.assignee,
        priority=project.priority,
        due_date=datetime_to_iso(project.due_date),
        position=project.position,
        labels=project.labels or [],
        tasks=[task_to_response(task) for task in tree.tasks],
        created_at=datetime_to_iso(project.created_at),
        updated_at=datetime_to_iso(project.updated_at),
    )


def column_to_response(tree: ColumnTree) -> ColumnResponse:
    column = tree.column
    return ColumnResponse(
        id=column.id,
        board_id=column.board_id,
        name=column.name,
        position=column.position,
        color=column.color,
        projects=[project_to_response(project) for project in tree.projects],
        created_at=datetime_to_iso(column.created_at),
    )


def board_to_response(tree: BoardTree) -> BoardResponse:
    board = tree.board
    return BoardResponse(
        id=board.id,
        name=board.name,
        columns=[column_to_response(column) for column in tree.columns],
        created_at=datetime_to_iso(board.created_at),
        updated_at=datetime_to_iso(board.updated_at),
    )
