"""Task CRUD endpoints.

Provides:
- ``GET /tasks`` -- Tasks ordered by position, optionally by project
- ``POST /tasks`` -- Create a task at the end of its project
- ``GET /tasks/{id}``, ``PATCH /tasks/{id}``, ``DELETE /tasks/{id}``
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import DeleteResponse, TaskCreate, TaskResponse, TaskUpdate, task_to_response
from app.database import get_db
from app.models import Project, Task
from app.services.activity_log import spawn_activity_log
from app.services.board_service import next_position

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tasks", tags=["tasks"])


async def _get_task_or_404(db: AsyncSession, task_id: str) -> Task:
    task = await db.get(Task, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.get("")
async def list_tasks(
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: str | None = Query(None, alias="projectId"),  # noqa: B008
) -> list[TaskResponse]:
    stmt = select(Task).order_by(Task.position)
    if project_id is not None:
        stmt = stmt.where(Task.project_id == project_id)
    result = await db.execute(stmt)
    return [task_to_response(task) for task in result.scalars().all()]


@router.post("", status_code=201)
async def create_task(
    body: TaskCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TaskResponse:
    """Create a task appended to the end of its project."""
    if not body.project_id or not body.title:
        raise HTTPException(status_code=400, detail="projectId and title are required")
    if await db.get(Project, body.project_id) is None:
        raise HTTPException(status_code=400, detail="Project not found")

    task = Task(
        project_id=body.project_id,
        title=body.title,
        completed=body.completed,
        position=await next_position(db, Task.position, Task.project_id, body.project_id),
    )
    db.add(task)
    await db.flush()
    await db.refresh(task)

    spawn_activity_log(
        action="create",
        category="task",
        title=f'Created task "{task.title}"',
        metadata={"taskId": task.id, "projectId": task.project_id},
    )
    return task_to_response(task)


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TaskResponse:
    return task_to_response(await _get_task_or_404(db, task_id))


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    body: TaskUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TaskResponse:
    """Apply only the fields present in the request body (last write wins)."""
    task = await _get_task_or_404(db, task_id)
    updates = body.model_dump(exclude_unset=True)

    for required in ("project_id", "title", "completed"):
        if required in updates and updates[required] is None:
            raise HTTPException(status_code=400, detail=f"{required} cannot be null")
    if "title" in updates and not updates["title"]:
        raise HTTPException(status_code=400, detail="title cannot be empty")
    if updates.get("project_id") and updates["project_id"] != task.project_id:
        if await db.get(Project, updates["project_id"]) is None:
            raise HTTPException(status_code=400, detail="Project not found")

    newly_completed = updates.get("completed") is True and not task.completed
    for field_name, value in updates.items():
        setattr(task, field_name, value)

    await db.flush()
    await db.refresh(task)

    if newly_completed:
        spawn_activity_log(
            action="complete",
            category="task",
            title=f'Completed task "{task.title}"',
            metadata={"taskId": task.id, "projectId": task.project_id},
        )
    return task_to_response(task)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DeleteResponse:
    task = await _get_task_or_404(db, task_id)
    await db.delete(task)
    await db.flush()
    return DeleteResponse()
