"""Project CRUD endpoints.

Provides:
- ``GET /projects`` -- Projects ordered by position, optionally by column
- ``POST /projects`` -- Create a project at the end of its column
- ``GET /projects/{id}`` -- One project with its tasks
- ``PATCH /projects/{id}`` -- Partial update (move, reorder, edit)
- ``DELETE /projects/{id}`` -- Delete a project and its tasks
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import (
    DeleteResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    project_to_response,
)
from app.database import get_db
from app.models import Column, Project
from app.services.activity_log import spawn_activity_log
from app.services.board_service import load_project, load_projects, next_position

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/projects", tags=["projects"])


async def _get_project_or_404(db: AsyncSession, project_id: str) -> Project:
    project = await db.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


async def _project_response(db: AsyncSession, project_id: str) -> ProjectResponse:
    tree = await load_project(db, project_id)
    if tree is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project_to_response(tree)


@router.get("")
async def list_projects(
    db: Annotated[AsyncSession, Depends(get_db)],
    column_id: str | None = Query(None, alias="columnId"),  # noqa: B008
) -> list[ProjectResponse]:
    """Return projects ordered by position with their tasks."""
    projects = await load_projects(db, column_id=column_id)
    return [project_to_response(tree) for tree in projects]


@router.post("", status_code=201)
async def create_project(
    body: ProjectCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectResponse:
    """Create a project appended to the end of its column."""
    if not body.column_id or not body.title:
        raise HTTPException(status_code=400, detail="columnId and title are required")
    if await db.get(Column, body.column_id) is None:
        raise HTTPException(status_code=400, detail="Column not found")

    project = Project(
        column_id=body.column_id,
        title=body.title,
        description=body.description or None,
        assignee=body.assignee or None,
        priority=body.priority.value,
        due_date=body.due_date,
        position=await next_position(db, Project.position, Project.column_id, body.column_id),
        labels=body.labels or [],
    )
    db.add(project)
    await db.flush()
    await db.refresh(project)

    spawn_activity_log(
        action="create",
        category="project",
        title=f'Created project "{project.title}"',
        description=project.description,
        metadata={"projectId": project.id, "columnId": project.column_id, "priority": project.priority},
    )
    logger.info("Created project %s in column %s", project.id, project.column_id)
    return await _project_response(db, project.id)


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectResponse:
    return await _project_response(db, project_id)


@router.patch("/{project_id}")
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProjectResponse:
    """Apply only the fields present in the request body (last write wins)."""
    project = await _get_project_or_404(db, project_id)

    updates = body.model_dump(exclude_unset=True)
    if "column_id" in updates and updates["column_id"] is None:
        raise HTTPException(status_code=400, detail="columnId cannot be null")
    if "title" in updates and not updates["title"]:
        raise HTTPException(status_code=400, detail="title cannot be empty")
    if updates.get("column_id") and updates["column_id"] != project.column_id:
        if await db.get(Column, updates["column_id"]) is None:
            raise HTTPException(status_code=400, detail="Column not found")
    if "priority" in updates and updates["priority"] is not None:
        updates["priority"] = updates["priority"].value
    elif "priority" in updates:
        del updates["priority"]
    if "labels" in updates and updates["labels"] is None:
        updates["labels"] = []

    for field_name, value in updates.items():
        setattr(project, field_name, value)

    await db.flush()
    await db.refresh(project)
    return await _project_response(db, project.id)


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DeleteResponse:
    project = await _get_project_or_404(db, project_id)
    await db.delete(project)
    await db.flush()
    logger.info("Deleted project %s", project_id)
    return DeleteResponse()
