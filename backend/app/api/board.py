"""Kanban board endpoints.

Provides:
- ``GET /board`` -- The board with ordered columns, projects and tasks
  (created with default columns on first access).
- ``GET /columns`` -- All columns with nested projects and tasks.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import BoardResponse, ColumnResponse, board_to_response, column_to_response
from app.database import get_db
from app.services.board_service import get_or_create_board, load_columns

logger = logging.getLogger(__name__)
router = APIRouter(tags=["board"])


@router.get("/board")
async def get_board(db: Annotated[AsyncSession, Depends(get_db)]) -> BoardResponse:
    try:
        tree = await get_or_create_board(db)
    except Exception:
        logger.exception("Failed to fetch board")
        raise HTTPException(status_code=500, detail="Failed to fetch board") from None
    return board_to_response(tree)


@router.get("/columns")
async def list_columns(db: Annotated[AsyncSession, Depends(get_db)]) -> list[ColumnResponse]:
    try:
        columns = await load_columns(db)
    except Exception:
        logger.exception("Failed to fetch columns")
        raise HTTPException(status_code=500, detail="Failed to fetch columns") from None
    return [column_to_response(column) for column in columns]
