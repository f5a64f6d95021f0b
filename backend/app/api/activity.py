"""Activity log API endpoints.

Provides:
- ``GET /activity`` -- Newest-first activity entries with optional filters
- ``POST /activity`` -- Append an activity entry (used by agents and scripts)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import CamelRequest
from app.database import get_db
from app.models import Activity
from app.utils.datetime_utils import datetime_from_iso, datetime_to_iso

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/activity", tags=["activity"])

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class ActivityCreate(CamelRequest):
    action: str | None = None
    category: str | None = None
    title: str | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = None
    session_id: str | None = None
    status: str | None = None
    timestamp: str | None = None


class ActivityItem(BaseModel):
    id: str
    action: str
    category: str
    title: str
    description: str | None
    metadata: dict | None
    session_id: str | None
    status: str
    timestamp: str | None


def _to_item(entry: Activity) -> ActivityItem:
    return ActivityItem(
        id=entry.id,
        action=entry.action,
        category=entry.category,
        title=entry.title,
        description=entry.description,
        metadata=entry.metadata_,
        session_id=entry.session_id,
        status=entry.status,
        timestamp=datetime_to_iso(entry.timestamp),
    )


def parse_limit(raw: str | None) -> int:
    """Parse ``limit``: missing or unparseable -> 50, otherwise clamped to 1..200."""
    if not raw:
        return DEFAULT_LIMIT
    try:
        parsed = int(raw)
    except ValueError:
        return DEFAULT_LIMIT
    return min(max(parsed, 1), MAX_LIMIT)


def _parse_timestamp(raw: str | None) -> datetime | None:
    """Parse an ISO-8601 string; raises ValueError when malformed."""
    return datetime_from_iso(raw)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("")
async def list_activities(
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: str | None = Query(None),  # noqa: B008
    category: str | None = Query(None),  # noqa: B008
    action: str | None = Query(None),  # noqa: B008
    status: str | None = Query(None),  # noqa: B008
    since: str | None = Query(None, description="ISO-8601 lower bound"),  # noqa: B008
) -> list[ActivityItem]:
    """Return activity entries, newest first."""
    since_dt: datetime | None = None
    if since:
        try:
            since_dt = _parse_timestamp(since)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid since date") from None

    stmt = select(Activity).order_by(desc(Activity.timestamp)).limit(parse_limit(limit))
    if category:
        stmt = stmt.where(Activity.category == category)
    if action:
        stmt = stmt.where(Activity.action == action)
    if status:
        stmt = stmt.where(Activity.status == status)
    if since_dt is not None:
        stmt = stmt.where(Activity.timestamp >= since_dt)

    result = await db.execute(stmt)
    return [_to_item(entry) for entry in result.scalars().all()]


@router.post("", status_code=201)
async def create_activity(
    body: ActivityCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ActivityItem:
    """Append one activity entry."""
    if not body.action or not body.category or not body.title:
        raise HTTPException(status_code=400, detail="Missing required fields: action, category, title")

    timestamp: datetime | None = None
    if body.timestamp:
        try:
            timestamp = _parse_timestamp(body.timestamp)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid timestamp") from None

    entry = Activity(
        action=body.action,
        category=body.category,
        title=body.title,
        description=body.description,
        metadata_=body.metadata,
        session_id=body.session_id,
        status=body.status or "success",
    )
    if timestamp is not None:
        entry.timestamp = timestamp

    db.add(entry)
    await db.flush()
    await db.refresh(entry)
    return _to_item(entry)
