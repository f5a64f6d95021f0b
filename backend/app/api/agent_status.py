"""Agent presence endpoints.

Provides:
- ``GET /agent-status`` -- Whether the agent has checked in recently
- ``POST /agent-status`` -- Heartbeat from the agent
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.database import get_db
from app.services.agent_status import read_presence, write_presence
from app.utils.datetime_utils import datetime_to_iso, utcnow

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/agent-status", tags=["agent-status"])


class AgentHeartbeat(BaseModel):
    active: bool = False
    sessions: list = []


class AgentStatusResponse(BaseModel):
    active: bool
    sessions: list
    session_count: int = 0
    last_seen: str | None = None
    checked_at: str | None = None
    error: str | None = None


class AgentHeartbeatResponse(BaseModel):
    ok: bool


@router.get("")
async def get_agent_status(
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AgentStatusResponse:
    """Report presence; a failed lookup reads as inactive rather than an error."""
    try:
        presence = await read_presence(db, settings.AGENT_ID, settings.AGENT_STATUS_TTL_SECONDS)
    except Exception:
        logger.exception("Failed to check agent status")
        await db.rollback()
        return AgentStatusResponse(active=False, sessions=[], error="Status check failed")

    return AgentStatusResponse(
        active=presence.active,
        sessions=presence.sessions,
        session_count=presence.session_count,
        last_seen=datetime_to_iso(presence.last_seen),
        checked_at=datetime_to_iso(utcnow()),
    )


@router.post("")
async def update_agent_status(
    body: AgentHeartbeat,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AgentHeartbeatResponse:
    try:
        await write_presence(db, settings.AGENT_ID, body.active, body.sessions)
    except Exception:
        logger.exception("Failed to update agent status")
        raise HTTPException(status_code=500, detail="Failed to update status") from None
    return AgentHeartbeatResponse(ok=True)
