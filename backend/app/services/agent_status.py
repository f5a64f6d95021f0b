"""Agent presence heartbeat stored as a key-value row with a staleness cutoff.

The agent posts ``{active, sessions}`` periodically. Readers only trust the
entry while ``updated_at`` is younger than the configured TTL.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import AgentStatus
from app.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class AgentPresence:
    active: bool
    sessions: list = field(default_factory=list)
    last_seen: datetime | None = None

    @property
    def session_count(self) -> int:
        return len(self.sessions)


def _decode_status(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed agent status payload")
        return {}
    return data if isinstance(data, dict) else {}


def is_fresh(updated_at: datetime, ttl_seconds: int, now: datetime | None = None) -> bool:
    """True if ``updated_at`` lies within ``ttl_seconds`` of ``now``."""
    now = now or utcnow()
    return now - updated_at < timedelta(seconds=ttl_seconds)


async def read_presence(
    session: AsyncSession,
    agent_id: str,
    ttl_seconds: int,
    now: datetime | None = None,
) -> AgentPresence:
    """Return the agent's presence; stale or missing entries read as inactive."""
    result = await session.execute(select(AgentStatus).where(AgentStatus.id == agent_id))
    record = result.scalar_one_or_none()
    if record is None:
        return AgentPresence(active=False)

    if not is_fresh(record.updated_at, ttl_seconds, now):
        return AgentPresence(active=False, last_seen=record.updated_at)

    data = _decode_status(record.status)
    sessions = data.get("sessions") or []
    return AgentPresence(
        active=bool(data.get("active")),
        sessions=sessions if isinstance(sessions, list) else [],
        last_seen=record.updated_at,
    )


async def write_presence(
    session: AsyncSession,
    agent_id: str,
    active: bool,
    sessions: list | None = None,
    now: datetime | None = None,
) -> None:
    """Upsert the agent's heartbeat row with ``INSERT ... ON CONFLICT DO UPDATE``."""
    payload = json.dumps({"active": active, "sessions": sessions or []})
    updated_at = now or utcnow()
    stmt = insert(AgentStatus).values(id=agent_id, status=payload, updated_at=updated_at)
    stmt = stmt.on_conflict_do_update(
        index_elements=[AgentStatus.id],
        set_={"status": stmt.excluded.status, "updated_at": stmt.excluded.updated_at},
    )
    await session.execute(stmt)
