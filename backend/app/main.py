from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.database import engine


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown events."""
    # Startup: create all database tables if they don't exist
    from app.database import Base
    from app import models  # noqa: F401 - Import models to register them with Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield
    # Shutdown: dispose the async engine connection pool
    await engine.dispose()


app = FastAPI(
    title="Mission Control",
    description="Kanban board, weekly calendar, activity log and search for agent operations",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Router includes ---
from app.api.activity import router as activity_router
from app.api.agent_status import router as agent_status_router
from app.api.board import router as board_router
from app.api.calendar import router as calendar_router
from app.api.projects import router as projects_router
from app.api.search import router as search_router
from app.api.tasks import router as tasks_router

app.include_router(board_router, prefix="/api")
app.include_router(projects_router, prefix="/api")
app.include_router(tasks_router, prefix="/api")
app.include_router(activity_router, prefix="/api")
app.include_router(agent_status_router, prefix="/api")
app.include_router(calendar_router, prefix="/api")
app.include_router(search_router, prefix="/api")


@app.get("/api/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns a simple status response to verify the API is running.
    """
    return {"status": "ok"}
