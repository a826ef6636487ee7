"""reflectodo - a to-do list that asks how each task went."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pocketbase.client import ClientResponseError

from reflectodo.core.config import settings
from reflectodo.core.logging import configure_logfire, instrument_fastapi
from reflectodo.core.schema import sync_schema
from reflectodo.interface.router import router as tasks_router
from reflectodo.services.persistence import build_backend
from reflectodo.services.task_store import TaskStore


logger = logging.getLogger(__name__)


async def prepare_remote_schema() -> None:
    """Sync the remote tasks table when admin credentials are available.

    Without credentials the table is assumed to exist already. A failed sync
    is logged and startup continues; the store surfaces any later failures.
    """
    if not (settings.pocketbase_admin_email and settings.pocketbase_admin_password):
        logger.info("startup_validation", extra={"service": "pocketbase_schema", "status": "skipped"})
        return

    try:
        await sync_schema()
        logger.info("startup_validation", extra={"service": "pocketbase_schema", "status": "ok"})
    except (ClientResponseError, httpx.HTTPError) as e:
        logger.error("startup_validation", extra={"service": "pocketbase_schema", "status": "failed", "error": str(e)})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Configure logging first so startup logs are captured
    configure_logfire()

    if settings.storage_backend == "remote":
        await prepare_remote_schema()

    store = TaskStore(build_backend())
    await store.load()
    app.state.store = store
    logger.info("Task store ready", extra={"backend": store.backend_name, "count": len(store.tasks)})
    yield


app = FastAPI(
    title="reflectodo",
    description="To-do list with completion reflections and a productivity dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(tasks_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)


def run() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run("reflectodo.main:app", host=settings.host, port=settings.port)
