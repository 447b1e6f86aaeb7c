"""FastAPI entry point for the college application tracker."""
from __future__ import annotations

import locale
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tracker.config import settings
from tracker.db import close as close_db
from tracker.routers import applications, data, essays, tags, view
from tracker.services.tracker_service import tracker_service

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting tracker on %s:%d", settings.host, settings.port)
    try:
        # school and tag names sort by the user's collation rules
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning("Keeping default collation, system locale unavailable: %s", e)
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    tracker_service.load()

    yield

    # Shutdown: write edits still waiting out their debounce
    tracker_service.shutdown()
    close_db()
    logger.info("Tracker stopped")


app = FastAPI(
    title="College Application Tracker",
    description="Applications, essays and tags with filtering, stable sorting and progress",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # localhost only; tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(applications.router)
app.include_router(essays.router)
app.include_router(tags.router)
app.include_router(view.router)
app.include_router(data.router)


@app.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "applications": len(tracker_service.store.applications),
        "pendingEdits": len(tracker_service.debouncer),
    }


if __name__ == "__main__":
    uvicorn.run(
        "tracker.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
