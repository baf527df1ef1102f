"""FastAPI application entry point — read-only query service over the corpus."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agent_discover import __version__
from agent_discover.api.router import api_router
from agent_discover.config import get_settings
from agent_discover.utils.logging import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(
        "agent_discover.starting",
        port=settings.port,
        qdrant_url=settings.qdrant_url,
        collection=settings.collection,
    )
    yield
    logger.info("agent_discover.shutdown")


app = FastAPI(
    title="agent-discover",
    description="Similarity search over agent, instruction, prompt and chatmode corpora",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Service info endpoint."""
    return {"service": "agent-discover", "version": __version__}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "agent-discover", "version": __version__}
