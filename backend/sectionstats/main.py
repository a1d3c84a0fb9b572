"""
SectionStats Backend - FastAPI Application
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sectionstats import __version__
from sectionstats.core.config import settings
from sectionstats.core.logging import setup_logging, get_logger
from sectionstats.api import sections
from sectionstats.services.geometry import TraceCache

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    app.state.trace_cache = TraceCache(settings.TRACE_CACHE_SIZE)
    logger.info(
        "Starting SectionStats Backend",
        version=__version__,
        trace_cache_size=settings.TRACE_CACHE_SIZE
    )

    yield

    # Shutdown
    app.state.trace_cache.clear()
    logger.info("Shutting down SectionStats Backend")


app = FastAPI(
    title="SectionStats API",
    description="Section performance leaderboards, buckets and trace simplification",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sections.router, prefix="/api/sections", tags=["sections"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "sectionstats-backend"}
