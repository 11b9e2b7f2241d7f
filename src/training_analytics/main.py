"""FastAPI application for the training analytics engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.exception_handlers import register_exception_handlers
from .api.routes import analytics, load, recovery, zones
from .config import get_settings
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(f"Starting training analytics API v{__version__}")
    logger.info(f"Database: {settings.db_path}")
    yield
    logger.info("Shutting down training analytics API")


app = FastAPI(
    title="Training Analytics API",
    description="Workout analytics, training load and zone breakthrough detection",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(analytics.router, prefix="/api/v1/analytics", tags=["analytics"])
app.include_router(load.router, prefix="/api/v1/load", tags=["load"])
app.include_router(zones.router, prefix="/api/v1/zones", tags=["zones"])
app.include_router(recovery.router, prefix="/api/v1/recovery", tags=["recovery"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Training Analytics API",
        "version": __version__,
        "status": "healthy",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
