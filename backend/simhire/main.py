"""
SimHire API - Main Application Entry Point

This module initializes the FastAPI application with:
- Database connection and schema initialization
- CORS middleware for the web frontend
- Uniform error envelopes and Prometheus metrics
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup)
    ├── CORS Middleware (Settings.cors_origins)
    ├── Prometheus Middleware (/metrics)
    └── API Router (/api)
        ├── /jobs - Job postings
        ├── /applications - Job applications and their pipeline
        ├── /internships - Internship postings
        ├── /internship-applications - Internship applications
        ├── /simulasi - Work simulations, results and leaderboards
        └── /dashboard - Role-specific overview stats
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from simhire import __version__
from simhire.api import api_router
from simhire.config import get_settings
from simhire.database import init_db
from simhire.errors import register_exception_handlers
from simhire.middleware.metrics import setup_metrics

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the sqlite data directory and tables before serving."""
    if settings.database_url.startswith("sqlite:///"):
        db_path = Path(settings.database_url.replace("sqlite:///", "", 1))
        db_path.parent.mkdir(parents=True, exist_ok=True)
    await init_db()
    logger.info("SimHire API started")
    yield


app = FastAPI(
    title="SimHire API",
    description="Job and internship application pipeline with work simulations",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
setup_metrics(app)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
