"""
SafeTrails API — Application entry point.

Bootstraps FastAPI, wires up middleware, registers route groups,
and manages the MongoDB connection lifecycle.

Run locally:
    uvicorn safetrails.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from safetrails import __version__
from safetrails.core import database
from safetrails.core.config import settings
from safetrails.core.rate_limit import limiter
from safetrails.routes.authors import router as authors_router
from safetrails.routes.health import router as health_router
from safetrails.routes.location_insights import router as insights_router
from safetrails.routes.posts import router as posts_router
from safetrails.routes.safety import router as safety_router

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open MongoDB on startup, close it on shutdown."""
    logger.info("Starting SafeTrails API (env: %s)", settings.environment)
    await database.connect_to_mongo()
    yield
    logger.info("Shutting down SafeTrails API")
    await database.close_mongo_connection()


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="SafeTrails API",
    description=(
        "Travel journal backend: location-tagged posts with heuristic safety "
        "insights and live author trust scores. Scores are keyword heuristics, "
        "not travel advice."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Rate limiting ─────────────────────────────────────────────────────────────
# Routes opt-in with @limiter.limit(...) + a request: Request parameter.
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ─── Middleware ─────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(insights_router)
app.include_router(posts_router)
app.include_router(authors_router)
app.include_router(safety_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "SafeTrails API",
        "version": __version__,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
    }
