"""
GET /health — liveness plus a MongoDB check.

Always answers 200 while the process is up. `database` tells callers
whether MongoDB answered a ping, and `published_posts` shows the posts
collection is readable (null when it is not).
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from safetrails import __version__
from safetrails.core import database as db_module
from safetrails.core.config import settings
from safetrails.services.post_store import POSTS, PUBLISHED

logger = logging.getLogger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    version: str
    environment: str
    database: Literal["connected", "disconnected"]
    published_posts: Optional[int] = None


async def _ping() -> bool:
    client = db_module.db_client.client
    if client is None:
        return False
    try:
        await client.admin.command("ping")
    except Exception as exc:
        logger.warning("MongoDB ping failed: %s", exc)
        return False
    return True


async def _published_posts() -> Optional[int]:
    db = db_module.db_client.db
    if db is None:
        return None
    try:
        return await db[POSTS].count_documents({"status": PUBLISHED})
    except Exception as exc:
        logger.warning("Counting posts failed: %s", exc)
        return None


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check() -> HealthResponse:
    connected = await _ping()
    return HealthResponse(
        version=__version__,
        environment=settings.environment,
        database="connected" if connected else "disconnected",
        published_posts=await _published_posts() if connected else None,
    )
