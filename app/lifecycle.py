"""
Process startup and shutdown for the graph core.
"""

import logging

from app.config import settings
from app.core.cache import cleanup_cache, init_cache
from app.database import AsyncSessionLocal, engine, init_db
from app.dependencies import get_write_lock
from app.services.graph_store import GraphStore
from app.services.seed import seed_default_graph

logger = logging.getLogger(__name__)


async def startup():
    """Create tables, connect the optional cache and seed if configured."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    await init_db()

    try:
        await init_cache()
    except ConnectionError as e:
        logger.warning(f"Continuing without cache: {e}")

    if settings.seed_default_graph:
        async with AsyncSessionLocal() as db:
            await seed_default_graph(GraphStore(db, write_lock=get_write_lock()))

    logger.info("Startup completed successfully")


async def shutdown():
    """Release cache and database connections."""
    await cleanup_cache()
    await engine.dispose()
    logger.info("Shutdown completed")
