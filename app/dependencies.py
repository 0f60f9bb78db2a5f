"""
Dependencies for wiring graph services.

This provides:
1. The process-wide write lock shared by every GraphStore
2. graph_session - a GraphService bound to a fresh database session and
   the caller's undo/redo history
3. end_session - releases that history when the caller is done with it
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from app.core.cache import cache_manager
from app.core.history import history_registry
from app.database import AsyncSessionLocal
from app.services.graph_service import GraphService

_write_lock: Optional[asyncio.Lock] = None


def get_write_lock() -> asyncio.Lock:
    """Get the lock that serializes graph mutations in this process."""
    global _write_lock
    if _write_lock is None:
        _write_lock = asyncio.Lock()
    return _write_lock


@asynccontextmanager
async def graph_session(session_id: str) -> AsyncIterator[GraphService]:
    """
    Open a GraphService for one unit of work.

    async with graph_session("browser-tab-1") as graph:
        await graph.create_user("Dana", 30, ["Chess"])
        await graph.undo()

    The history for session_id lives in the global HistoryRegistry, so it
    carries over between calls with the same id until end_session() drops it.
    """
    async with AsyncSessionLocal() as db:
        try:
            yield GraphService(
                db,
                history=history_registry.get(session_id),
                cache=cache_manager,
                write_lock=get_write_lock(),
            )
        except Exception:
            await db.rollback()
            raise


def end_session(session_id: str) -> bool:
    """
    Forget a session's undo/redo history.

    Callers that open graph_session() own this call; histories are kept until
    it is made.

    Returns:
        True if the session had a history
    """
    return history_registry.drop(session_id)
