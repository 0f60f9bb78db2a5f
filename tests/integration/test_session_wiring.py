"""
Integration tests for session wiring and process lifecycle.
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from app import dependencies, lifecycle
from app.core.history import HistoryRegistry
from app.services.graph_store import GraphStore


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.mark.integration
class TestGraphSession:
    """graph_session binds history by session id."""

    def test_write_lock_is_shared(self):
        assert dependencies.get_write_lock() is dependencies.get_write_lock()

    @pytest.mark.asyncio
    async def test_history_survives_between_sessions(self, session_factory, offline_cache):
        registry = HistoryRegistry()

        with patch.object(dependencies, "AsyncSessionLocal", session_factory), patch.object(
            dependencies, "history_registry", registry
        ), patch.object(dependencies, "cache_manager", offline_cache):
            async with dependencies.graph_session("tab-1") as graph:
                user = await graph.create_user("Alice", 28)

            async with dependencies.graph_session("tab-2") as graph:
                assert not graph.can_undo

            async with dependencies.graph_session("tab-1") as graph:
                assert graph.can_undo
                await graph.undo()
                assert await graph.get_user(user.id) is None


    @pytest.mark.asyncio
    async def test_end_session_releases_history(self, session_factory, offline_cache):
        registry = HistoryRegistry()

        with patch.object(dependencies, "AsyncSessionLocal", session_factory), patch.object(
            dependencies, "history_registry", registry
        ), patch.object(dependencies, "cache_manager", offline_cache):
            async with dependencies.graph_session("tab-1") as graph:
                await graph.create_user("Alice", 28)

            assert dependencies.end_session("tab-1") is True
            assert "tab-1" not in registry
            assert dependencies.end_session("tab-1") is False

            async with dependencies.graph_session("tab-1") as graph:
                assert not graph.can_undo


@pytest.mark.integration
class TestLifecycle:
    """Startup tolerates a missing cache and seeds when configured."""

    @pytest.mark.asyncio
    async def test_startup_without_cache_seeds(self, test_engine, session_factory):
        with patch.object(lifecycle, "init_db", AsyncMock()) as init_db, patch.object(
            lifecycle, "init_cache", AsyncMock(side_effect=ConnectionError("down"))
        ), patch.object(lifecycle, "AsyncSessionLocal", session_factory), patch.object(
            lifecycle.settings, "seed_default_graph", True
        ):
            await lifecycle.startup()

        init_db.assert_awaited_once()
        async with session_factory() as db:
            users = await GraphStore(db).list_users()
        assert {u.username for u in users} == {"Alice", "Bob", "Charlie"}

    @pytest.mark.asyncio
    async def test_shutdown(self):
        engine = AsyncMock()
        with patch.object(lifecycle, "cleanup_cache", AsyncMock()) as cleanup, patch.object(
            lifecycle, "engine", engine
        ):
            await lifecycle.shutdown()

        cleanup.assert_awaited_once()
        engine.dispose.assert_awaited_once()
