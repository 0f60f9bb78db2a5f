"""
Unit tests for the undo/redo command log.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from app.core.history import Command, CommandKind, CommandLog, HistoryRegistry
from app.schemas.graph import UserRecord


def link(n: int) -> Command:
    return Command.create_friendship(f"user-{n}", "user-0")


@pytest.fixture
def executor():
    """Executor that records calls without touching any store."""
    mock = Mock()
    mock.apply = AsyncMock()
    mock.revert = AsyncMock()
    return mock


@pytest.mark.unit
@pytest.mark.history
class TestCommand:
    """Test command construction."""

    def test_friendship_pair_is_canonical(self):
        command = Command.delete_friendship("zed", "amy")

        assert command.kind == CommandKind.DELETE_FRIENDSHIP
        assert command.pair == ("amy", "zed")

    def test_update_carries_both_records(self):
        before = UserRecord(id="u1", username="Old", age=30)
        after = UserRecord(id="u1", username="New", age=31, hobbies=("Chess",))

        command = Command.update_user(before, after)

        assert command.before == before
        assert command.after == after

    def test_to_dict_omits_empty_payload(self):
        data = Command.create_friendship("b", "a").to_dict()

        assert data == {"kind": "create_friendship", "pair": ["a", "b"]}

    def test_commands_are_immutable(self):
        command = link(1)

        with pytest.raises(Exception):
            command.pair = ("x", "y")


@pytest.mark.unit
@pytest.mark.history
class TestCommandLog:
    """Test cursor movement, truncation and eviction."""

    def test_empty_log(self):
        log = CommandLog(max_length=5)

        assert len(log) == 0
        assert log.current_index == -1
        assert not log.can_undo
        assert not log.can_redo

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            CommandLog(max_length=0)

    def test_default_capacity_from_settings(self):
        assert CommandLog().max_length == 50

    @pytest.mark.asyncio
    async def test_undo_then_redo(self, executor):
        log = CommandLog()
        log.push(link(1))
        log.push(link(2))

        undone = await log.undo(executor)

        assert undone == link(2)
        executor.revert.assert_awaited_once_with(link(2))
        assert log.current_index == 0
        assert log.can_undo and log.can_redo

        redone = await log.redo(executor)

        assert redone == link(2)
        executor.apply.assert_awaited_once_with(link(2))
        assert log.current_index == 1
        assert not log.can_redo

    @pytest.mark.asyncio
    async def test_nothing_to_undo_or_redo(self, executor):
        log = CommandLog()

        assert await log.undo(executor) is None
        assert await log.redo(executor) is None
        executor.apply.assert_not_called()
        executor.revert.assert_not_called()

    @pytest.mark.asyncio
    async def test_push_after_undo_truncates_branch(self, executor):
        log = CommandLog()
        for n in (1, 2, 3):
            log.push(link(n))

        await log.undo(executor)
        await log.undo(executor)
        log.push(link(4))

        assert not log.can_redo
        assert log.commands == (link(1), link(4))
        assert await log.redo(executor) is None

    def test_bounded_history_evicts_oldest(self):
        log = CommandLog(max_length=50)
        for n in range(51):
            log.push(link(n))

        assert len(log) == 50
        assert log.commands[0] == link(1)
        assert log.commands[-1] == link(50)
        assert log.current_index == 49
        assert log.can_undo
        assert not log.can_redo

    @pytest.mark.asyncio
    async def test_undo_all_after_eviction(self, executor):
        log = CommandLog(max_length=3)
        for n in range(5):
            log.push(link(n))

        undone = []
        while log.can_undo:
            undone.append(await log.undo(executor))

        assert undone == [link(4), link(3), link(2)]
        assert log.current_index == -1

    @pytest.mark.asyncio
    async def test_failed_replay_keeps_cursor(self, executor):
        log = CommandLog()
        log.push(link(1))
        executor.revert.side_effect = RuntimeError("replay failed")

        with pytest.raises(RuntimeError):
            await log.undo(executor)

        assert log.current_index == 0
        assert log.can_undo

    def test_clear(self):
        log = CommandLog()
        log.push(link(1))

        log.clear()

        assert len(log) == 0
        assert not log.can_undo


@pytest.mark.unit
@pytest.mark.history
class TestHistoryRegistry:
    """Test per-session logs."""

    def test_same_session_same_log(self):
        registry = HistoryRegistry()

        assert registry.get("tab-1") is registry.get("tab-1")
        assert registry.get("tab-1") is not registry.get("tab-2")
        assert len(registry) == 2

    def test_capacity_applies_to_new_logs(self):
        registry = HistoryRegistry(max_length=3)

        assert registry.get("tab-1").max_length == 3

    def test_drop(self):
        registry = HistoryRegistry()
        registry.get("tab-1")

        assert registry.drop("tab-1") is True
        assert "tab-1" not in registry
        assert registry.drop("tab-1") is False
