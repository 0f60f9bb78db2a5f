"""
Undo/redo history for graph mutations.

This provides:
1. Command - immutable, serialisable record of one mutation
2. CommandLog - linear history with a cursor and bounded capacity
3. HistoryRegistry - one CommandLog per session

Commands are tagged variants: the log never runs them itself, it hands
them to an executor (see app.services.command_dispatcher) that knows how
to apply or revert each kind against the graph store.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple

from pydantic import BaseModel, ConfigDict

from app.config import settings
from app.models.friendship import canonical_pair
from app.schemas.graph import UserRecord

logger = logging.getLogger(__name__)


class CommandKind(str, Enum):
    """Kinds of reversible graph mutations"""

    CREATE_USER = "create_user"
    DELETE_USER = "delete_user"
    UPDATE_USER = "update_user"
    CREATE_FRIENDSHIP = "create_friendship"
    DELETE_FRIENDSHIP = "delete_friendship"


class Command(BaseModel):
    """
    One recorded mutation.

    Payload by kind:
    - CREATE_USER: after (the created user)
    - DELETE_USER: before (the full deleted user)
    - UPDATE_USER: before and after
    - CREATE_FRIENDSHIP / DELETE_FRIENDSHIP: pair (canonical order)
    """

    model_config = ConfigDict(frozen=True)

    kind: CommandKind
    before: Optional[UserRecord] = None
    after: Optional[UserRecord] = None
    pair: Optional[Tuple[str, str]] = None

    @classmethod
    def create_user(cls, record: UserRecord) -> "Command":
        return cls(kind=CommandKind.CREATE_USER, after=record)

    @classmethod
    def delete_user(cls, record: UserRecord) -> "Command":
        return cls(kind=CommandKind.DELETE_USER, before=record)

    @classmethod
    def update_user(cls, before: UserRecord, after: UserRecord) -> "Command":
        return cls(kind=CommandKind.UPDATE_USER, before=before, after=after)

    @classmethod
    def create_friendship(cls, user_id_a: str, user_id_b: str) -> "Command":
        return cls(
            kind=CommandKind.CREATE_FRIENDSHIP, pair=canonical_pair(user_id_a, user_id_b)
        )

    @classmethod
    def delete_friendship(cls, user_id_a: str, user_id_b: str) -> "Command":
        return cls(
            kind=CommandKind.DELETE_FRIENDSHIP, pair=canonical_pair(user_id_a, user_id_b)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(mode="json", exclude_none=True)


class CommandExecutor(Protocol):
    """Something that can replay a command forwards or backwards."""

    async def apply(self, command: Command) -> None: ...

    async def revert(self, command: Command) -> None: ...


class CommandLog:
    """
    Linear undo/redo history.

    current_index points at the last applied command (-1 when there is
    nothing to undo). Commands after the cursor are redoable until the next
    push, which discards them.

    Not safe for concurrent use; keep one log per session.
    """

    def __init__(self, max_length: Optional[int] = None):
        self.max_length = (
            max_length if max_length is not None else settings.undo_history_limit
        )
        if self.max_length < 1:
            raise ValueError("max_length must be a positive integer")

        self._commands: List[Command] = []
        self._current_index = -1

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def commands(self) -> Tuple[Command, ...]:
        return tuple(self._commands)

    @property
    def can_undo(self) -> bool:
        return self._current_index >= 0

    @property
    def can_redo(self) -> bool:
        return self._current_index < len(self._commands) - 1

    def __len__(self) -> int:
        return len(self._commands)

    def push(self, command: Command) -> None:
        """
        Record a command that has just been applied.

        Drops any redoable suffix, then evicts the oldest entry when the log
        grows past max_length.
        """
        del self._commands[self._current_index + 1 :]
        self._commands.append(command)
        self._current_index = len(self._commands) - 1

        if len(self._commands) > self.max_length:
            self._commands.pop(0)
            self._current_index -= 1

        logger.debug(
            f"History push: {command.kind.value} "
            f"(index={self._current_index}, length={len(self._commands)})"
        )

    async def undo(self, executor: CommandExecutor) -> Optional[Command]:
        """
        Revert the command at the cursor.

        Returns:
            The reverted command, or None if there was nothing to undo
        """
        if not self.can_undo:
            return None

        command = self._commands[self._current_index]
        await executor.revert(command)
        self._current_index -= 1
        return command

    async def redo(self, executor: CommandExecutor) -> Optional[Command]:
        """
        Re-apply the command after the cursor.

        Returns:
            The re-applied command, or None if there was nothing to redo
        """
        if not self.can_redo:
            return None

        command = self._commands[self._current_index + 1]
        await executor.apply(command)
        self._current_index += 1
        return command

    def clear(self) -> None:
        self._commands.clear()
        self._current_index = -1


class HistoryRegistry:
    """One CommandLog per session id."""

    def __init__(self, max_length: Optional[int] = None):
        self.max_length = max_length
        self._logs: Dict[str, CommandLog] = {}

    def get(self, session_id: str) -> CommandLog:
        """Get the session's log, creating it on first use."""
        log = self._logs.get(session_id)
        if log is None:
            log = CommandLog(self.max_length)
            self._logs[session_id] = log
        return log

    def drop(self, session_id: str) -> bool:
        """Forget a session's history."""
        return self._logs.pop(session_id, None) is not None

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._logs

    def __len__(self) -> int:
        return len(self._logs)


# Global registry instance
history_registry = HistoryRegistry()
