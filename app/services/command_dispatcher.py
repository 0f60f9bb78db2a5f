"""
Command Dispatcher - Interprets history commands against the graph store.

apply() replays a command forwards (redo), revert() runs its inverse (undo).
Any outcome other than the exact recorded effect raises HistoryError so the
command log leaves its cursor where it was.
"""

import logging

from app.core.exceptions import ConflictError, HistoryError, ValidationError
from app.core.history import Command, CommandKind
from app.schemas.graph import DeleteStatus, UserRecord
from app.services.graph_store import GraphStore

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Single interpreter for every CommandKind."""

    def __init__(self, store: GraphStore):
        self.store = store

    async def apply(self, command: Command) -> None:
        logger.info(f"Redo {command.kind.value}")

        if command.kind == CommandKind.CREATE_USER:
            await self._restore(command.after, command)
        elif command.kind == CommandKind.DELETE_USER:
            await self._delete(command.before.id, command)
        elif command.kind == CommandKind.UPDATE_USER:
            await self._update(command.after, command)
        elif command.kind == CommandKind.CREATE_FRIENDSHIP:
            await self._link(command)
        elif command.kind == CommandKind.DELETE_FRIENDSHIP:
            await self._unlink(command)
        else:
            raise HistoryError(f"Unknown command kind: {command.kind}")

    async def revert(self, command: Command) -> None:
        logger.info(f"Undo {command.kind.value}")

        if command.kind == CommandKind.CREATE_USER:
            await self._delete(command.after.id, command)
        elif command.kind == CommandKind.DELETE_USER:
            await self._restore(command.before, command)
        elif command.kind == CommandKind.UPDATE_USER:
            await self._update(command.before, command)
        elif command.kind == CommandKind.CREATE_FRIENDSHIP:
            await self._unlink(command)
        elif command.kind == CommandKind.DELETE_FRIENDSHIP:
            await self._link(command)
        else:
            raise HistoryError(f"Unknown command kind: {command.kind}")

    async def _restore(self, record: UserRecord, command: Command) -> None:
        try:
            await self.store.restore_user(record)
        except (ConflictError, ValidationError) as error:
            raise _replay_failed(command, error.message) from error

    async def _delete(self, user_id: str, command: Command) -> None:
        result = await self.store.delete_user(user_id)
        if result.status != DeleteStatus.DELETED:
            raise _replay_failed(command, result.reason or result.status.value)

    async def _update(self, record: UserRecord, command: Command) -> None:
        try:
            user = await self.store.update_user(
                record.id, record.username, record.age, list(record.hobbies)
            )
        except ValidationError as error:
            raise _replay_failed(command, error.message) from error

        if user is None:
            raise _replay_failed(command, "User not found")

    async def _link(self, command: Command) -> None:
        try:
            friendship = await self.store.link_users(*command.pair)
        except ValidationError as error:
            raise _replay_failed(command, error.message) from error

        if not friendship.created:
            raise _replay_failed(command, "Friendship already exists")

    async def _unlink(self, command: Command) -> None:
        removed = await self.store.unlink_users(*command.pair)
        if not removed:
            raise _replay_failed(command, "Friendship not found")


def _replay_failed(command: Command, reason: str) -> HistoryError:
    return HistoryError(
        f"Cannot replay {command.kind.value}: {reason}",
        details={"command": command.to_dict()},
    )
