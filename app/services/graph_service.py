"""
Graph Service - Public contract of the social graph core.

This coordinates:
1. GraphStore mutations and reads
2. Recording each successful mutation in the session's CommandLog
3. Undo/redo through the CommandDispatcher
4. Best-effort cache reads, invalidation and update notifications
"""

import asyncio
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import (
    ALL_USERS_KEY,
    GRAPH_DATA_KEY,
    GRAPH_UPDATES_CHANNEL,
    CacheInvalidator,
    CacheManager,
    cache_manager,
    user_key,
)
from app.core.history import Command, CommandLog
from app.core.identity import IdFactory
from app.schemas.graph import (
    DeleteUserResult,
    FriendshipView,
    GraphSnapshot,
    UserView,
)
from app.services.base import BaseService
from app.services.command_dispatcher import CommandDispatcher
from app.services.graph_projector import GraphProjector
from app.services.graph_store import GraphStore, validate_user_fields


class GraphService(BaseService):
    """
    Graph operations with undo/redo.

    One instance wraps one database session. The CommandLog is passed in so
    that a session's history outlives any single database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        history: Optional[CommandLog] = None,
        cache: Optional[CacheManager] = None,
        id_factory: Optional[IdFactory] = None,
        write_lock: Optional[asyncio.Lock] = None,
    ):
        super().__init__(db)
        self.store = GraphStore(db, id_factory=id_factory, write_lock=write_lock)
        self.projector = GraphProjector(self.store)
        self.dispatcher = CommandDispatcher(self.store)
        self.history = history if history is not None else CommandLog()
        self.cache = cache if cache is not None else cache_manager
        self.invalidator = CacheInvalidator(self.cache)

    # Reads

    async def get_user(self, user_id: str) -> Optional[UserView]:
        cached = await self.cache.get(user_key(user_id))
        if cached is not None:
            return UserView.model_validate(cached)

        user = await self.store.get_user(user_id)
        if user is not None:
            await self.cache.set(user_key(user_id), user.model_dump(mode="json"))
        return user

    async def list_users(self) -> List[UserView]:
        cached = await self.cache.get(ALL_USERS_KEY)
        if cached is not None:
            return [UserView.model_validate(item) for item in cached]

        users = await self.store.list_users()
        await self.cache.set(ALL_USERS_KEY, [u.model_dump(mode="json") for u in users])
        return users

    async def get_graph_snapshot(self) -> GraphSnapshot:
        cached = await self.cache.get(GRAPH_DATA_KEY)
        if cached is not None:
            return GraphSnapshot.model_validate(cached)

        snapshot = await self.projector.project()
        await self.cache.set(GRAPH_DATA_KEY, snapshot.model_dump(mode="json"))
        return snapshot

    # Mutations

    async def create_user(
        self, username: str, age: int, hobbies: Optional[Sequence[str]] = None
    ) -> UserView:
        user = await self.store.create_user(username, age, hobbies)

        self.history.push(Command.create_user(user.to_record()))
        await self._after_mutation("user_create", user_id=user.id)
        return user

    async def update_user(
        self,
        user_id: str,
        username: str,
        age: int,
        hobbies: Optional[Sequence[str]] = None,
    ) -> Optional[UserView]:
        validate_user_fields(username, age, hobbies)

        before = await self.store.get_user_record(user_id)
        if before is None:
            return None

        user = await self.store.update_user(user_id, username, age, hobbies)
        if user is None:
            return None

        self.history.push(Command.update_user(before, user.to_record()))
        await self._after_mutation("user_update", user_id=user_id)
        return user

    async def delete_user(self, user_id: str) -> DeleteUserResult:
        before = await self.store.get_user_record(user_id)

        result = await self.store.delete_user(user_id)
        if result.ok and before is not None:
            self.history.push(Command.delete_user(before))
            await self._after_mutation("user_delete", user_id=user_id)
        return result

    async def link_users(self, user_id_a: str, user_id_b: str) -> FriendshipView:
        friendship = await self.store.link_users(user_id_a, user_id_b)

        if friendship.created:
            self.history.push(Command.create_friendship(*friendship.pair))
            await self._after_mutation(
                "friendship_change",
                user_id_1=friendship.user_id_1,
                user_id_2=friendship.user_id_2,
            )
        return friendship

    async def unlink_users(self, user_id_a: str, user_id_b: str) -> bool:
        removed = await self.store.unlink_users(user_id_a, user_id_b)

        if removed:
            command = Command.delete_friendship(user_id_a, user_id_b)
            self.history.push(command)
            user_id_1, user_id_2 = command.pair
            await self._after_mutation(
                "friendship_change", user_id_1=user_id_1, user_id_2=user_id_2
            )
        return removed

    # History

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    async def undo(self) -> Optional[Command]:
        """Revert the most recent command; None when there is nothing to undo."""
        self._log_operation("undo", index=self.history.current_index)

        command = await self.history.undo(self.dispatcher)
        if command is not None:
            await self._after_mutation("history_replay", kind=command.kind.value)
        return command

    async def redo(self) -> Optional[Command]:
        """Re-apply the next undone command; None when there is nothing to redo."""
        self._log_operation("redo", index=self.history.current_index)

        command = await self.history.redo(self.dispatcher)
        if command is not None:
            await self._after_mutation("history_replay", kind=command.kind.value)
        return command

    def clear_history(self) -> None:
        self.history.clear()

    async def _after_mutation(self, event_type: str, **event_data) -> None:
        """Drop stale read models and tell other workers the graph changed."""
        await self.invalidator.invalidate_for_event(event_type, **event_data)
        await self.cache.publish(
            GRAPH_UPDATES_CHANNEL, {"event": event_type, **event_data}
        )
