"""
Graph Store - Canonical users and friendships with enforced invariants.

This provides:
1. User CRUD with validate-then-act semantics
2. Canonical, idempotent friendship linking
3. Deletion guard for users that still have friends
4. Reads enriched with neighbor ids and freshly computed scores

Business outcomes (not found, has friendships, nothing to unlink) are
returned as values. Only malformed input raises (ValidationError) and
database failures propagate as StorageError.
"""

import asyncio
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.algorithms.base import BaseScoreAlgorithm, GraphState
from app.algorithms.popularity import popularity_algorithm
from app.core.exceptions import ConflictError, ValidationError
from app.core.identity import IdFactory, generate_user_id
from app.models.friendship import Friendship
from app.models.user import User
from app.repositories.friendship_repository import FriendshipRepository
from app.repositories.user_repository import UserRepository
from app.schemas.graph import (
    DeleteStatus,
    DeleteUserResult,
    FriendshipView,
    UserFields,
    UserRecord,
    UserView,
)
from app.services.base import BaseService

HAS_FRIENDSHIPS_REASON = (
    "Cannot delete user with existing friendships. Please unlink all friends first."
)


def validate_user_fields(username: Any, age: Any, hobbies: Any) -> UserFields:
    """
    Validate and normalise user input.

    Raises:
        ValidationError: With the offending field names in details["fields"]
    """
    try:
        return UserFields(
            username=username, age=age, hobbies=[] if hobbies is None else hobbies
        )
    except SchemaValidationError as e:
        errors = e.errors(include_url=False)
        fields = [".".join(str(part) for part in err["loc"]) for err in errors]
        message = "; ".join(
            f"{field}: {err['msg']}" for field, err in zip(fields, errors)
        )
        raise ValidationError(f"Invalid user data - {message}", details={"fields": fields})


def _require_user_ids(*user_ids: Any) -> None:
    for user_id in user_ids:
        if not isinstance(user_id, str) or not user_id:
            raise ValidationError(
                "Valid user ids are required", details={"reason": "invalid_id"}
            )


class GraphStore(BaseService):
    """
    Owner of the social graph state.

    Mutations run under write_lock so that check-then-write sequences
    (canonical link, friendship count before delete) cannot interleave.
    Multi-statement reads take the same lock so they never mix two
    committed states of the graph.
    Pass the same lock to every store that shares a database.
    """

    def __init__(
        self,
        db: AsyncSession,
        id_factory: Optional[IdFactory] = None,
        write_lock: Optional[asyncio.Lock] = None,
        algorithm: Optional[BaseScoreAlgorithm] = None,
    ):
        super().__init__(db)
        self.user_repo = UserRepository(db)
        self.friendship_repo = FriendshipRepository(db)
        self.id_factory = id_factory or generate_user_id
        self.write_lock = write_lock or asyncio.Lock()
        self.algorithm = algorithm or popularity_algorithm

    # Reads

    async def get_user(self, user_id: str) -> Optional[UserView]:
        """
        Get a user with current friends and popularity score.

        Returns:
            UserView or None if the user does not exist
        """
        try:
            async with self.write_lock:
                user = await self.user_repo.get(user_id)
                if not user:
                    return None

                friendships = await self.friendship_repo.list_for_user(user_id)
                friend_ids = [f.other(user_id) for f in friendships]
                hobbies = await self.user_repo.get_hobbies(friend_ids)

            hobbies[user.id] = list(user.hobbies or [])
            state = GraphState.build(hobbies, _edges(friendships))

            return self._to_view(user, friend_ids, self.algorithm.score(user.id, state))

        except Exception as error:
            await self._handle_service_error(error, "get user")

    async def get_user_record(self, user_id: str) -> Optional[UserRecord]:
        """Stored fields of a user, without derived data."""
        try:
            user = await self.user_repo.get(user_id)
        except Exception as error:
            await self._handle_service_error(error, "get user record")

        if not user:
            return None
        return self._to_view(user, [], 0.0).to_record()

    async def read_graph(self) -> Tuple[List[UserView], List[FriendshipView]]:
        """
        Load every user and friendship and score them together.

        Returns:
            (users in natural order, friendships oldest first)
        """
        try:
            async with self.write_lock:
                users = await self.user_repo.get_multi()
                friendships = await self.friendship_repo.list_all()
        except Exception as error:
            await self._handle_service_error(error, "read graph")

        state = GraphState.build(
            {user.id: list(user.hobbies or []) for user in users}, _edges(friendships)
        )
        scores = self.algorithm.score_all(state)

        user_views = [
            self._to_view(user, list(state.neighbors_of(user.id)), scores[user.id])
            for user in users
        ]
        friendship_views = [self._to_friendship_view(f) for f in friendships]
        return user_views, friendship_views

    async def list_users(self) -> List[UserView]:
        """All users, each with friends and score."""
        users, _ = await self.read_graph()
        return users

    async def list_friendships(self) -> List[FriendshipView]:
        """All canonical friendship edges."""
        try:
            friendships = await self.friendship_repo.list_all()
        except Exception as error:
            await self._handle_service_error(error, "list friendships")
        return [self._to_friendship_view(f) for f in friendships]

    # User mutations

    async def create_user(
        self,
        username: str,
        age: int,
        hobbies: Optional[Sequence[str]] = None,
        user_id: Optional[str] = None,
    ) -> UserView:
        """
        Create a user.

        Args:
            username: Display name
            age: Age in years
            hobbies: Hobby tags
            user_id: Explicit id (seeding); allocated when omitted

        Returns:
            The new user with no friends and a zero score

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If an explicit user_id is already taken
        """
        self._log_operation("create_user", username=username)

        fields = validate_user_fields(username, age, hobbies)
        if user_id is not None:
            _require_user_ids(user_id)

        async with self.write_lock:
            user = await self._insert_user(user_id or self.id_factory(), fields)

        self.logger.info(f"User created successfully: {user.id}")
        return self._to_view(user, [], 0.0)

    async def restore_user(self, record: UserRecord) -> UserView:
        """
        Re-insert a user exactly as recorded, including id and created_at.

        Raises:
            ConflictError: If the id is already in use
        """
        self._log_operation("restore_user", user_id=record.id)

        fields = validate_user_fields(record.username, record.age, list(record.hobbies))

        async with self.write_lock:
            user = await self._insert_user(record.id, fields, created_at=record.created_at)

        return self._to_view(user, [], 0.0)

    async def update_user(
        self,
        user_id: str,
        username: str,
        age: int,
        hobbies: Optional[Sequence[str]] = None,
    ) -> Optional[UserView]:
        """
        Replace a user's mutable fields.

        Returns:
            Updated user, or None if the user does not exist

        Raises:
            ValidationError: If any field is invalid
        """
        self._log_operation("update_user", user_id=user_id)

        fields = validate_user_fields(username, age, hobbies)

        async with self.write_lock:
            try:
                user = await self.user_repo.update(
                    user_id,
                    {
                        "username": fields.username,
                        "age": fields.age,
                        "hobbies": list(fields.hobbies),
                    },
                )
            except Exception as error:
                await self._handle_service_error(error, "update user")

        if user is None:
            return None
        return await self.get_user(user_id)

    async def delete_user(self, user_id: str) -> DeleteUserResult:
        """
        Delete a user that has no friendships.

        Returns:
            DeleteUserResult with status DELETED, HAS_FRIENDSHIPS or NOT_FOUND
        """
        self._log_operation("delete_user", user_id=user_id)

        async with self.write_lock:
            try:
                if not await self.user_repo.exists(user_id):
                    return DeleteUserResult(
                        status=DeleteStatus.NOT_FOUND, reason="User not found"
                    )

                if await self.friendship_repo.count_for_user(user_id) > 0:
                    return DeleteUserResult(
                        status=DeleteStatus.HAS_FRIENDSHIPS, reason=HAS_FRIENDSHIPS_REASON
                    )

                deleted = await self.user_repo.delete(user_id)

            except IntegrityError:
                # A friendship was added by another connection after the count
                await self.db.rollback()
                return DeleteUserResult(
                    status=DeleteStatus.HAS_FRIENDSHIPS, reason=HAS_FRIENDSHIPS_REASON
                )
            except Exception as error:
                await self._handle_service_error(error, "delete user")

        if not deleted:
            return DeleteUserResult(status=DeleteStatus.NOT_FOUND, reason="User not found")

        self.logger.info(f"User deleted successfully: {user_id}")
        return DeleteUserResult(status=DeleteStatus.DELETED)

    # Friendship mutations

    async def link_users(self, user_id_a: str, user_id_b: str) -> FriendshipView:
        """
        Make two users friends.

        Linking an existing pair in either order returns the existing edge
        with created=False.

        Raises:
            ValidationError: On self-link or when either user does not exist
        """
        self._log_operation("link_users", user_id_a=user_id_a, user_id_b=user_id_b)

        _require_user_ids(user_id_a, user_id_b)
        if user_id_a == user_id_b:
            raise ValidationError(
                "Cannot link user to themselves", details={"reason": "self_link"}
            )

        async with self.write_lock:
            try:
                missing = [
                    user_id
                    for user_id in (user_id_a, user_id_b)
                    if not await self.user_repo.exists(user_id)
                ]
                if missing:
                    raise ValidationError(
                        "User not found",
                        details={"reason": "user_not_found", "missing": missing},
                    )

                existing = await self.friendship_repo.get_pair(user_id_a, user_id_b)
                if existing:
                    return self._to_friendship_view(existing)

                try:
                    friendship = await self.friendship_repo.create_pair(user_id_a, user_id_b)
                except IntegrityError:
                    # Another connection inserted the pair (or removed a user) first
                    await self.db.rollback()
                    existing = await self.friendship_repo.get_pair(user_id_a, user_id_b)
                    if existing is None:
                        raise ValidationError(
                            "Failed to create friendship. One or both users may not exist.",
                            details={"reason": "user_not_found"},
                        )
                    return self._to_friendship_view(existing)

            except Exception as error:
                await self._handle_service_error(error, "link users")

        self.logger.info(f"Friendship created successfully: {friendship.edge_id}")
        return self._to_friendship_view(friendship, created=True)

    async def unlink_users(self, user_id_a: str, user_id_b: str) -> bool:
        """
        Remove the friendship between two users.

        Returns:
            True if an edge was removed, False if the users were not friends
        """
        self._log_operation("unlink_users", user_id_a=user_id_a, user_id_b=user_id_b)

        _require_user_ids(user_id_a, user_id_b)

        async with self.write_lock:
            try:
                return await self.friendship_repo.delete_pair(user_id_a, user_id_b)
            except Exception as error:
                await self._handle_service_error(error, "unlink users")

    # Helpers

    async def _insert_user(self, user_id: str, fields: UserFields, created_at=None) -> User:
        """Insert a user row. Caller holds write_lock."""
        try:
            if await self.user_repo.exists(user_id):
                raise ConflictError(f"User {user_id} already exists")

            user_data = {
                "id": user_id,
                "username": fields.username,
                "age": fields.age,
                "hobbies": list(fields.hobbies),
            }
            if created_at is not None:
                user_data["created_at"] = created_at

            return await self.user_repo.create(user_data)

        except Exception as error:
            await self._handle_service_error(error, "create user")

    @staticmethod
    def _to_view(user: User, friends: List[str], score: float) -> UserView:
        return UserView(
            id=user.id,
            username=user.username,
            age=user.age,
            hobbies=list(user.hobbies or []),
            friends=friends,
            popularity_score=score,
            created_at=user.created_at,
        )

    @staticmethod
    def _to_friendship_view(friendship: Friendship, created: bool = False) -> FriendshipView:
        return FriendshipView(
            id=friendship.id,
            user_id_1=friendship.user_id_1,
            user_id_2=friendship.user_id_2,
            created=created,
        )


def _edges(friendships: Sequence[Friendship]) -> List[Tuple[str, str]]:
    return [(f.user_id_1, f.user_id_2) for f in friendships]
