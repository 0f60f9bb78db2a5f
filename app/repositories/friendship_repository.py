"""
Friendship Repository - Data access for undirected friendship edges.

All pair lookups take ids in any order and canonicalize them first, so
(A, B) and (B, A) address the same row.
"""

from typing import List, Optional

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.friendship import Friendship, canonical_pair
from app.repositories.base import BaseRepository


class FriendshipRepository(BaseRepository[Friendship]):
    """Friendship-specific repository extending BaseRepository."""

    def __init__(self, db: AsyncSession):
        super().__init__(Friendship, db)

    async def get_pair(self, user_id_a: str, user_id_b: str) -> Optional[Friendship]:
        """
        Get the friendship between two users.

        Args:
            user_id_a: One endpoint
            user_id_b: The other endpoint

        Returns:
            Friendship or None if the users are not friends
        """
        user_id_1, user_id_2 = canonical_pair(user_id_a, user_id_b)
        result = await self.db.execute(
            select(Friendship).where(
                and_(
                    Friendship.user_id_1 == user_id_1,
                    Friendship.user_id_2 == user_id_2,
                )
            )
        )
        return result.scalar_one_or_none()

    async def create_pair(self, user_id_a: str, user_id_b: str) -> Friendship:
        """
        Insert the canonical edge for two users.

        Raises:
            sqlalchemy.exc.IntegrityError: If the edge already exists or an
                endpoint is missing
        """
        user_id_1, user_id_2 = canonical_pair(user_id_a, user_id_b)
        return await self.create({"user_id_1": user_id_1, "user_id_2": user_id_2})

    async def delete_pair(self, user_id_a: str, user_id_b: str) -> bool:
        """
        Remove the edge between two users.

        Returns:
            True if an edge was removed, False if none existed
        """
        user_id_1, user_id_2 = canonical_pair(user_id_a, user_id_b)
        result = await self.db.execute(
            delete(Friendship).where(
                and_(
                    Friendship.user_id_1 == user_id_1,
                    Friendship.user_id_2 == user_id_2,
                )
            )
        )
        await self.db.commit()
        return result.rowcount > 0

    async def list_for_user(self, user_id: str) -> List[Friendship]:
        """Edges touching a user, oldest first."""
        result = await self.db.execute(
            select(Friendship)
            .where(
                or_(Friendship.user_id_1 == user_id, Friendship.user_id_2 == user_id)
            )
            .order_by(Friendship.id)
        )
        return list(result.scalars().all())

    async def count_for_user(self, user_id: str) -> int:
        """Number of friendships a user has."""
        result = await self.db.execute(
            select(func.count(Friendship.id)).where(
                or_(Friendship.user_id_1 == user_id, Friendship.user_id_2 == user_id)
            )
        )
        return result.scalar() or 0

    async def list_all(self) -> List[Friendship]:
        """Every edge, oldest first."""
        result = await self.db.execute(select(Friendship).order_by(Friendship.id))
        return list(result.scalars().all())
