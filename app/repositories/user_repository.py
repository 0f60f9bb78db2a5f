"""
User Repository - Specialized data access for User model.

Hobby lookups feeding the score engine.
"""

from typing import Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User-specific repository extending BaseRepository."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_hobbies(self, user_ids: Iterable[str]) -> Dict[str, List[str]]:
        """
        Get hobby lists for a set of users.

        Returns:
            Mapping of user id to hobby list
        """
        ids = list(set(user_ids))
        if not ids:
            return {}

        result = await self.db.execute(
            select(User.id, User.hobbies).where(User.id.in_(ids))
        )
        return {row.id: list(row.hobbies or []) for row in result.all()}
