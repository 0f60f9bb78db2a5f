"""
Friendship model - Mutual, undirected edges between users.
"""

from typing import Tuple

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def canonical_pair(user_id_a: str, user_id_b: str) -> Tuple[str, str]:
    """Order two user ids so the smaller one comes first."""
    if user_id_a <= user_id_b:
        return user_id_a, user_id_b
    return user_id_b, user_id_a


class Friendship(Base):
    """
    Friendship between two users.

    Design decisions:
    - Stored once per unordered pair, smaller id in user_id_1
    - Unique constraint on the pair backs the application-level check
    - RESTRICT foreign keys: a user with friendships cannot be deleted
    """

    __tablename__ = "friendships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id_1: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="RESTRICT")
    )
    user_id_2: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="RESTRICT")
    )

    __table_args__ = (
        UniqueConstraint("user_id_1", "user_id_2", name="unique_friendship_pair"),
        Index("idx_friendships_user_1", "user_id_1"),
        Index("idx_friendships_user_2", "user_id_2"),
    )

    @property
    def edge_id(self) -> str:
        """Stable id used by graph consumers"""
        return f"{self.user_id_1}-{self.user_id_2}"

    def other(self, user_id: str) -> str:
        """Return the endpoint that is not user_id."""
        return self.user_id_2 if self.user_id_1 == user_id else self.user_id_1

    def __repr__(self) -> str:
        return f"<Friendship(id={self.id}, user_id_1={self.user_id_1}, user_id_2={self.user_id_2})>"
