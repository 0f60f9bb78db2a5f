"""
User model - Represents a person (graph node) in the social network.

This model handles:
1. Opaque string identity allocated by the application
2. Profile fields that feed the popularity score (hobbies)
3. Creation timestamp used for display and history restoration
"""

from typing import List

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """
    User model representing graph nodes.

    Design decisions:
    - String primary key so ids survive delete/restore through undo
    - JSON list for hobbies (order kept for display, deduplicated on write)
    - No ORM relationship to friendships; neighbor lookups go through
      FriendshipRepository to avoid lazy loading in async sessions
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    username: Mapped[str] = mapped_column(String(255))
    age: Mapped[int] = mapped_column(Integer)
    hobbies: Mapped[List[str]] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
