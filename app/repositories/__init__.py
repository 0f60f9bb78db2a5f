"""
Repository layer - Data access patterns for the application.

This module exports all repositories for easy importing:
- BaseRepository: Generic CRUD operations
- UserRepository: User-specific data access
- FriendshipRepository: Canonical friendship edges
"""

from .base import BaseRepository
from .friendship_repository import FriendshipRepository
from .user_repository import UserRepository

__all__ = ["BaseRepository", "UserRepository", "FriendshipRepository"]
