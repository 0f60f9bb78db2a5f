# Import all models to make them available
from .friendship import Friendship, canonical_pair
from .user import User

__all__ = [
    "User",
    "Friendship",
    "canonical_pair",
]
