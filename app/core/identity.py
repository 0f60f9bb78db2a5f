"""User identifier allocation."""

import uuid
from typing import Callable

IdFactory = Callable[[], str]


def generate_user_id() -> str:
    """Return a new globally unique user id."""
    return str(uuid.uuid4())
