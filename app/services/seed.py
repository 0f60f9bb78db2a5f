"""
Default graph used for demos and local development.
"""

import logging

from app.services.graph_store import GraphStore

logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    ("default-user-1", "Alice", 28, ["Reading", "Gaming", "Coding"]),
    ("default-user-2", "Bob", 32, ["Gaming", "Cooking", "Music"]),
    ("default-user-3", "Charlie", 25, ["Reading", "Music", "Yoga"]),
]

DEFAULT_FRIENDSHIPS = [
    ("default-user-1", "default-user-2"),
    ("default-user-1", "default-user-3"),
]


async def seed_default_graph(store: GraphStore) -> bool:
    """
    Populate an empty graph with three users and two friendships.

    Returns:
        True if the graph was seeded, False if it already had users
    """
    if await store.user_repo.count() > 0:
        logger.info("Graph already has users - skipping seed")
        return False

    for user_id, username, age, hobbies in DEFAULT_USERS:
        await store.create_user(username, age, hobbies, user_id=user_id)

    for user_id_a, user_id_b in DEFAULT_FRIENDSHIPS:
        await store.link_users(user_id_a, user_id_b)

    logger.info(
        f"Seeded {len(DEFAULT_USERS)} users and {len(DEFAULT_FRIENDSHIPS)} friendships"
    )
    return True
