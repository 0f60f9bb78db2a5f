"""
Graph Projector - Read model of the whole graph for renderers and APIs.
"""

from app.schemas.graph import GraphEdge, GraphSnapshot
from app.services.graph_store import GraphStore


class GraphProjector:
    """Builds node and edge lists from a store without mutating it."""

    def __init__(self, store: GraphStore):
        self.store = store

    async def project(self) -> GraphSnapshot:
        """
        Materialise every user and every canonical friendship.

        Edge ids are "<user_id_1>-<user_id_2>" over the canonical pair, so
        they stay stable across unlink/relink.
        """
        users, friendships = await self.store.read_graph()

        edges = [
            GraphEdge(id=f.edge_id, source=f.user_id_1, target=f.user_id_2)
            for f in friendships
        ]
        return GraphSnapshot(users=users, edges=edges)
