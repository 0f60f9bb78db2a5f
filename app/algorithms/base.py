"""
Base scoring algorithm interface.

This provides:
1. GraphState - the immutable inputs every score is derived from
2. Abstract base class for per-user graph scores
3. Common rounding and metadata helpers
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Sequence, Tuple


@dataclass(frozen=True)
class GraphState:
    """
    Read-only view of the graph used for scoring.

    hobbies maps user id -> hobby set; neighbors maps user id -> neighbor ids.
    Users missing from hobbies are treated as having no hobbies.
    """

    hobbies: Mapping[str, FrozenSet[str]] = field(default_factory=dict)
    neighbors: Mapping[str, Sequence[str]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        hobbies: Mapping[str, Iterable[str]],
        edges: Iterable[Tuple[str, str]],
    ) -> "GraphState":
        """Build state from raw hobby lists and an undirected edge list."""
        adjacency: Dict[str, list] = {user_id: [] for user_id in hobbies}
        for user_id_1, user_id_2 in edges:
            adjacency.setdefault(user_id_1, []).append(user_id_2)
            adjacency.setdefault(user_id_2, []).append(user_id_1)

        return cls(
            hobbies={user_id: frozenset(h) for user_id, h in hobbies.items()},
            neighbors={user_id: tuple(n) for user_id, n in adjacency.items()},
        )

    def hobbies_of(self, user_id: str) -> FrozenSet[str]:
        return self.hobbies.get(user_id, frozenset())

    def neighbors_of(self, user_id: str) -> Sequence[str]:
        return self.neighbors.get(user_id, ())


def round_to_tenth(value: float) -> float:
    """Round half away from zero to one decimal place."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class BaseScoreAlgorithm(ABC):
    """
    Abstract base class for graph scores.

    Implementations must be pure: the same GraphState always yields the same
    score and scoring never mutates the state.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def score(self, user_id: str, state: GraphState) -> float:
        """
        Score a single user.

        Args:
            user_id: User to score
            state: Graph inputs

        Returns:
            The user's score
        """
        pass

    def score_all(self, state: GraphState) -> Dict[str, float]:
        """Score every user known to the state."""
        return {user_id: self.score(user_id, state) for user_id in state.hobbies}

    def get_algorithm_info(self) -> Dict[str, Any]:
        """
        Get information about this algorithm.

        Returns:
            Dictionary with algorithm metadata
        """
        return {
            "name": self.name,
            "class": self.__class__.__name__,
            "description": self.__doc__.strip() if self.__doc__ else "No description",
            "version": "1.0.0",
        }
