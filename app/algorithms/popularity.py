"""
Popularity score.

score = unique friends + 0.5 * (hobbies shared with each friend, summed),
rounded to one decimal place.
"""

from typing import Dict, Iterable

from app.algorithms.base import BaseScoreAlgorithm, GraphState, round_to_tenth

FRIEND_WEIGHT = 1.0
SHARED_HOBBY_WEIGHT = 0.5


def shared_hobbies(hobbies_a: Iterable[str], hobbies_b: Iterable[str]) -> int:
    """Number of distinct hobbies present in both sets."""
    return len(set(hobbies_a) & set(hobbies_b))


class PopularityScoreAlgorithm(BaseScoreAlgorithm):
    """Unique friend count plus half a point per hobby shared with a friend."""

    def __init__(
        self,
        friend_weight: float = FRIEND_WEIGHT,
        shared_hobby_weight: float = SHARED_HOBBY_WEIGHT,
    ):
        super().__init__("Popularity Score")
        self.friend_weight = friend_weight
        self.shared_hobby_weight = shared_hobby_weight

    def score(self, user_id: str, state: GraphState) -> float:
        friends = set(state.neighbors_of(user_id))
        friends.discard(user_id)

        if not friends:
            return 0.0

        own_hobbies = state.hobbies_of(user_id)
        total_shared = sum(
            shared_hobbies(own_hobbies, state.hobbies_of(friend_id))
            for friend_id in friends
        )

        raw = len(friends) * self.friend_weight + total_shared * self.shared_hobby_weight
        return round_to_tenth(raw)


popularity_algorithm = PopularityScoreAlgorithm()


def popularity_score(user_id: str, state: GraphState) -> float:
    """Score one user with the default weights."""
    return popularity_algorithm.score(user_id, state)


def compute_scores(state: GraphState) -> Dict[str, float]:
    """Score every user in the state with the default weights."""
    return popularity_algorithm.score_all(state)
