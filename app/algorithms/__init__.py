"""
Graph scoring algorithms.
"""

from .base import BaseScoreAlgorithm, GraphState, round_to_tenth
from .popularity import PopularityScoreAlgorithm, compute_scores, popularity_score

__all__ = [
    "BaseScoreAlgorithm",
    "GraphState",
    "PopularityScoreAlgorithm",
    "compute_scores",
    "popularity_score",
    "round_to_tenth",
]
