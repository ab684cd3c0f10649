"""
Execution scoring.

Weekly tactic scores, cycle week scores, goal progress and score bands.
"""

from twelve_week_year.analysis.scorer import (
    ScoringEngine,
    compute_goal_progress,
    compute_overall_score,
    compute_week_score,
    score_band,
    tactic_ratio,
)

__all__ = [
    "ScoringEngine",
    "compute_goal_progress",
    "compute_overall_score",
    "compute_week_score",
    "score_band",
    "tactic_ratio",
]
