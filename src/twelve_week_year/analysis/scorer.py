"""
Execution scoring for 12 Week Year cycles.

Turns completion vectors and weekly targets into scores from 0-100:

  tactic ratio  = min(days_done, target) / target
  week score    = round(100 * mean(tactic ratio))
  goal progress = round(100 * mean(min(days_done, target * weeks) / (target * weeks)))
  overall score = round(mean(week score over weeks with activity))

Rounding is half-up, not Python's round-half-even. The pure functions
here take plain values; ScoringEngine reads the store and feeds them.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from twelve_week_year.models.database import Database
from twelve_week_year.models.entities import (
    Cycle,
    CycleDashboard,
    GoalProgress,
    ScoreBand,
    TacticWeek,
    WeekScoreSummary,
)
from twelve_week_year.tracking.clock import (
    WEEKS_PER_CYCLE,
    DateLike,
    check_week,
    week_number,
)
from twelve_week_year.tracking.ledger import CompletionLedger
from twelve_week_year.utils import round_half_up

logger = logging.getLogger(__name__)


# ============================================================
# Score bands (thresholds from the methodology)
# ============================================================

ON_TRACK_THRESHOLD = 85
NEEDS_IMPROVEMENT_THRESHOLD = 65

BAND_COLORS = {
    ScoreBand.ON_TRACK: "#4caf50",
    ScoreBand.NEEDS_IMPROVEMENT: "#ff9800",
    ScoreBand.CRITICAL: "#f44336",
}

# Week-over-week difference below which the trend is flat
TREND_TOLERANCE = 2


# ============================================================
# Utility
# ============================================================

def tactic_ratio(days_done: int, target: int) -> float:
    """Fraction of a target achieved, capped at 1.0 (0 when target is 0)."""
    if target <= 0:
        return 0.0
    return min(days_done, target) / target


def _mean_score(ratios: Sequence[float]) -> int:
    if not ratios:
        return 0
    return round_half_up(sum(ratios) / len(ratios) * 100)


# ============================================================
# Pure scoring
# ============================================================

def compute_week_score(
    week: int, lines: Iterable[Tuple[int, int]]
) -> WeekScoreSummary:
    """
    Score one week from (days_done, weekly_target) pairs.

    Args:
        week: Week number the pairs belong to
        lines: One (days_done, weekly_target) pair per tactic of the cycle

    Returns:
        WeekScoreSummary; all zeros when there are no tactics
    """
    pairs = list(lines)
    if not pairs:
        return WeekScoreSummary(week_number=week)
    ratios = [tactic_ratio(done, target) for done, target in pairs]
    completed = sum(1 for done, target in pairs if done >= target)
    return WeekScoreSummary(
        week_number=week,
        total_tactics=len(pairs),
        completed_tactics=completed,
        score=_mean_score(ratios),
    )


def score_scorecard(week: int, scorecard: Iterable[TacticWeek]) -> WeekScoreSummary:
    """Score a week from its scorecard lines."""
    return compute_week_score(
        week, ((line.days_done, line.weekly_target) for line in scorecard)
    )


def compute_goal_progress(
    goal_id: int,
    goal_title: str,
    tactics: Iterable[Tuple[int, int]],
    weeks: int = WEEKS_PER_CYCLE,
) -> GoalProgress:
    """
    Score a goal from its tactics' (days_done, weekly_target) pairs.

    days_done is summed over the span being scored and the divisor is
    weekly_target * weeks (1 for a single week, 12 for the whole cycle).
    """
    pairs = list(tactics)
    if not pairs:
        return GoalProgress(goal_id=goal_id, goal_title=goal_title)
    ratios = []
    completed = 0
    for days_done, target in pairs:
        divisor = target * weeks
        ratios.append(tactic_ratio(days_done, divisor))
        if days_done >= divisor:
            completed += 1
    return GoalProgress(
        goal_id=goal_id,
        goal_title=goal_title,
        total_tactics=len(pairs),
        completed_tactics=completed,
        score=_mean_score(ratios),
    )


def compute_overall_score(week_scores: Iterable[WeekScoreSummary]) -> int:
    """
    Average of the week scores that have tactics and a non-zero score.

    Weeks scoring exactly 0 are left out along with weeks that were never
    started, so a fully missed week does not lower the average.
    """
    active = [w.score for w in week_scores if w.total_tactics > 0 and w.score > 0]
    if not active:
        return 0
    return round_half_up(sum(active) / len(active))


def score_band(score: int) -> ScoreBand:
    """Classify a score: >= 85 on track, 65-84 needs improvement, else critical."""
    if score >= ON_TRACK_THRESHOLD:
        return ScoreBand.ON_TRACK
    if score >= NEEDS_IMPROVEMENT_THRESHOLD:
        return ScoreBand.NEEDS_IMPROVEMENT
    return ScoreBand.CRITICAL


def score_color(score: int) -> str:
    """Chart color of a score's band."""
    return BAND_COLORS[score_band(score)]


def score_trend(current: int, previous: int) -> Optional[str]:
    """
    Direction of a week-over-week change.

    Returns "up", "down" or "flat", or None when both scores are 0.
    """
    if current == 0 and previous == 0:
        return None
    diff = current - previous
    if diff > TREND_TOLERANCE:
        return "up"
    if diff < -TREND_TOLERANCE:
        return "down"
    return "flat"


def uncompleted_tactics(summary: Optional[WeekScoreSummary]) -> int:
    """Tactics still short of their weekly target."""
    if summary is None:
        return 0
    return summary.total_tactics - summary.completed_tactics


# ============================================================
# Store-backed engine
# ============================================================

class ScoringEngine:
    """
    Computes scores from the current store state.

    Reads only; nothing is cached or written. Unknown cycles and goals
    produce zero/empty results.

    Example:
        >>> engine = ScoringEngine(db)
        >>> engine.week_score(cycle_id, 3).score
        72
    """

    def __init__(self, db: Database):
        self.db = db
        self.ledger = CompletionLedger(db)

    def week_score(self, cycle_id: int, week: int) -> WeekScoreSummary:
        """Score one week of a cycle."""
        return score_scorecard(week, self.ledger.get_week(cycle_id, week))

    def cycle_week_scores(self, cycle_id: int) -> List[WeekScoreSummary]:
        """Scores for weeks 1-12, always twelve entries."""
        return [
            self.week_score(cycle_id, week)
            for week in range(1, WEEKS_PER_CYCLE + 1)
        ]

    def goal_progress(
        self, cycle_id: int, week: Optional[int] = None
    ) -> List[GoalProgress]:
        """
        Progress of every goal of a cycle, in goal order.

        Args:
            cycle_id: Cycle ID
            week: Restrict to one week; None scores the whole cycle

        Raises:
            ValueError: If week is given and outside 1-12
        """
        if week is not None:
            check_week(week)
        weeks = 1 if week is not None else WEEKS_PER_CYCLE
        results = []
        with self.db.get_connection() as conn:
            for goal in self.db.get_goals_by_cycle(conn, cycle_id):
                pairs: List[Tuple[int, int]] = []
                for tactic in self.db.get_tactics_by_goal(conn, goal["id"]):
                    days_done = self.db.sum_days_done(
                        conn, cycle_id, tactic["id"], week
                    )
                    pairs.append((days_done, tactic["weekly_target"]))
                results.append(
                    compute_goal_progress(goal["id"], goal["title"], pairs, weeks)
                )
        return results

    def overall_score(self, cycle_id: int) -> int:
        return compute_overall_score(self.cycle_week_scores(cycle_id))

    def dashboard(
        self, cycle: Cycle, now: Optional[DateLike] = None
    ) -> CycleDashboard:
        """
        Assemble the dashboard view of a cycle as of now.
        """
        current_week = week_number(cycle.start_date, now if now is not None else datetime.now())
        week_scores = self.cycle_week_scores(cycle.id)
        overall = compute_overall_score(week_scores)

        current: Optional[WeekScoreSummary] = None
        trend = None
        if 1 <= current_week <= WEEKS_PER_CYCLE:
            current = week_scores[current_week - 1]
            # Week 1 has nothing to compare against
            if current_week >= 2:
                trend = score_trend(current.score, week_scores[current_week - 2].score)

        logger.debug(
            "Dashboard for cycle %d: week %d, overall %d", cycle.id, current_week, overall
        )
        return CycleDashboard(
            cycle=cycle,
            current_week=current_week,
            week_scores=week_scores,
            goal_progress=self.goal_progress(cycle.id),
            overall_score=overall,
            overall_band=score_band(overall),
            overall_color=score_color(overall),
            current_score=current,
            trend=trend,
            uncompleted_tactics=uncompleted_tactics(current),
        )
