"""
Cycle planning: cycles, goals, tactics and weekly reviews.

Each public method runs in one transaction on the store handle and commits
before returning. Deletes cascade through owned records inside that same
transaction, so a partial cascade is never visible.
"""

import logging
from typing import List, Optional

from twelve_week_year.models.database import Database
from twelve_week_year.models.entities import Cycle, Goal, Tactic, WeeklyReview
from twelve_week_year.tracking.clock import (
    DateLike,
    check_week,
    calc_end_date,
    to_local_date,
)

logger = logging.getLogger(__name__)


def _require_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValueError("title must not be empty")
    return title


def _check_target(weekly_target: int) -> int:
    if isinstance(weekly_target, bool) or not isinstance(weekly_target, int):
        raise ValueError(f"weekly_target must be a whole number, got {weekly_target!r}")
    if not 1 <= weekly_target <= 7:
        raise ValueError(f"weekly_target must be between 1 and 7, got {weekly_target}")
    return weekly_target


class CyclePlanner:
    """
    CRUD over the planning hierarchy Cycle > Goal > Tactic.

    Example:
        >>> planner = CyclePlanner(db)
        >>> cycle = planner.create_cycle("Q1 Sprint", "2026-01-05", vision="Ship it")
        >>> goal = planner.add_goal(cycle.id, "Fitness")
        >>> tactic = planner.add_tactic(goal.id, "Morning run", weekly_target=5)
    """

    def __init__(self, db: Database):
        self.db = db

    # ------------------------------------------------------------------
    #  Cycles
    # ------------------------------------------------------------------

    def create_cycle(
        self,
        title: str,
        start_date: DateLike,
        vision: str = "",
        activate: bool = True,
    ) -> Cycle:
        """
        Create a cycle spanning 84 days from start_date.

        The new cycle becomes the active one unless activate is False.
        """
        title = _require_title(title)
        start = to_local_date(start_date)
        end = calc_end_date(start)
        with self.db.get_connection() as conn:
            cycle_id = self.db.insert_cycle(
                conn, title, start.isoformat(), end.isoformat(), vision, is_active=activate
            )
            row = self.db.get_cycle_by_id(conn, cycle_id)
        logger.info("Created cycle %d '%s' (%s to %s)", cycle_id, title, start, end)
        return Cycle.model_validate(dict(row))

    def list_cycles(self) -> List[Cycle]:
        with self.db.get_connection() as conn:
            rows = self.db.get_cycles(conn)
        return [Cycle.model_validate(dict(row)) for row in rows]

    def get_cycle(self, cycle_id: int) -> Optional[Cycle]:
        with self.db.get_connection() as conn:
            row = self.db.get_cycle_by_id(conn, cycle_id)
        return Cycle.model_validate(dict(row)) if row is not None else None

    def get_active_cycle(self) -> Optional[Cycle]:
        with self.db.get_connection() as conn:
            row = self.db.get_active_cycle(conn)
        return Cycle.model_validate(dict(row)) if row is not None else None

    def update_cycle(
        self,
        cycle_id: int,
        title: Optional[str] = None,
        vision: Optional[str] = None,
        start_date: Optional[DateLike] = None,
    ) -> Optional[Cycle]:
        """
        Update cycle fields. A new start date moves the end date with it.
        """
        data = {"vision": vision}
        if title is not None:
            data["title"] = _require_title(title)
        if start_date is not None:
            start = to_local_date(start_date)
            data["start_date"] = start.isoformat()
            data["end_date"] = calc_end_date(start).isoformat()
        with self.db.get_connection() as conn:
            self.db.update_cycle(conn, cycle_id, **data)
            row = self.db.get_cycle_by_id(conn, cycle_id)
        return Cycle.model_validate(dict(row)) if row is not None else None

    def activate_cycle(self, cycle_id: int) -> None:
        """Make cycle_id the only active cycle."""
        with self.db.get_connection() as conn:
            self.db.set_active_cycle(conn, cycle_id)
        logger.info("Activated cycle %d", cycle_id)

    def delete_cycle(self, cycle_id: int) -> None:
        """Delete a cycle with its goals, tactics, completion rows and reviews."""
        with self.db.get_connection() as conn:
            self.db.delete_cycle(conn, cycle_id)
        logger.info("Deleted cycle %d", cycle_id)

    # ------------------------------------------------------------------
    #  Goals
    # ------------------------------------------------------------------

    def add_goal(self, cycle_id: int, title: str, description: str = "") -> Goal:
        """Append a goal to a cycle."""
        title = _require_title(title)
        with self.db.get_connection() as conn:
            goal_id = self.db.insert_goal(conn, cycle_id, title, description)
            row = self.db.get_goal_by_id(conn, goal_id)
        logger.info("Added goal %d '%s' to cycle %d", goal_id, title, cycle_id)
        return Goal.model_validate(dict(row))

    def list_goals(self, cycle_id: int) -> List[Goal]:
        with self.db.get_connection() as conn:
            rows = self.db.get_goals_by_cycle(conn, cycle_id)
        return [Goal.model_validate(dict(row)) for row in rows]

    def update_goal(
        self,
        goal_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        sort_order: Optional[int] = None,
    ) -> None:
        if title is not None:
            title = _require_title(title)
        with self.db.get_connection() as conn:
            self.db.update_goal(
                conn, goal_id, title=title, description=description, sort_order=sort_order
            )

    def delete_goal(self, goal_id: int) -> None:
        """Delete a goal with its tactics and their completion rows."""
        with self.db.get_connection() as conn:
            self.db.delete_goal(conn, goal_id)
        logger.info("Deleted goal %d", goal_id)

    # ------------------------------------------------------------------
    #  Tactics
    # ------------------------------------------------------------------

    def add_tactic(self, goal_id: int, title: str, weekly_target: int = 7) -> Tactic:
        """
        Append a tactic to a goal.

        Raises:
            ValueError: If weekly_target is outside 1-7 or title is empty
        """
        title = _require_title(title)
        weekly_target = _check_target(weekly_target)
        with self.db.get_connection() as conn:
            tactic_id = self.db.insert_tactic(conn, goal_id, title, weekly_target)
            row = self.db.get_tactic_by_id(conn, tactic_id)
        logger.info(
            "Added tactic %d '%s' (target %d/week) to goal %d",
            tactic_id, title, weekly_target, goal_id,
        )
        return Tactic.model_validate(dict(row))

    def list_tactics(self, goal_id: int) -> List[Tactic]:
        with self.db.get_connection() as conn:
            rows = self.db.get_tactics_by_goal(conn, goal_id)
        return [Tactic.model_validate(dict(row)) for row in rows]

    def list_cycle_tactics(self, cycle_id: int) -> List[Tactic]:
        """All tactics of a cycle ordered by (goal order, tactic order)."""
        with self.db.get_connection() as conn:
            rows = self.db.get_tactics_by_cycle(conn, cycle_id)
        return [Tactic.model_validate(dict(row)) for row in rows]

    def update_tactic(
        self,
        tactic_id: int,
        title: Optional[str] = None,
        weekly_target: Optional[int] = None,
        sort_order: Optional[int] = None,
    ) -> None:
        if title is not None:
            title = _require_title(title)
        if weekly_target is not None:
            weekly_target = _check_target(weekly_target)
        with self.db.get_connection() as conn:
            self.db.update_tactic(
                conn, tactic_id, title=title, weekly_target=weekly_target, sort_order=sort_order
            )

    def delete_tactic(self, tactic_id: int) -> None:
        """Delete a tactic and its completion rows."""
        with self.db.get_connection() as conn:
            self.db.delete_tactic(conn, tactic_id)
        logger.info("Deleted tactic %d", tactic_id)

    # ------------------------------------------------------------------
    #  Weekly reviews
    # ------------------------------------------------------------------

    def save_review(
        self,
        cycle_id: int,
        week: int,
        wins: str = "",
        improvements: str = "",
        insights: str = "",
    ) -> WeeklyReview:
        """Insert or replace the review of a cycle week."""
        check_week(week)
        with self.db.get_connection() as conn:
            self.db.upsert_weekly_review(conn, cycle_id, week, wins, improvements, insights)
            row = self.db.get_weekly_review(conn, cycle_id, week)
        return WeeklyReview.model_validate(dict(row))

    def get_review(self, cycle_id: int, week: int) -> Optional[WeeklyReview]:
        with self.db.get_connection() as conn:
            row = self.db.get_weekly_review(conn, cycle_id, week)
        return WeeklyReview.model_validate(dict(row)) if row is not None else None

    def list_reviews(self, cycle_id: int) -> List[WeeklyReview]:
        with self.db.get_connection() as conn:
            rows = self.db.get_weekly_reviews(conn, cycle_id)
        return [WeeklyReview.model_validate(dict(row)) for row in rows]
