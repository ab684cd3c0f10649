"""
Completion ledger: which days each tactic was done in each cycle week.

A ledger row holds seven day flags for one (cycle, week, tactic) key and
only exists once a day has been toggled for that key. Reads left-join the
cycle's tactics so every tactic is reported, with an all-false vector when
it has no row yet.
"""

import logging
from typing import List, Optional

from twelve_week_year.models.database import Database
from twelve_week_year.models.entities import (
    DAY_KEYS,
    DailyCompletion,
    DayKey,
    TacticWeek,
    TodayChecklist,
)
from twelve_week_year.tracking.clock import check_week
from twelve_week_year.utils import round_half_up

logger = logging.getLogger(__name__)


def _normalize_day(day) -> Optional[str]:
    """Return the day key string, or None when day is not a valid key."""
    if isinstance(day, DayKey):
        return day.value
    if isinstance(day, str) and day in DAY_KEYS:
        return day
    return None


class CompletionLedger:
    """
    Reads and writes per-week completion vectors through a store handle.

    Every write is one committed transaction, so a returned call is durable.

    Example:
        >>> ledger = CompletionLedger(db)
        >>> ledger.set_day(cycle_id, 1, tactic_id, "mon", True)
        >>> [line.days_done for line in ledger.get_week(cycle_id, 1)]
        [1]
    """

    def __init__(self, db: Database):
        self.db = db

    def set_day(
        self,
        cycle_id: int,
        week: int,
        tactic_id: int,
        day: str,
        value: bool,
    ) -> None:
        """
        Mark one day of a tactic's week as done or not done.

        Creates the row (all days false) if the key has none yet, then sets
        the day. Unknown day keys are ignored without touching the store.

        Args:
            cycle_id: Cycle ID
            week: Week number 1-12
            tactic_id: Tactic ID
            day: Day key ('sun'..'sat')
            value: True for done

        Raises:
            ValueError: If week is outside 1-12
        """
        key = _normalize_day(day)
        if key is None:
            logger.debug("Ignoring unknown day key %r for tactic %s", day, tactic_id)
            return
        check_week(week)

        with self.db.get_connection() as conn:
            self.db.ensure_completion_row(conn, cycle_id, week, tactic_id)
            self.db.set_completion_day(conn, cycle_id, week, tactic_id, key, value)
        logger.debug(
            "Set %s=%s for tactic %d (cycle %d, week %d)",
            key, value, tactic_id, cycle_id, week,
        )

    def toggle_day(self, cycle_id: int, week: int, tactic_id: int, day: str) -> Optional[bool]:
        """
        Flip one day flag.

        Returns:
            The new value, or None when day is not a valid key
        """
        key = _normalize_day(day)
        if key is None:
            logger.debug("Ignoring unknown day key %r for tactic %s", day, tactic_id)
            return None
        current = self.get_entry(cycle_id, week, tactic_id)
        new_value = not (current is not None and getattr(current, key))
        self.set_day(cycle_id, week, tactic_id, key, new_value)
        return new_value

    def get_entry(
        self, cycle_id: int, week: int, tactic_id: int
    ) -> Optional[DailyCompletion]:
        """The stored row for one key, or None if no day was ever toggled."""
        with self.db.get_connection() as conn:
            row = self.db.get_completion_row(conn, cycle_id, week, tactic_id)
        return DailyCompletion.model_validate(dict(row)) if row is not None else None

    def get_week(self, cycle_id: int, week: int) -> List[TacticWeek]:
        """
        Every tactic of the cycle with its vector for one week.

        Ordered by (goal sort order, tactic sort order). An unknown cycle
        yields an empty list.
        """
        with self.db.get_connection() as conn:
            records = self.db.get_week_completions(conn, cycle_id, week)
        return [TacticWeek.model_validate(record) for record in records]

    def today_checklist(self, cycle_id: int, week: int, day: str) -> TodayChecklist:
        """
        The week's tactics with their state on a single day.

        Raises:
            ValueError: If day is not a valid key
        """
        key = _normalize_day(day)
        if key is None:
            raise ValueError(f"Unknown day key: {day!r}")
        items = self.get_week(cycle_id, week)
        done = sum(1 for item in items if item.done_on(key))
        progress = round_half_up(done * 100 / len(items)) if items else 0
        return TodayChecklist(
            day=DayKey(key),
            items=items,
            done_count=done,
            total=len(items),
            progress=progress,
        )
