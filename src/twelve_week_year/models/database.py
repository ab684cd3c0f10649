"""
Database management and data access layer.

Provides a Database class owning the SQLite store and helper methods for
the tracker's record kinds: cycles, goals, tactics, weekly completion rows
and weekly reviews. Each Database instance is an independent store handle;
nothing is held at module level.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional, List, Dict, Any
from contextlib import contextmanager

from .schema import create_all_tables, missing_tables
from .entities import DAY_KEYS
from ..errors import StoreUnavailableError, ImportValidationError

logger = logging.getLogger(__name__)

_CYCLE_FIELDS = ("title", "vision", "start_date", "end_date")
_GOAL_FIELDS = ("title", "description", "sort_order")
_TACTIC_FIELDS = ("title", "weekly_target", "sort_order")


def _build_update(
    table: str, allowed: tuple, record_id: int, data: Dict[str, Any]
) -> Optional[tuple]:
    """Build an UPDATE statement for the allowed, non-None fields of data."""
    fields = [k for k in allowed if data.get(k) is not None]
    if not fields:
        return None
    assignments = ", ".join(f"{k} = ?" for k in fields)
    values = [data[k] for k in fields] + [record_id]
    return f"UPDATE {table} SET {assignments} WHERE id = ?", values


class Database:
    """
    Store handle for the tracker.

    The handle has an explicit lifecycle: ``initialize()`` creates the schema
    and verifies the file is usable, ``close()`` retires the handle. Every
    ``get_connection()`` block is one transaction that is committed (and so
    persisted to disk) before the block exits.

    Example:
        >>> db = Database(Path("data/db/tracker.db"))
        >>> db.initialize()
        >>> with db.get_connection() as conn:
        ...     cycle_id = db.insert_cycle(conn, "Q1", "2026-01-05", "2026-03-29")
    """

    def __init__(self, db_path: Path):
        """
        Initialize database manager.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self._closed = False

    def initialize(self) -> None:
        """
        Initialize database schema.

        Creates all tables and indexes if they don't exist.
        Safe to call multiple times (idempotent).

        Raises:
            StoreUnavailableError: If the database file cannot be created or opened
        """
        try:
            create_all_tables(self.db_path)
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailableError(
                f"Cannot initialize database at {self.db_path}: {e}"
            ) from e
        self._closed = False
        logger.debug("Database initialized at %s", self.db_path)

    def close(self) -> None:
        """Retire this handle. Later connection attempts raise StoreUnavailableError."""
        self._closed = True

    @property
    def is_closed(self) -> bool:
        return self._closed

    @contextmanager
    def get_connection(self):
        """
        Context manager for database connections.

        The block runs as a single transaction: it is committed when the
        block exits normally and rolled back if it raises.

        Yields:
            sqlite3.Connection: Database connection with row factory set

        Raises:
            StoreUnavailableError: If the handle is closed or the file cannot be opened
        """
        if self._closed:
            raise StoreUnavailableError("Database handle has been closed")
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise StoreUnavailableError(
                f"Cannot open database at {self.db_path}: {e}"
            ) from e
        conn.row_factory = sqlite3.Row  # Enable column access by name
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ------------------------------------------------------------------
    #  Cycles
    # ------------------------------------------------------------------

    def insert_cycle(
        self,
        conn: sqlite3.Connection,
        title: str,
        start_date: str,
        end_date: str,
        vision: str = "",
        is_active: bool = True,
    ) -> int:
        """
        Insert a new cycle.

        When ``is_active`` is set, every other cycle is deactivated first so
        at most one cycle is active.

        Args:
            conn: Database connection
            title: Cycle title
            start_date: First day (YYYY-MM-DD)
            end_date: Last day (YYYY-MM-DD)
            vision: Vision statement
            is_active: Whether the new cycle becomes the active one

        Returns:
            int: ID of inserted cycle
        """
        if is_active:
            conn.execute("UPDATE cycles SET is_active = 0")
        cursor = conn.execute(
            """
            INSERT INTO cycles (title, start_date, end_date, vision, is_active)
            VALUES (?, ?, ?, ?, ?)
            """,
            (title, start_date, end_date, vision, 1 if is_active else 0),
        )
        return cursor.lastrowid

    def get_cycles(self, conn: sqlite3.Connection) -> List[sqlite3.Row]:
        """Retrieve all cycles, newest first."""
        cursor = conn.execute("SELECT * FROM cycles ORDER BY created_at DESC, id DESC")
        return cursor.fetchall()

    def get_cycle_by_id(
        self, conn: sqlite3.Connection, cycle_id: int
    ) -> Optional[sqlite3.Row]:
        """Retrieve a cycle by ID, or None if not found."""
        cursor = conn.execute("SELECT * FROM cycles WHERE id = ?", (cycle_id,))
        return cursor.fetchone()

    def get_active_cycle(self, conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
        """Retrieve the active cycle, or None when no cycle is active."""
        cursor = conn.execute("SELECT * FROM cycles WHERE is_active = 1 LIMIT 1")
        return cursor.fetchone()

    def update_cycle(
        self, conn: sqlite3.Connection, cycle_id: int, **data: Any
    ) -> None:
        """Update title, vision, start_date and/or end_date of a cycle."""
        statement = _build_update("cycles", _CYCLE_FIELDS, cycle_id, data)
        if statement is not None:
            conn.execute(*statement)

    def set_active_cycle(self, conn: sqlite3.Connection, cycle_id: int) -> None:
        """Make one cycle active and deactivate all others."""
        conn.execute("UPDATE cycles SET is_active = 0")
        conn.execute("UPDATE cycles SET is_active = 1 WHERE id = ?", (cycle_id,))

    def delete_cycle(self, conn: sqlite3.Connection, cycle_id: int) -> None:
        """
        Delete a cycle and everything it owns.

        Order: completion rows, reviews, tactics, goals, cycle. Runs on the
        caller's connection so the cascade commits or rolls back as a unit.
        """
        conn.execute("DELETE FROM weekly_scores WHERE cycle_id = ?", (cycle_id,))
        conn.execute(
            """
            DELETE FROM weekly_scores WHERE tactic_id IN (
                SELECT t.id FROM tactics t JOIN goals g ON t.goal_id = g.id
                WHERE g.cycle_id = ?
            )
            """,
            (cycle_id,),
        )
        conn.execute("DELETE FROM weekly_reviews WHERE cycle_id = ?", (cycle_id,))
        conn.execute(
            "DELETE FROM tactics WHERE goal_id IN (SELECT id FROM goals WHERE cycle_id = ?)",
            (cycle_id,),
        )
        conn.execute("DELETE FROM goals WHERE cycle_id = ?", (cycle_id,))
        conn.execute("DELETE FROM cycles WHERE id = ?", (cycle_id,))

    # ------------------------------------------------------------------
    #  Goals
    # ------------------------------------------------------------------

    def insert_goal(
        self,
        conn: sqlite3.Connection,
        cycle_id: int,
        title: str,
        description: str = "",
    ) -> int:
        """
        Insert a goal at the end of its cycle's ordering.

        Returns:
            int: ID of inserted goal
        """
        row = conn.execute(
            "SELECT COALESCE(MAX(sort_order), -1) FROM goals WHERE cycle_id = ?",
            (cycle_id,),
        ).fetchone()
        cursor = conn.execute(
            "INSERT INTO goals (cycle_id, title, description, sort_order) VALUES (?, ?, ?, ?)",
            (cycle_id, title, description, row[0] + 1),
        )
        return cursor.lastrowid

    def get_goal_by_id(
        self, conn: sqlite3.Connection, goal_id: int
    ) -> Optional[sqlite3.Row]:
        cursor = conn.execute("SELECT * FROM goals WHERE id = ?", (goal_id,))
        return cursor.fetchone()

    def get_goals_by_cycle(
        self, conn: sqlite3.Connection, cycle_id: int
    ) -> List[sqlite3.Row]:
        """Retrieve the goals of a cycle ordered by sort order."""
        cursor = conn.execute(
            "SELECT * FROM goals WHERE cycle_id = ? ORDER BY sort_order, id",
            (cycle_id,),
        )
        return cursor.fetchall()

    def update_goal(self, conn: sqlite3.Connection, goal_id: int, **data: Any) -> None:
        """Update title, description and/or sort_order of a goal."""
        statement = _build_update("goals", _GOAL_FIELDS, goal_id, data)
        if statement is not None:
            conn.execute(*statement)

    def delete_goal(self, conn: sqlite3.Connection, goal_id: int) -> None:
        """Delete a goal, its tactics and their completion rows."""
        conn.execute(
            "DELETE FROM weekly_scores WHERE tactic_id IN (SELECT id FROM tactics WHERE goal_id = ?)",
            (goal_id,),
        )
        conn.execute("DELETE FROM tactics WHERE goal_id = ?", (goal_id,))
        conn.execute("DELETE FROM goals WHERE id = ?", (goal_id,))

    # ------------------------------------------------------------------
    #  Tactics
    # ------------------------------------------------------------------

    def insert_tactic(
        self,
        conn: sqlite3.Connection,
        goal_id: int,
        title: str,
        weekly_target: int = 7,
    ) -> int:
        """
        Insert a tactic at the end of its goal's ordering.

        Raises:
            sqlite3.IntegrityError: If weekly_target is outside 1-7 or the goal does not exist
        """
        row = conn.execute(
            "SELECT COALESCE(MAX(sort_order), -1) FROM tactics WHERE goal_id = ?",
            (goal_id,),
        ).fetchone()
        cursor = conn.execute(
            "INSERT INTO tactics (goal_id, title, weekly_target, sort_order) VALUES (?, ?, ?, ?)",
            (goal_id, title, weekly_target, row[0] + 1),
        )
        return cursor.lastrowid

    def get_tactic_by_id(
        self, conn: sqlite3.Connection, tactic_id: int
    ) -> Optional[sqlite3.Row]:
        cursor = conn.execute("SELECT * FROM tactics WHERE id = ?", (tactic_id,))
        return cursor.fetchone()

    def get_tactics_by_goal(
        self, conn: sqlite3.Connection, goal_id: int
    ) -> List[sqlite3.Row]:
        """Retrieve the tactics of a goal ordered by sort order."""
        cursor = conn.execute(
            "SELECT * FROM tactics WHERE goal_id = ? ORDER BY sort_order, id",
            (goal_id,),
        )
        return cursor.fetchall()

    def get_tactics_by_cycle(
        self, conn: sqlite3.Connection, cycle_id: int
    ) -> List[sqlite3.Row]:
        """Retrieve every tactic of a cycle ordered by (goal order, tactic order)."""
        cursor = conn.execute(
            """
            SELECT t.* FROM tactics t
            JOIN goals g ON t.goal_id = g.id
            WHERE g.cycle_id = ?
            ORDER BY g.sort_order, g.id, t.sort_order, t.id
            """,
            (cycle_id,),
        )
        return cursor.fetchall()

    def update_tactic(
        self, conn: sqlite3.Connection, tactic_id: int, **data: Any
    ) -> None:
        """Update title, weekly_target and/or sort_order of a tactic."""
        statement = _build_update("tactics", _TACTIC_FIELDS, tactic_id, data)
        if statement is not None:
            conn.execute(*statement)

    def delete_tactic(self, conn: sqlite3.Connection, tactic_id: int) -> None:
        """Delete a tactic and its completion rows."""
        conn.execute("DELETE FROM weekly_scores WHERE tactic_id = ?", (tactic_id,))
        conn.execute("DELETE FROM tactics WHERE id = ?", (tactic_id,))

    # ------------------------------------------------------------------
    #  Weekly completion rows
    # ------------------------------------------------------------------

    def ensure_completion_row(
        self,
        conn: sqlite3.Connection,
        cycle_id: int,
        week_number: int,
        tactic_id: int,
    ) -> None:
        """Create an all-false completion row for the key unless one exists."""
        conn.execute(
            """
            INSERT INTO weekly_scores (cycle_id, week_number, tactic_id)
            VALUES (?, ?, ?)
            ON CONFLICT (cycle_id, week_number, tactic_id) DO NOTHING
            """,
            (cycle_id, week_number, tactic_id),
        )

    def set_completion_day(
        self,
        conn: sqlite3.Connection,
        cycle_id: int,
        week_number: int,
        tactic_id: int,
        day: str,
        value: bool,
    ) -> None:
        """
        Set one day flag on an existing completion row.

        Raises:
            ValueError: If day is not a day key (it is interpolated as a column name)
        """
        if day not in DAY_KEYS:
            raise ValueError(f"Unknown day key: {day!r}")
        conn.execute(
            f"""
            UPDATE weekly_scores SET {day} = ?
            WHERE cycle_id = ? AND week_number = ? AND tactic_id = ?
            """,
            (1 if value else 0, cycle_id, week_number, tactic_id),
        )

    def get_completion_row(
        self,
        conn: sqlite3.Connection,
        cycle_id: int,
        week_number: int,
        tactic_id: int,
    ) -> Optional[sqlite3.Row]:
        cursor = conn.execute(
            """
            SELECT * FROM weekly_scores
            WHERE cycle_id = ? AND week_number = ? AND tactic_id = ?
            """,
            (cycle_id, week_number, tactic_id),
        )
        return cursor.fetchone()

    def count_completion_rows(
        self, conn: sqlite3.Connection, cycle_id: Optional[int] = None
    ) -> int:
        """Count completion rows, optionally for one cycle."""
        if cycle_id is None:
            row = conn.execute("SELECT COUNT(*) FROM weekly_scores").fetchone()
        else:
            row = conn.execute(
                "SELECT COUNT(*) FROM weekly_scores WHERE cycle_id = ?", (cycle_id,)
            ).fetchone()
        return row[0]

    def get_week_completions(
        self, conn: sqlite3.Connection, cycle_id: int, week_number: int
    ) -> List[Dict[str, Any]]:
        """
        Left-join every tactic of a cycle with its completion row for a week.

        Each tactic appears exactly once, ordered by (goal order, tactic
        order). Tactics without a row get an all-zero vector here rather
        than through COALESCE in SQL.

        Returns:
            List of dicts with tactic_id, tactic_title, goal_id, goal_title,
            weekly_target and one 0/1 entry per day key
        """
        tactics = conn.execute(
            """
            SELECT t.id AS tactic_id, t.title AS tactic_title, t.weekly_target,
                   g.id AS goal_id, g.title AS goal_title
            FROM tactics t
            JOIN goals g ON t.goal_id = g.id
            WHERE g.cycle_id = ?
            ORDER BY g.sort_order, g.id, t.sort_order, t.id
            """,
            (cycle_id,),
        ).fetchall()

        rows = conn.execute(
            "SELECT * FROM weekly_scores WHERE cycle_id = ? AND week_number = ?",
            (cycle_id, week_number),
        ).fetchall()
        by_tactic = {row["tactic_id"]: row for row in rows}

        joined = []
        for tactic in tactics:
            record = dict(tactic)
            completion = by_tactic.get(tactic["tactic_id"])
            for day in DAY_KEYS:
                record[day] = completion[day] if completion is not None else 0
            joined.append(record)
        return joined

    def sum_days_done(
        self,
        conn: sqlite3.Connection,
        cycle_id: int,
        tactic_id: int,
        week_number: Optional[int] = None,
    ) -> int:
        """Total completed days of a tactic over one week or the whole cycle."""
        query = """
            SELECT COALESCE(SUM(sun + mon + tue + wed + thu + fri + sat), 0)
            FROM weekly_scores
            WHERE cycle_id = ? AND tactic_id = ?
        """
        params: list = [cycle_id, tactic_id]
        if week_number is not None:
            query += " AND week_number = ?"
            params.append(week_number)
        return conn.execute(query, params).fetchone()[0]

    # ------------------------------------------------------------------
    #  Weekly reviews
    # ------------------------------------------------------------------

    def upsert_weekly_review(
        self,
        conn: sqlite3.Connection,
        cycle_id: int,
        week_number: int,
        wins: str = "",
        improvements: str = "",
        insights: str = "",
    ) -> None:
        """
        Insert or replace the review text for (cycle_id, week_number).
        """
        conn.execute(
            """
            INSERT INTO weekly_reviews (cycle_id, week_number, wins, improvements, insights)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (cycle_id, week_number) DO UPDATE SET
                wins = excluded.wins,
                improvements = excluded.improvements,
                insights = excluded.insights
            """,
            (cycle_id, week_number, wins, improvements, insights),
        )

    def get_weekly_review(
        self, conn: sqlite3.Connection, cycle_id: int, week_number: int
    ) -> Optional[sqlite3.Row]:
        cursor = conn.execute(
            "SELECT * FROM weekly_reviews WHERE cycle_id = ? AND week_number = ?",
            (cycle_id, week_number),
        )
        return cursor.fetchone()

    def get_weekly_reviews(
        self, conn: sqlite3.Connection, cycle_id: int
    ) -> List[sqlite3.Row]:
        """Retrieve all reviews of a cycle ordered by week."""
        cursor = conn.execute(
            "SELECT * FROM weekly_reviews WHERE cycle_id = ? ORDER BY week_number",
            (cycle_id,),
        )
        return cursor.fetchall()

    # ------------------------------------------------------------------
    #  Snapshots
    # ------------------------------------------------------------------

    def export_snapshot(self) -> bytes:
        """
        Serialize the whole store to an opaque binary image.

        Returns:
            bytes: SQLite database image
        """
        with self.get_connection() as conn:
            return conn.serialize()

    def import_snapshot(self, data: bytes) -> None:
        """
        Replace the whole store with a snapshot.

        The snapshot is opened in memory and checked for the tracker tables
        before anything is written; a rejected snapshot leaves the current
        state untouched.

        Raises:
            ImportValidationError: If data is not a SQLite image with the tracker tables
        """
        candidate = sqlite3.connect(":memory:")
        try:
            try:
                candidate.deserialize(bytes(data))
                missing = missing_tables(candidate)
            except sqlite3.DatabaseError as e:
                raise ImportValidationError(
                    f"Invalid database file: {e}"
                ) from e
            if missing:
                raise ImportValidationError(
                    "Invalid database file: missing expected tables: "
                    + ", ".join(missing)
                )
            with self.get_connection() as conn:
                candidate.backup(conn)
        finally:
            candidate.close()
        logger.info("Imported snapshot (%d bytes) into %s", len(data), self.db_path)
