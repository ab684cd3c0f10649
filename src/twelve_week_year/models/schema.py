"""
SQLite schema and database initialization.

Defines the database schema for the 12 Week Year tracker: cycles, goals,
tactics, per-week daily completion records and weekly reviews. Provides
functions to create and inspect the database.
"""

import sqlite3
from pathlib import Path


# Tables an importable snapshot must contain
REQUIRED_TABLES = (
    "cycles",
    "goals",
    "tactics",
    "weekly_scores",
    "weekly_reviews",
)

SCHEMA_SQL = """
-- ============================================================
-- CYCLES: 12-week planning periods (at most one active)
-- ============================================================
CREATE TABLE IF NOT EXISTS cycles (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    title           TEXT    NOT NULL,
    start_date      TEXT    NOT NULL,  -- YYYY-MM-DD
    end_date        TEXT    NOT NULL,  -- start_date + 83 days
    vision          TEXT    NOT NULL DEFAULT '',
    is_active       INTEGER NOT NULL DEFAULT 0 CHECK (is_active IN (0, 1)),
    created_at      TEXT    DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_cycles_active ON cycles(is_active);

-- ============================================================
-- GOALS: Outcomes pursued within a cycle
-- ============================================================
CREATE TABLE IF NOT EXISTS goals (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    cycle_id        INTEGER NOT NULL REFERENCES cycles(id),
    title           TEXT    NOT NULL,
    description     TEXT    NOT NULL DEFAULT '',
    sort_order      INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT    DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_goals_cycle ON goals(cycle_id, sort_order);

-- ============================================================
-- TACTICS: Weekly recurring actions under a goal
-- ============================================================
CREATE TABLE IF NOT EXISTS tactics (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    goal_id         INTEGER NOT NULL REFERENCES goals(id),
    title           TEXT    NOT NULL,
    weekly_target   INTEGER NOT NULL DEFAULT 7 CHECK (weekly_target BETWEEN 1 AND 7),
    sort_order      INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT    DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_tactics_goal ON tactics(goal_id, sort_order);

-- ============================================================
-- WEEKLY_SCORES: Daily completion per (cycle, week, tactic)
-- ============================================================
CREATE TABLE IF NOT EXISTS weekly_scores (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    cycle_id        INTEGER NOT NULL REFERENCES cycles(id),
    week_number     INTEGER NOT NULL CHECK (week_number BETWEEN 1 AND 12),
    tactic_id       INTEGER NOT NULL REFERENCES tactics(id),
    sun             INTEGER NOT NULL DEFAULT 0 CHECK (sun IN (0, 1)),
    mon             INTEGER NOT NULL DEFAULT 0 CHECK (mon IN (0, 1)),
    tue             INTEGER NOT NULL DEFAULT 0 CHECK (tue IN (0, 1)),
    wed             INTEGER NOT NULL DEFAULT 0 CHECK (wed IN (0, 1)),
    thu             INTEGER NOT NULL DEFAULT 0 CHECK (thu IN (0, 1)),
    fri             INTEGER NOT NULL DEFAULT 0 CHECK (fri IN (0, 1)),
    sat             INTEGER NOT NULL DEFAULT 0 CHECK (sat IN (0, 1)),
    UNIQUE (cycle_id, week_number, tactic_id)
);

CREATE INDEX IF NOT EXISTS idx_weekly_scores_tactic ON weekly_scores(tactic_id);

-- ============================================================
-- WEEKLY_REVIEWS: Free-text reflection per (cycle, week)
-- ============================================================
CREATE TABLE IF NOT EXISTS weekly_reviews (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    cycle_id        INTEGER NOT NULL REFERENCES cycles(id),
    week_number     INTEGER NOT NULL CHECK (week_number BETWEEN 1 AND 12),
    wins            TEXT    NOT NULL DEFAULT '',
    improvements    TEXT    NOT NULL DEFAULT '',
    insights        TEXT    NOT NULL DEFAULT '',
    created_at      TEXT    DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    UNIQUE (cycle_id, week_number)
);
"""


def create_all_tables(db_path: Path) -> None:
    """
    Create database and all tables with indexes.

    This function is idempotent - safe to call multiple times.

    Args:
        db_path: Path to the SQLite database file to create/initialize
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()


def list_tables(conn: sqlite3.Connection) -> list[str]:
    """Return the table names present on an open connection."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    return [row[0] for row in cursor.fetchall()]


def get_table_names(db_path: Path) -> list[str]:
    """
    Get list of all tables in the database.

    Args:
        db_path: Path to the SQLite database file

    Returns:
        List of table names

    Example:
        >>> tables = get_table_names(Path("data/db/twelve_week_year.db"))
        >>> print(tables)
        ['cycles', 'goals', 'sqlite_sequence', 'tactics', ...]
    """
    conn = sqlite3.connect(str(db_path))
    try:
        return list_tables(conn)
    finally:
        conn.close()


def missing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return the required tracker tables absent from a connection."""
    present = set(list_tables(conn))
    return [name for name in REQUIRED_TABLES if name not in present]
