"""
Data models and database management.

Provides the SQLite schema, Pydantic data models and the Database store
handle for cycles, goals, tactics, completion rows and weekly reviews.
"""

from twelve_week_year.models.database import Database
from twelve_week_year.models.schema import create_all_tables, get_table_names, SCHEMA_SQL
from twelve_week_year.models.entities import Cycle, Goal, Tactic, DailyCompletion, WeeklyReview

__all__ = [
    "Database",
    "create_all_tables",
    "get_table_names",
    "SCHEMA_SQL",
    "Cycle",
    "Goal",
    "Tactic",
    "DailyCompletion",
    "WeeklyReview",
]
