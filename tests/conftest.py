"""
Shared test fixtures.

Provides pytest fixtures for common test resources including:
- Temporary, initialized database
- Planner, ledger and scoring engine bound to it
- A sample cycle with two goals and three tactics
"""

from datetime import date

import pytest

from twelve_week_year.models.database import Database
from twelve_week_year.tracking.ledger import CompletionLedger
from twelve_week_year.tracking.planner import CyclePlanner
from twelve_week_year.analysis.scorer import ScoringEngine


@pytest.fixture
def db(tmp_path) -> Database:
    """Create an initialized Database in a temporary directory."""
    database = Database(tmp_path / "tracker.db")
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def planner(db) -> CyclePlanner:
    return CyclePlanner(db)


@pytest.fixture
def ledger(db) -> CompletionLedger:
    return CompletionLedger(db)


@pytest.fixture
def engine(db) -> ScoringEngine:
    return ScoringEngine(db)


@pytest.fixture
def sample_cycle(planner):
    """
    Cycle starting 2026-01-05 with:
      goal 0 "Fitness":  "Workout" (target 5), "Steps" (target 7)
      goal 1 "Project":  "Code" (target 3)

    Returns:
        Dict with the cycle, goals and tactics keyed by title
    """
    cycle = planner.create_cycle("Q1 Sprint", date(2026, 1, 5), vision="Get it done")
    fitness = planner.add_goal(cycle.id, "Fitness")
    project = planner.add_goal(cycle.id, "Project")
    tactics = {
        "Workout": planner.add_tactic(fitness.id, "Workout", weekly_target=5),
        "Steps": planner.add_tactic(fitness.id, "Steps", weekly_target=7),
        "Code": planner.add_tactic(project.id, "Code", weekly_target=3),
    }
    return {
        "cycle": cycle,
        "goals": {"Fitness": fitness, "Project": project},
        "tactics": tactics,
    }


def mark_days(ledger, cycle_id, week, tactic_id, days):
    """Mark each day key in days as done."""
    for day in days:
        ledger.set_day(cycle_id, week, tactic_id, day, True)
