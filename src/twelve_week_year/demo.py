"""
Demo data for a fresh tracker.

Seeds one realistic cycle with three goals, nine tactics, eight weeks of
completion history and a few weekly reviews, so the dashboard is not empty
on first run. The history is generated from a fixed seed and looks the
same on every run.
"""

import logging
import random
from datetime import date
from typing import Optional

from twelve_week_year.models.database import Database
from twelve_week_year.models.entities import DAY_KEYS
from twelve_week_year.tracking.clock import calc_end_date

logger = logging.getLogger(__name__)

DEMO_START = date(2026, 1, 5)
DEMO_SEED = 42
DEMO_WEEKS = 8

DEMO_VISION = (
    "By the end of these 12 weeks I will have built a consistent fitness "
    "routine, shipped v1 of my side project, and developed a daily learning "
    "habit. I will feel energised, productive, and proud of the progress I've made."
)

DEMO_GOALS = [
    (
        "Build a Consistent Fitness Habit",
        "Establish a sustainable workout routine and improve overall health markers.",
        [("Morning workout (30 min)", 5), ("Hit 10,000 steps", 7), ("Meal prep for the week", 2)],
    ),
    (
        "Ship Side Project v1",
        "Launch the minimum viable product of my personal app and get 10 beta users.",
        [("Code for 1 hour", 5), ("Write a dev blog post", 1), ("Review & merge PRs", 3)],
    ),
    (
        "Develop a Daily Learning Habit",
        "Read every day, complete an online course, and expand my professional network.",
        [("Read for 30 minutes", 7), ("Complete one course lesson", 3), ("Reach out to someone new", 2)],
    ),
]

DEMO_REVIEWS = [
    (
        1,
        "Got the workout habit started and completed 4 out of 5 planned sessions. Set up the project repo and wrote the first feature.",
        "Meal prep only happened once. Need to block Sunday afternoon for this.",
        "Starting is the hardest part. Once I began, momentum carried me through.",
    ),
    (
        2,
        "Hit 10k steps every day! First blog post drafted. Read every single day.",
        "Coding sessions were shorter than planned. Need to silence notifications during deep work.",
        "Consistency beats intensity. Small daily actions are adding up.",
    ),
    (
        4,
        "Best execution week so far. Side project has 3 core features working. Reached out to 2 potential beta testers.",
        "Still struggling with weekend workouts. Should switch to outdoor activities on weekends.",
        "The scorecard is really motivating. Seeing the numbers makes me want to keep the streak going.",
    ),
    (
        6,
        "Completed half the online course! Fitness is feeling like a genuine habit now, not a chore.",
        "Blog post cadence slipped. Need to timebox writing to Thursday evenings.",
        "Halfway point. Reviewing my vision statement reminded me why I started.",
    ),
    (
        8,
        "Side project MVP is feature-complete! Got 4 people to sign up for beta. Reading streak is at 50+ days.",
        "Networking goal has been inconsistent. Should focus on deeper conversations.",
        "Eight weeks of small daily actions has produced visible results across all three goals.",
    ),
]


def seed_demo_data(db: Database, start: date = DEMO_START, seed: int = DEMO_SEED) -> Optional[int]:
    """
    Insert the demo cycle unless the store already has cycles.

    Execution improves from about 55% in week 1 towards 85% in week 8,
    with weekend days skipped more often.

    Args:
        db: Initialized store handle
        start: Start date of the demo cycle
        seed: Random seed for the completion history

    Returns:
        ID of the demo cycle, or None when the store was not empty
    """
    rng = random.Random(seed)

    with db.get_connection() as conn:
        if db.get_cycles(conn):
            logger.info("Store already has cycles, skipping demo data")
            return None

        cycle_id = db.insert_cycle(
            conn,
            title="Q1 2026 Growth Sprint",
            start_date=start.isoformat(),
            end_date=calc_end_date(start).isoformat(),
            vision=DEMO_VISION,
        )

        tactics = []
        for goal_title, description, goal_tactics in DEMO_GOALS:
            goal_id = db.insert_goal(conn, cycle_id, goal_title, description)
            for tactic_title, target in goal_tactics:
                tactic_id = db.insert_tactic(conn, goal_id, tactic_title, target)
                tactics.append((tactic_id, target))

        for week in range(1, DEMO_WEEKS + 1):
            base_prob = 0.50 + (week / 12) * 0.40
            for tactic_id, target in tactics:
                checked = 0
                for day in DAY_KEYS:
                    weekend_penalty = 0.15 if day in ("sat", "sun") else 0.0
                    done = rng.random() < base_prob - weekend_penalty and checked < target + 1
                    if done:
                        db.ensure_completion_row(conn, cycle_id, week, tactic_id)
                        db.set_completion_day(conn, cycle_id, week, tactic_id, day, True)
                        checked += 1

        for week, wins, improvements, insights in DEMO_REVIEWS:
            db.upsert_weekly_review(conn, cycle_id, week, wins, improvements, insights)

    logger.info("Seeded demo cycle %d with %d tactics", cycle_id, len(tactics))
    return cycle_id
