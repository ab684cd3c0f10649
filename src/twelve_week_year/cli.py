"""
Command-line interface for the 12 Week Year Tracker.

Usage:
    twelve-week init                         # Create the database (seeds demo data if configured)
    twelve-week seed                         # Insert the demo cycle into an empty database
    twelve-week cycle create "Q1" 2026-01-05 --vision "..."
    twelve-week cycle list
    twelve-week cycle activate 2
    twelve-week cycle delete 2
    twelve-week goal add "Fitness"           # Adds to the active cycle
    twelve-week goal list
    twelve-week tactic add 3 "Morning run" --target 5
    twelve-week check 7 mon                  # Mark tactic 7 done on Monday of the current week
    twelve-week check 7 mon --week 2 --undo
    twelve-week today --toggle 7             # Flip tactic 7 for today
    twelve-week scorecard --week 2
    twelve-week score                        # Scores for all 12 weeks
    twelve-week dashboard --output-json
    twelve-week review set 2 --wins "..."
    twelve-week review show 2
    twelve-week export
    twelve-week import backup.db
"""

import argparse
import json
import logging
import sqlite3
import sys

from twelve_week_year.config import get_config
from twelve_week_year.errors import TrackerError
from twelve_week_year.models.database import Database
from twelve_week_year.models.entities import DAY_KEYS, DAY_LABELS
from twelve_week_year.tracking.clock import (
    check_week,
    current_scorecard_week,
    today_key,
    week_number,
    week_status,
)
from twelve_week_year.tracking.ledger import CompletionLedger
from twelve_week_year.tracking.planner import CyclePlanner
from twelve_week_year.analysis.scorer import ScoringEngine, score_band


def _open_database(config) -> Database:
    db = Database(config.db_path)
    db.initialize()
    return db


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _resolve_cycle(planner: CyclePlanner, cycle_id):
    """Return the requested cycle, or the active one when no ID is given."""
    cycle = planner.get_cycle(cycle_id) if cycle_id else planner.get_active_cycle()
    if cycle is None:
        if cycle_id:
            print(f"ERROR: Cycle {cycle_id} not found.")
        else:
            print("ERROR: No active cycle. Create one with 'twelve-week cycle create'.")
        sys.exit(1)
    return cycle


def _resolve_week(cycle, week):
    if week is None:
        return current_scorecard_week(cycle.start_date)
    check_week(week)
    return week


def cmd_init(args, config):
    """Create the database schema."""
    db = _open_database(config)
    print(f"Database ready at {db.db_path}")
    if config.seed_demo_data:
        from twelve_week_year.demo import seed_demo_data
        cycle_id = seed_demo_data(db)
        if cycle_id is not None:
            print(f"Seeded demo cycle {cycle_id}")


def cmd_seed(args, config):
    """Insert the demo cycle."""
    from twelve_week_year.demo import seed_demo_data

    cycle_id = seed_demo_data(_open_database(config))
    if cycle_id is None:
        print("Database already has cycles; demo data not added.")
    else:
        print(f"Seeded demo cycle {cycle_id}")


# ---------------------------------------------------------------------------
#  Cycle / goal / tactic subcommands
# ---------------------------------------------------------------------------

def cmd_cycle_create(args, config):
    planner = CyclePlanner(_open_database(config))
    cycle = planner.create_cycle(
        args.title, args.start_date, vision=args.vision, activate=not args.inactive
    )
    print(f"Created cycle {cycle.id}: {cycle.title} ({cycle.start_date} to {cycle.end_date})")


def cmd_cycle_list(args, config):
    planner = CyclePlanner(_open_database(config))
    cycles = planner.list_cycles()
    if args.output_json:
        _print_json([c.model_dump(mode="json") for c in cycles])
        return
    if not cycles:
        print("No cycles yet.")
        return
    for cycle in cycles:
        marker = "*" if cycle.is_active else " "
        print(f" {marker} {cycle.id:>3}  {cycle.title}  ({cycle.start_date} to {cycle.end_date})")


def cmd_cycle_activate(args, config):
    planner = CyclePlanner(_open_database(config))
    _resolve_cycle(planner, args.cycle_id)
    planner.activate_cycle(args.cycle_id)
    print(f"Cycle {args.cycle_id} is now active.")


def cmd_cycle_delete(args, config):
    planner = CyclePlanner(_open_database(config))
    _resolve_cycle(planner, args.cycle_id)
    planner.delete_cycle(args.cycle_id)
    print(f"Deleted cycle {args.cycle_id} and everything in it.")


def cmd_goal_add(args, config):
    planner = CyclePlanner(_open_database(config))
    cycle = _resolve_cycle(planner, args.cycle)
    goal = planner.add_goal(cycle.id, args.title, args.description)
    print(f"Added goal {goal.id}: {goal.title}")


def cmd_goal_list(args, config):
    planner = CyclePlanner(_open_database(config))
    cycle = _resolve_cycle(planner, args.cycle)
    goals = planner.list_goals(cycle.id)
    if args.output_json:
        _print_json([
            {**g.model_dump(mode="json"),
             "tactics": [t.model_dump(mode="json") for t in planner.list_tactics(g.id)]}
            for g in goals
        ])
        return
    for goal in goals:
        print(f"{goal.id:>3}  {goal.title}")
        for tactic in planner.list_tactics(goal.id):
            print(f"      {tactic.id:>3}  {tactic.title}  ({tactic.weekly_target}x/week)")


def cmd_goal_delete(args, config):
    CyclePlanner(_open_database(config)).delete_goal(args.goal_id)
    print(f"Deleted goal {args.goal_id}.")


def cmd_tactic_add(args, config):
    planner = CyclePlanner(_open_database(config))
    tactic = planner.add_tactic(args.goal_id, args.title, args.target)
    print(f"Added tactic {tactic.id}: {tactic.title} ({tactic.weekly_target}x/week)")


def cmd_tactic_delete(args, config):
    CyclePlanner(_open_database(config)).delete_tactic(args.tactic_id)
    print(f"Deleted tactic {args.tactic_id}.")


# ---------------------------------------------------------------------------
#  Tracking and scoring
# ---------------------------------------------------------------------------

def cmd_check(args, config):
    """Set or clear one day of a tactic."""
    db = _open_database(config)
    cycle = _resolve_cycle(CyclePlanner(db), args.cycle)
    week = _resolve_week(cycle, args.week)
    CompletionLedger(db).set_day(cycle.id, week, args.tactic_id, args.day, not args.undo)
    state = "not done" if args.undo else "done"
    print(f"Tactic {args.tactic_id}: {DAY_LABELS[args.day]} of week {week} marked {state}.")


def cmd_today(args, config):
    """Show today's checklist, optionally toggling one tactic first."""
    db = _open_database(config)
    cycle = _resolve_cycle(CyclePlanner(db), args.cycle)
    current = week_number(cycle.start_date)
    if week_status(current) != "in_progress":
        print("The cycle is not in progress; nothing to check today.")
        return
    ledger = CompletionLedger(db)
    day = today_key()
    if args.toggle is not None:
        ledger.toggle_day(cycle.id, current, args.toggle, day)
    checklist = ledger.today_checklist(cycle.id, current, day)

    if args.output_json:
        _print_json(checklist.model_dump(mode="json"))
        return

    print(f"Today -- {DAY_LABELS[day]} (week {current})  {checklist.done_count}/{checklist.total}")
    for item in checklist.items:
        mark = "x" if item.done_on(day) else " "
        print(f"  [{mark}] {item.tactic_id:>3}  {item.tactic_title}")


def cmd_scorecard(args, config):
    """Show one week's scorecard."""
    db = _open_database(config)
    cycle = _resolve_cycle(CyclePlanner(db), args.cycle)
    week = _resolve_week(cycle, args.week)
    lines = CompletionLedger(db).get_week(cycle.id, week)
    summary = ScoringEngine(db).week_score(cycle.id, week)

    if args.output_json:
        _print_json({
            "week": summary.model_dump(),
            "tactics": [
                {**line.model_dump(), "days_done": line.days_done, "target_met": line.target_met}
                for line in lines
            ],
        })
        return

    print(f"{cycle.title} -- week {week}")
    print("    " + " ".join(f"{DAY_LABELS[d]:>3}" for d in DAY_KEYS) + "   done")
    current_goal = None
    for line in lines:
        if line.goal_id != current_goal:
            current_goal = line.goal_id
            print(f"{line.goal_title}")
        marks = " ".join(f"{'x' if flag else '.':>3}" for flag in line.days)
        met = " ok" if line.target_met else ""
        print(f"    {marks}   {line.days_done}/{line.weekly_target}{met}  [{line.tactic_id}] {line.tactic_title}")
    print(
        f"Score: {summary.score}% ({score_band(summary.score).value}), "
        f"{summary.completed_tactics}/{summary.total_tactics} tactics on target"
    )


def cmd_score(args, config):
    """Show the 12 week scores and goal progress."""
    db = _open_database(config)
    cycle = _resolve_cycle(CyclePlanner(db), args.cycle)
    engine = ScoringEngine(db)
    week_scores = engine.cycle_week_scores(cycle.id)
    goals = engine.goal_progress(cycle.id, args.week)

    if args.output_json:
        _print_json({
            "weeks": [w.model_dump() for w in week_scores],
            "goals": [g.model_dump() for g in goals],
        })
        return

    for summary in week_scores:
        if summary.total_tactics == 0:
            continue
        print(f"  W{summary.week_number:<2} {summary.score:>3}%  "
              f"{summary.completed_tactics}/{summary.total_tactics}")
    span = f"week {args.week}" if args.week is not None else "cycle"
    print(f"Goal progress ({span}):")
    for goal in goals:
        print(f"  {goal.score:>3}%  {goal.goal_title}  "
              f"({goal.completed_tactics}/{goal.total_tactics} tactics on target)")


def cmd_dashboard(args, config):
    """Show the dashboard of a cycle."""
    db = _open_database(config)
    cycle = _resolve_cycle(CyclePlanner(db), args.cycle)
    dashboard = ScoringEngine(db).dashboard(cycle)

    if args.output_json:
        _print_json(dashboard.model_dump(mode="json"))
        return

    print(f"{cycle.title}  ({cycle.start_date} to {cycle.end_date})")
    status = week_status(dashboard.current_week)
    if status == "in_progress":
        print(f"Week {dashboard.current_week} of 12")
    elif status == "not_started":
        print("Not started yet")
    else:
        print("Cycle complete")
    if dashboard.overall_score > 0:
        print(f"Overall score: {dashboard.overall_score}% ({dashboard.overall_band.value})")
    else:
        print("Overall score: --")
    if dashboard.current_score is not None:
        trend = f" trend {dashboard.trend}" if dashboard.trend else ""
        print(f"This week: {dashboard.current_score.score}%{trend}, "
              f"{dashboard.uncompleted_tactics} tactic(s) below target")
    for goal in dashboard.goal_progress:
        print(f"  {goal.score:>3}%  {goal.goal_title}")


# ---------------------------------------------------------------------------
#  Reviews and backups
# ---------------------------------------------------------------------------

def cmd_review_set(args, config):
    planner = CyclePlanner(_open_database(config))
    cycle = _resolve_cycle(planner, args.cycle)
    planner.save_review(cycle.id, args.week, args.wins, args.improvements, args.insights)
    print(f"Saved review for week {args.week}.")


def cmd_review_show(args, config):
    planner = CyclePlanner(_open_database(config))
    cycle = _resolve_cycle(planner, args.cycle)
    reviews = (
        [r for r in [planner.get_review(cycle.id, args.week)] if r is not None]
        if args.week is not None else planner.list_reviews(cycle.id)
    )
    if args.output_json:
        _print_json([r.model_dump(mode="json") for r in reviews])
        return
    if not reviews:
        print("No reviews yet.")
    for review in reviews:
        print(f"Week {review.week_number}")
        print(f"  Wins: {review.wins}")
        print(f"  Improvements: {review.improvements}")
        print(f"  Insights: {review.insights}")


def cmd_export(args, config):
    from twelve_week_year.backup import export_to_file

    path = export_to_file(_open_database(config), args.output_dir or config.backup_dir)
    print(f"Exported database to {path}")


def cmd_import(args, config):
    from twelve_week_year.backup import import_from_file

    import_from_file(_open_database(config), args.path)
    print(f"Imported {args.path}. All previous data was replaced.")


def _add_cycle_option(parser):
    parser.add_argument("--cycle", type=int, default=None,
                        help="Cycle ID (default: the active cycle)")


def _add_json_option(parser):
    parser.add_argument("--output-json", action="store_true", default=False,
                        help="Output result as JSON")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twelve-week",
        description="12 Week Year Tracker -- plan, track and score your execution",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sub = subparsers.add_parser("init", help="Create the database")
    sub.set_defaults(func=cmd_init)

    sub = subparsers.add_parser("seed", help="Insert demo data into an empty database")
    sub.set_defaults(func=cmd_seed)

    # cycle
    sub_cycle = subparsers.add_parser("cycle", help="Manage cycles")
    cycle_sub = sub_cycle.add_subparsers(dest="cycle_command")
    sub = cycle_sub.add_parser("create", help="Create a cycle (becomes active)")
    sub.add_argument("title")
    sub.add_argument("start_date", help="First day, e.g. 2026-01-05")
    sub.add_argument("--vision", default="")
    sub.add_argument("--inactive", action="store_true", default=False,
                     help="Do not make the new cycle active")
    sub.set_defaults(func=cmd_cycle_create)
    sub = cycle_sub.add_parser("list", help="List cycles")
    _add_json_option(sub)
    sub.set_defaults(func=cmd_cycle_list)
    sub = cycle_sub.add_parser("activate", help="Make a cycle active")
    sub.add_argument("cycle_id", type=int)
    sub.set_defaults(func=cmd_cycle_activate)
    sub = cycle_sub.add_parser("delete", help="Delete a cycle and all its data")
    sub.add_argument("cycle_id", type=int)
    sub.set_defaults(func=cmd_cycle_delete)

    # goal
    sub_goal = subparsers.add_parser("goal", help="Manage goals")
    goal_sub = sub_goal.add_subparsers(dest="goal_command")
    sub = goal_sub.add_parser("add", help="Add a goal")
    sub.add_argument("title")
    sub.add_argument("--description", default="")
    _add_cycle_option(sub)
    sub.set_defaults(func=cmd_goal_add)
    sub = goal_sub.add_parser("list", help="List goals and tactics")
    _add_cycle_option(sub)
    _add_json_option(sub)
    sub.set_defaults(func=cmd_goal_list)
    sub = goal_sub.add_parser("delete", help="Delete a goal and its tactics")
    sub.add_argument("goal_id", type=int)
    sub.set_defaults(func=cmd_goal_delete)

    # tactic
    sub_tactic = subparsers.add_parser("tactic", help="Manage tactics")
    tactic_sub = sub_tactic.add_subparsers(dest="tactic_command")
    sub = tactic_sub.add_parser("add", help="Add a tactic to a goal")
    sub.add_argument("goal_id", type=int)
    sub.add_argument("title")
    sub.add_argument("--target", type=int, default=7, help="Days per week (1-7)")
    sub.set_defaults(func=cmd_tactic_add)
    sub = tactic_sub.add_parser("delete", help="Delete a tactic")
    sub.add_argument("tactic_id", type=int)
    sub.set_defaults(func=cmd_tactic_delete)

    # check
    sub = subparsers.add_parser("check", help="Mark a tactic done on a day")
    sub.add_argument("tactic_id", type=int)
    sub.add_argument("day", choices=DAY_KEYS)
    sub.add_argument("--week", type=int, default=None,
                     help="Week 1-12 (default: current week)")
    sub.add_argument("--undo", action="store_true", default=False,
                     help="Mark as not done")
    _add_cycle_option(sub)
    sub.set_defaults(func=cmd_check)

    sub = subparsers.add_parser("today", help="Show today's checklist")
    sub.add_argument("--toggle", type=int, default=None, metavar="TACTIC_ID",
                     help="Flip today's state of a tactic first")
    _add_cycle_option(sub)
    _add_json_option(sub)
    sub.set_defaults(func=cmd_today)

    # scorecard / score / dashboard
    sub = subparsers.add_parser("scorecard", help="Show a week's scorecard")
    sub.add_argument("--week", type=int, default=None)
    _add_cycle_option(sub)
    _add_json_option(sub)
    sub.set_defaults(func=cmd_scorecard)

    sub = subparsers.add_parser("score", help="Show week scores and goal progress")
    sub.add_argument("--week", type=int, default=None,
                     help="Restrict goal progress to one week")
    _add_cycle_option(sub)
    _add_json_option(sub)
    sub.set_defaults(func=cmd_score)

    sub = subparsers.add_parser("dashboard", help="Show the cycle dashboard")
    _add_cycle_option(sub)
    _add_json_option(sub)
    sub.set_defaults(func=cmd_dashboard)

    # review
    sub_review = subparsers.add_parser("review", help="Weekly reviews")
    review_sub = sub_review.add_subparsers(dest="review_command")
    sub = review_sub.add_parser("set", help="Save a weekly review")
    sub.add_argument("week", type=int)
    sub.add_argument("--wins", default="")
    sub.add_argument("--improvements", default="")
    sub.add_argument("--insights", default="")
    _add_cycle_option(sub)
    sub.set_defaults(func=cmd_review_set)
    sub = review_sub.add_parser("show", help="Show weekly reviews")
    sub.add_argument("week", type=int, nargs="?", default=None)
    _add_cycle_option(sub)
    _add_json_option(sub)
    sub.set_defaults(func=cmd_review_show)

    # backups
    sub = subparsers.add_parser("export", help="Export the database to a backup file")
    sub.add_argument("--output-dir", default=None)
    sub.set_defaults(func=cmd_export)
    sub = subparsers.add_parser("import", help="Replace the database with a backup file")
    sub.add_argument("path")
    sub.set_defaults(func=cmd_import)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None or not hasattr(args, "func"):
        parser.print_help()
        sys.exit(0)

    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args, config)
    except (TrackerError, ValueError, sqlite3.IntegrityError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
