"""Tests for the completion ledger (tracking/ledger.py)."""

import pytest

from twelve_week_year.models.entities import DayKey
from conftest import mark_days


class TestSetDay:
    def test_creates_row_on_first_toggle(self, db, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Workout"]
        assert ledger.get_entry(cycle.id, 1, tactic.id) is None

        ledger.set_day(cycle.id, 1, tactic.id, "mon", True)

        entry = ledger.get_entry(cycle.id, 1, tactic.id)
        assert entry is not None
        assert entry.mon is True
        assert entry.days == [False, True, False, False, False, False, False]

    def test_idempotent(self, db, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Workout"]
        ledger.set_day(cycle.id, 1, tactic.id, "tue", True)
        ledger.set_day(cycle.id, 1, tactic.id, "tue", True)

        assert ledger.get_entry(cycle.id, 1, tactic.id).days_done == 1
        with db.get_connection() as conn:
            assert db.count_completion_rows(conn, cycle.id) == 1

    def test_one_row_per_key(self, db, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Steps"]
        mark_days(ledger, cycle.id, 2, tactic.id, ["sun", "mon", "sat"])
        ledger.set_day(cycle.id, 2, tactic.id, "mon", False)

        with db.get_connection() as conn:
            assert db.count_completion_rows(conn, cycle.id) == 1
        entry = ledger.get_entry(cycle.id, 2, tactic.id)
        assert entry.sun and entry.sat and not entry.mon

    def test_clearing_keeps_row(self, db, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Code"]
        ledger.set_day(cycle.id, 1, tactic.id, "wed", True)
        ledger.set_day(cycle.id, 1, tactic.id, "wed", False)
        entry = ledger.get_entry(cycle.id, 1, tactic.id)
        assert entry is not None
        assert entry.days_done == 0

    def test_weeks_are_independent(self, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Code"]
        ledger.set_day(cycle.id, 1, tactic.id, "fri", True)
        assert ledger.get_entry(cycle.id, 2, tactic.id) is None

    def test_unknown_day_is_ignored(self, db, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Workout"]
        ledger.set_day(cycle.id, 1, tactic.id, "funday", True)
        ledger.set_day(cycle.id, 1, tactic.id, "MON", True)

        with db.get_connection() as conn:
            assert db.count_completion_rows(conn) == 0

    def test_accepts_day_enum(self, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Workout"]
        ledger.set_day(cycle.id, 1, tactic.id, DayKey.THU, True)
        assert ledger.get_entry(cycle.id, 1, tactic.id).thu is True

    @pytest.mark.parametrize("week", [0, 13, -1])
    def test_week_out_of_range(self, ledger, sample_cycle, week):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Workout"]
        with pytest.raises(ValueError):
            ledger.set_day(cycle.id, week, tactic.id, "mon", True)


class TestToggleDay:
    def test_toggle_flips(self, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Steps"]
        assert ledger.toggle_day(cycle.id, 3, tactic.id, "sun") is True
        assert ledger.get_entry(cycle.id, 3, tactic.id).sun is True
        assert ledger.toggle_day(cycle.id, 3, tactic.id, "sun") is False
        assert ledger.get_entry(cycle.id, 3, tactic.id).sun is False

    def test_toggle_unknown_day(self, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Steps"]
        assert ledger.toggle_day(cycle.id, 3, tactic.id, "xyz") is None
        assert ledger.get_entry(cycle.id, 3, tactic.id) is None


class TestGetWeek:
    def test_every_tactic_once_in_order(self, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        lines = ledger.get_week(cycle.id, 1)
        assert [line.tactic_title for line in lines] == ["Workout", "Steps", "Code"]
        assert [line.goal_title for line in lines] == ["Fitness", "Fitness", "Project"]
        assert all(line.days_done == 0 for line in lines)

    def test_missing_rows_are_all_false(self, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactics = sample_cycle["tactics"]
        mark_days(ledger, cycle.id, 1, tactics["Steps"].id, ["mon", "tue"])

        lines = {line.tactic_title: line for line in ledger.get_week(cycle.id, 1)}
        assert lines["Steps"].days_done == 2
        assert lines["Workout"].days == [False] * 7
        assert lines["Code"].days == [False] * 7

    def test_target_met(self, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        code = sample_cycle["tactics"]["Code"]
        mark_days(ledger, cycle.id, 4, code.id, ["mon", "wed", "fri"])
        lines = {line.tactic_title: line for line in ledger.get_week(cycle.id, 4)}
        assert lines["Code"].target_met
        assert not lines["Workout"].target_met

    def test_unknown_cycle_is_empty(self, ledger):
        assert ledger.get_week(12345, 1) == []

    def test_sort_order_follows_updates(self, planner, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        goals = sample_cycle["goals"]
        planner.update_goal(goals["Project"].id, sort_order=-1)
        lines = ledger.get_week(cycle.id, 1)
        assert lines[0].tactic_title == "Code"


class TestTodayChecklist:
    def test_progress(self, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactics = sample_cycle["tactics"]
        ledger.set_day(cycle.id, 1, tactics["Workout"].id, "mon", True)
        ledger.set_day(cycle.id, 1, tactics["Code"].id, "tue", True)

        checklist = ledger.today_checklist(cycle.id, 1, "mon")
        assert checklist.day == DayKey.MON
        assert checklist.total == 3
        assert checklist.done_count == 1
        assert checklist.progress == 33

    def test_progress_rounds_half_up(self, planner, ledger):
        cycle = planner.create_cycle("Eight", "2026-01-05")
        goal = planner.add_goal(cycle.id, "Many")
        tactics = [planner.add_tactic(goal.id, f"T{i}") for i in range(8)]
        ledger.set_day(cycle.id, 1, tactics[0].id, "fri", True)

        # 1 of 8 is 12.5%
        assert ledger.today_checklist(cycle.id, 1, "fri").progress == 13

    def test_empty_cycle(self, planner, ledger):
        cycle = planner.create_cycle("Empty", "2026-01-05")
        checklist = ledger.today_checklist(cycle.id, 1, "sun")
        assert checklist.total == 0
        assert checklist.progress == 0

    def test_invalid_day(self, ledger, sample_cycle):
        with pytest.raises(ValueError):
            ledger.today_checklist(sample_cycle["cycle"].id, 1, "someday")
