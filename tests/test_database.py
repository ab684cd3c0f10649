"""Tests for the store handle, schema and snapshot backups."""

import sqlite3
from datetime import date

import pytest

from twelve_week_year.backup import backup_filename, export_to_file, import_from_file
from twelve_week_year.errors import ImportValidationError, StoreUnavailableError
from twelve_week_year.models.database import Database
from twelve_week_year.models.schema import REQUIRED_TABLES, get_table_names
from twelve_week_year.tracking.ledger import CompletionLedger
from twelve_week_year.tracking.planner import CyclePlanner
from conftest import mark_days


class TestLifecycle:
    def test_initialize_creates_tables(self, db):
        tables = get_table_names(db.db_path)
        for name in REQUIRED_TABLES:
            assert name in tables

    def test_initialize_is_idempotent(self, db, planner):
        planner.create_cycle("Q1", date(2026, 1, 5))
        db.initialize()
        assert len(planner.list_cycles()) == 1

    def test_closed_handle_raises(self, db):
        db.close()
        assert db.is_closed
        with pytest.raises(StoreUnavailableError):
            with db.get_connection():
                pass

    def test_unusable_path(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        with pytest.raises(StoreUnavailableError):
            Database(blocker / "tracker.db").initialize()

    def test_handles_are_independent(self, tmp_path):
        first = Database(tmp_path / "a.db")
        second = Database(tmp_path / "b.db")
        first.initialize()
        second.initialize()
        CyclePlanner(first).create_cycle("Only here", date(2026, 1, 5))
        assert CyclePlanner(second).list_cycles() == []

    def test_writes_survive_reopen(self, db, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Workout"]
        ledger.set_day(cycle.id, 1, tactic.id, "mon", True)

        reopened = Database(db.db_path)
        reopened.initialize()
        assert CompletionLedger(reopened).get_entry(cycle.id, 1, tactic.id).mon is True

    def test_duplicate_key_rejected_by_schema(self, db, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Workout"]
        with db.get_connection() as conn:
            conn.execute(
                "INSERT INTO weekly_scores (cycle_id, week_number, tactic_id) VALUES (?, ?, ?)",
                (cycle.id, 1, tactic.id),
            )
        with pytest.raises(sqlite3.IntegrityError):
            with db.get_connection() as conn:
                conn.execute(
                    "INSERT INTO weekly_scores (cycle_id, week_number, tactic_id) VALUES (?, ?, ?)",
                    (cycle.id, 1, tactic.id),
                )

    def test_sum_days_done(self, db, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Steps"]
        mark_days(ledger, cycle.id, 1, tactic.id, ["mon", "tue"])
        mark_days(ledger, cycle.id, 3, tactic.id, ["sun"])
        with db.get_connection() as conn:
            assert db.sum_days_done(conn, cycle.id, tactic.id) == 3
            assert db.sum_days_done(conn, cycle.id, tactic.id, 1) == 2
            assert db.sum_days_done(conn, cycle.id, tactic.id, 2) == 0


class TestSnapshots:
    def test_round_trip(self, tmp_path, db, ledger, sample_cycle):
        cycle = sample_cycle["cycle"]
        tactic = sample_cycle["tactics"]["Code"]
        mark_days(ledger, cycle.id, 1, tactic.id, ["mon", "wed"])
        snapshot = db.export_snapshot()

        target = Database(tmp_path / "restored.db")
        target.initialize()
        CyclePlanner(target).create_cycle("To be replaced", date(2025, 1, 6))
        target.import_snapshot(snapshot)

        cycles = CyclePlanner(target).list_cycles()
        assert [c.title for c in cycles] == ["Q1 Sprint"]
        assert CompletionLedger(target).get_entry(cycle.id, 1, tactic.id).days_done == 2

    def test_garbage_rejected_and_state_kept(self, db, planner, sample_cycle):
        with pytest.raises(ImportValidationError):
            db.import_snapshot(b"this is not a database" * 10)
        assert len(planner.list_cycles()) == 1

    def test_foreign_database_rejected(self, tmp_path, db, planner, sample_cycle):
        other = tmp_path / "other.db"
        conn = sqlite3.connect(str(other))
        conn.execute("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)")
        conn.commit()
        conn.close()

        with pytest.raises(ImportValidationError, match="missing expected tables"):
            db.import_snapshot(other.read_bytes())
        assert planner.get_cycle(sample_cycle["cycle"].id) is not None


class TestBackupFiles:
    def test_filename(self):
        assert backup_filename(date(2026, 2, 3)) == "12-week-year-backup-2026-02-03.db"

    def test_export_and_import(self, tmp_path, db, planner, sample_cycle):
        path = export_to_file(db, tmp_path / "backups", day=date(2026, 2, 3))
        assert path.name == "12-week-year-backup-2026-02-03.db"
        assert path.exists()

        planner.delete_cycle(sample_cycle["cycle"].id)
        assert planner.list_cycles() == []

        import_from_file(db, path)
        assert [c.title for c in planner.list_cycles()] == ["Q1 Sprint"]

    def test_missing_file(self, tmp_path, db):
        with pytest.raises(ImportValidationError):
            import_from_file(db, tmp_path / "nope.db")
