"""Smoke tests for the command-line interface (cli.py)."""

import json
from datetime import date, timedelta

import pytest

from twelve_week_year.cli import build_parser, main


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the CLI at a throwaway database and backup directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TWELVE_WEEK_DB_PATH", str(tmp_path / "db" / "cli.db"))
    monkeypatch.setenv("TWELVE_WEEK_BACKUP_DIR", str(tmp_path / "backups"))
    monkeypatch.delenv("TWELVE_WEEK_SEED_DEMO_DATA", raising=False)
    monkeypatch.delenv("TWELVE_WEEK_LOG_LEVEL", raising=False)
    return tmp_path


def run(capsys, *argv):
    main(list(argv))
    return capsys.readouterr().out


@pytest.fixture
def running_cycle(cli_env, capsys):
    """A cycle that started three days ago with one goal and one tactic."""
    start = (date.today() - timedelta(days=3)).isoformat()
    run(capsys, "cycle", "create", "Now", start)
    run(capsys, "goal", "add", "Health")
    run(capsys, "tactic", "add", "1", "Walk", "--target", "3")
    return start


class TestParser:
    def test_check_rejects_bad_day(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["check", "1", "someday"])

    def test_no_command_prints_help(self, cli_env, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 0
        assert "twelve-week" in capsys.readouterr().out


class TestCommands:
    def test_init(self, cli_env, capsys):
        out = run(capsys, "init")
        assert "Database ready" in out
        assert (cli_env / "db" / "cli.db").exists()

    def test_plan_and_list(self, running_cycle, capsys):
        cycles = json.loads(run(capsys, "cycle", "list", "--output-json"))
        assert cycles[0]["title"] == "Now"
        assert cycles[0]["is_active"] is True

        goals = json.loads(run(capsys, "goal", "list", "--output-json"))
        assert goals[0]["title"] == "Health"
        assert goals[0]["tactics"][0]["weekly_target"] == 3

    def test_check_and_scorecard(self, running_cycle, capsys):
        run(capsys, "check", "1", "mon", "--week", "1")
        run(capsys, "check", "1", "tue", "--week", "1")
        data = json.loads(run(capsys, "scorecard", "--week", "1", "--output-json"))
        assert data["week"]["score"] == 67
        assert data["tactics"][0]["days_done"] == 2
        assert data["tactics"][0]["target_met"] is False

        run(capsys, "check", "1", "tue", "--week", "1", "--undo")
        data = json.loads(run(capsys, "scorecard", "--week", "1", "--output-json"))
        assert data["week"]["score"] == 33

    def test_today_toggle(self, running_cycle, capsys):
        data = json.loads(run(capsys, "today", "--toggle", "1", "--output-json"))
        assert data["done_count"] == 1
        assert data["progress"] == 100

    def test_score_and_dashboard(self, running_cycle, capsys):
        run(capsys, "check", "1", "sun", "--week", "1")
        scores = json.loads(run(capsys, "score", "--output-json"))
        assert len(scores["weeks"]) == 12
        assert scores["goals"][0]["goal_title"] == "Health"

        dashboard = json.loads(run(capsys, "dashboard", "--output-json"))
        assert dashboard["current_week"] == 1
        assert dashboard["overall_score"] == 33
        assert dashboard["overall_band"] == "critical"

    def test_reviews(self, running_cycle, capsys):
        run(capsys, "review", "set", "1", "--wins", "Walked")
        reviews = json.loads(run(capsys, "review", "show", "--output-json"))
        assert reviews[0]["wins"] == "Walked"

    def test_export_import(self, running_cycle, capsys, cli_env):
        out = run(capsys, "export")
        assert "Exported database" in out
        backups = list((cli_env / "backups").glob("12-week-year-backup-*.db"))
        assert len(backups) == 1

        run(capsys, "cycle", "delete", "1")
        assert json.loads(run(capsys, "cycle", "list", "--output-json")) == []

        run(capsys, "import", str(backups[0]))
        assert len(json.loads(run(capsys, "cycle", "list", "--output-json"))) == 1


class TestErrors:
    def test_no_active_cycle(self, cli_env, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["scorecard"])
        assert exc.value.code == 1
        assert "No active cycle" in capsys.readouterr().out

    def test_invalid_target(self, running_cycle, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["tactic", "add", "1", "Too much", "--target", "9"])
        assert exc.value.code == 1
        assert "ERROR" in capsys.readouterr().out

    @pytest.mark.parametrize("argv", [
        ["scorecard", "--week", "0"],
        ["score", "--week", "0"],
        ["check", "1", "mon", "--week", "0"],
        ["scorecard", "--week", "13"],
    ])
    def test_week_out_of_range(self, running_cycle, capsys, argv):
        with pytest.raises(SystemExit) as exc:
            main(argv)
        assert exc.value.code == 1
        assert "week must be between 1 and 12" in capsys.readouterr().out

    def test_bad_import(self, cli_env, capsys):
        bogus = cli_env / "bogus.db"
        bogus.write_bytes(b"nope" * 100)
        with pytest.raises(SystemExit) as exc:
            main(["import", str(bogus)])
        assert exc.value.code == 1
        assert "Invalid database file" in capsys.readouterr().out
