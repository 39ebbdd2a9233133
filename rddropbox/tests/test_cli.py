"""
Tests for the rd-dropbox command line entrypoint.

The database is a SQLite file given with --db-url; the process table and the
supervisor launcher are replaced with in-memory fakes.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, insert

from rddropbox import __version__
from rddropbox.app.persistence.store import dropboxes, metadata
from rddropbox.cli import EXIT_CONFIG, EXIT_ERRORS, EXIT_FATAL, EXIT_OK, main

from conftest import FakeInventory, FakeLauncher


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    url = f"sqlite:///{tmp_path / 'rivendell.db'}"
    metadata.create_all(create_engine(url))
    return url


@pytest.fixture
def fakes():
    inventory = FakeInventory()
    launcher = FakeLauncher()
    with patch("rddropbox.cli.ProcessInventory", return_value=inventory), \
            patch("rddropbox.cli.SupervisorLauncher", return_value=launcher), \
            patch("rddropbox.cli.configure_logging"), \
            patch("time.sleep"):
        yield inventory, launcher


def _run(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


def _base_args(db_url, tmp_path):
    return ["--db-url", db_url, "--station", "studio-a", "-m", str(tmp_path / "absent.cnf")]


class TestCliExitCodes:
    """Tests for exit status."""

    def test_version(self, capsys):
        assert _run(["--version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_clean_run_exits_zero(self, db_url, tmp_path, fakes):
        assert _run(_base_args(db_url, tmp_path)) == EXIT_OK

    def test_counted_errors_exit_one(self, db_url, tmp_path, fakes):
        with create_engine(db_url).begin() as conn:
            conn.execute(insert(dropboxes), [
                {"ID": 1, "STATION_NAME": "studio-a", "PATH": None, "LOG_PATH": None},
            ])

        assert _run(_base_args(db_url, tmp_path)) == EXIT_ERRORS

    def test_missing_table_is_fatal(self, tmp_path, fakes):
        url = f"sqlite:///{tmp_path / 'empty.db'}"
        assert _run(_base_args(url, tmp_path)) == EXIT_FATAL

    def test_process_table_failure_is_fatal(self, db_url, tmp_path, fakes):
        inventory, _ = fakes
        inventory.fail = True
        assert _run(_base_args(db_url, tmp_path)) == EXIT_FATAL

    def test_missing_supervisor_is_fatal(self, db_url, tmp_path, fakes):
        _, launcher = fakes
        launcher.path = None
        with create_engine(db_url).begin() as conn:
            conn.execute(insert(dropboxes), [{
                "ID": 1,
                "STATION_NAME": "studio-a",
                "PATH": f"{tmp_path}/drop/*.wav",
                "LOG_PATH": str(tmp_path / "drop.log"),
            }])
        (tmp_path / "drop.log").touch()

        assert _run(_base_args(db_url, tmp_path)) == EXIT_FATAL

    def test_bad_option_file_is_config_error(self, db_url, tmp_path, fakes):
        mycnf = tmp_path / "broken.cnf"
        mycnf.write_text("password = no section header\n")

        assert _run(["--db-url", db_url, "-m", str(mycnf)]) == EXIT_CONFIG

    def test_bad_database_url_is_config_error(self, tmp_path, fakes):
        assert _run(["--db-url", "nosuchdb://x/y", "-m", str(tmp_path / "absent.cnf")]) == EXIT_CONFIG


class TestCliOutput:
    """Tests for --json output."""

    def test_json_report(self, db_url, tmp_path, fakes, capsys):
        assert _run(_base_args(db_url, tmp_path) + ["--json"]) == EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert data["station"] == "studio-a"
        assert data["state"] == "done"
        assert data["summary"]["errors"] == 0
