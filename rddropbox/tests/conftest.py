"""
Pytest configuration and shared fakes for the rd-dropbox test suite.

The engine takes its store, inventory and launcher by constructor, so tests
hand it the in-memory fakes below instead of touching the real process table.
"""

from pathlib import Path

import pytest

from rddropbox.app.config import RunConfig
from rddropbox.app.dropboxes.models import DropboxRecord
from rddropbox.app.persistence.errors import DropboxStoreError
from rddropbox.app.processes.errors import InventoryUnavailableError
from rddropbox.app.processes.models import ProcessInfo, ProcessSnapshot


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "e2e: marks tests as end-to-end (full engine run on a real filesystem)"
    )


# -----------------------------------------------------------------------------
# Process helpers
# -----------------------------------------------------------------------------

def worker(pid: int, path: str, name: str = "rdimport") -> ProcessInfo:
    """An rdimport process started the way rdcatchd starts it."""
    return ProcessInfo(
        pid=pid,
        name=name,
        cmdline=(
            name,
            f"--persistent-dropbox-id={pid}",
            "--drop-box",
            "--log-filename=/var/log/rivendell/import.log",
            "MUSIC",
            path,
        ),
    )


def supervisor(pid: int, name: str = "rdcatchd") -> ProcessInfo:
    return ProcessInfo(pid=pid, name=name, cmdline=(f"/usr/bin/{name}",))


class FakeInventory:
    """
    Process table held in a list.

    terminate() removes the process, so later snapshots no longer show it.
    """

    def __init__(self, processes=None, unkillable=(), fail=False):
        self.processes = list(processes or [])
        self.unkillable = set(unkillable)
        self.fail = fail
        self.terminated = []
        self.snapshot_count = 0

    def snapshot(self) -> ProcessSnapshot:
        if self.fail:
            raise InventoryUnavailableError("process table unavailable")
        self.snapshot_count += 1
        return ProcessSnapshot(processes=tuple(self.processes))

    def terminate(self, pid: int) -> bool:
        if pid in self.unkillable:
            return False
        self.terminated.append(pid)
        self.processes = [p for p in self.processes if p.pid != pid]
        return True


class FakeLauncher:
    def __init__(self, path="/usr/bin/rdcatchd", succeed=True):
        self.path = path
        self.succeed = succeed
        self.located = []
        self.launched = []

    def locate(self, name):
        self.located.append(name)
        return self.path

    def launch(self, path):
        self.launched.append(path)
        return self.succeed


class FakeStore:
    def __init__(self, records=None, fail=False):
        self.records = list(records or [])
        self.fail = fail

    def ping(self):
        if self.fail:
            raise DropboxStoreError("database unreachable")

    def count_dropboxes(self, station_name):
        return len(self.records)

    def list_dropboxes(self, station_name):
        return list(self.records)


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def run_config() -> RunConfig:
    return RunConfig(station_name="studio-a")


@pytest.fixture
def make_dropbox(tmp_path: Path):
    """
    Factory for a healthy dropbox on disk.

    Creates <tmp>/<name>/ and <tmp>/logs/<name>.log and returns the record
    whose path spec is "<tmp>/<name>/<pattern>".
    """
    def _make(dropbox_id: int, name: str = None, pattern: str = "*.wav") -> DropboxRecord:
        name = name or f"drop{dropbox_id}"
        directory = tmp_path / name
        directory.mkdir(exist_ok=True)

        log_dir = tmp_path / "logs"
        log_dir.mkdir(exist_ok=True)
        log_file = log_dir / f"{name}.log"
        log_file.touch()

        return DropboxRecord(
            id=dropbox_id,
            path=f"{directory}/{pattern}",
            log_path=str(log_file),
        )

    return _make
