"""
Reconciliation engine: one pass over the station's dropboxes.

Coordinates loading, validation, correlation and, when a dropbox has no
worker, the restart of the worker supervisor.

This is the main entry point for a reconciliation run.
"""

import logging
import time
from typing import Callable, Optional, TYPE_CHECKING

from ..config import RunConfig
from ..processes.errors import SupervisorNotFoundError
from ..processes.models import ProcessSnapshot
from .correlation import ProcessCorrelator
from .models import DropboxRecord
from .registry import DropboxRegistry
from .report import RunReport, SupervisorOutcome
from .state import RunState, validate_transition
from .validation import PathValidator

if TYPE_CHECKING:
    from ..persistence.store import DropboxStore
    from ..processes.inventory import ProcessInventory
    from ..processes.launcher import SupervisorLauncher

logger = logging.getLogger(__name__)

# Pause after stopping the supervisor so a service manager can restart it.
SUPERVISOR_SETTLE_SECONDS = 4.0


class RemediationEngine:
    """
    Dropbox reconciliation engine.

    Coordinates:
    1. Loading the station's dropboxes (via DropboxStore)
    2. Path validation and repair (via PathValidator)
    3. Worker correlation (via ProcessCorrelator)
    4. Supervisor restart when any dropbox lacks a worker

    Failure handling:
    - Store and process-table failures are fatal and propagate
    - A missing supervisor executable is fatal when a relaunch is needed
    - Everything else is counted in the report and the run continues
    """

    def __init__(
        self,
        config: RunConfig,
        store: "DropboxStore",
        inventory: "ProcessInventory",
        launcher: "SupervisorLauncher",
        validator: Optional[PathValidator] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize reconciliation engine.

        Args:
            config: Run configuration
            store: Source of dropbox definitions
            inventory: Process table access
            launcher: Supervisor lookup and launch
            validator: Optional PathValidator (defaults to a standard one)
            sleep: Optional pause function for the settle interval (defaults to time.sleep)
        """
        self.config = config
        self.store = store
        self.inventory = inventory
        self.launcher = launcher
        self.validator = validator or PathValidator()
        self.correlator = ProcessCorrelator(config)
        self._sleep = sleep or time.sleep

        self.registry = DropboxRegistry()
        self.report = RunReport(station_name=config.station_name)

    def run(self) -> RunReport:
        """
        Execute one reconciliation pass.

        Returns:
            RunReport; report.succeeded is False if any error was counted

        Raises:
            DropboxStoreError: If the dropbox list cannot be fetched
            InventoryUnavailableError: If the process table cannot be read
            SupervisorNotFoundError: If a relaunch is needed and the
                supervisor executable is not on $PATH
        """
        self._enter(RunState.LOAD)
        self.load()

        self._enter(RunState.VALIDATE)
        self.validate()

        self._enter(RunState.CORRELATE)
        matched_pids = self.correlate(self.inventory.snapshot())

        if len(matched_pids) == len(self.registry):
            self._enter(RunState.FULLY_MATCHED)
            logger.info(
                "All available dropboxes are running. "
                "Note any invalid path specs or log path specs above."
            )
        else:
            self._enter(RunState.NEEDS_REMEDIATION)
            logger.warning(
                f"Missing {len(self.registry) - len(matched_pids)} of {len(self.registry)} "
                f"{self.config.worker_name} processes, restarting {self.config.supervisor_name}"
            )
            self.remediate(matched_pids)

        self._enter(RunState.DONE)
        logger.debug(f"Run finished with {self.report.error_count} errors")
        return self.report

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def load(self) -> None:
        station = self.config.station_name
        logger.info(f"Our station name: {station}")

        self.store.ping()
        logger.debug(f"Store reports {self.store.count_dropboxes(station)} dropboxes")

        records = self.store.list_dropboxes(station)
        self.registry = DropboxRegistry(records)
        self.report.loaded_ids = [r.id for r in records]
        self._dump_registry("loaded")

    def validate(self) -> None:
        """
        Validate every record, dropping those that cannot work.

        Each record is visited exactly once.
        """
        dropped = self.registry.retain(self._validate_record)
        self.report.dropped_ids = [r.id for r in dropped]
        self._dump_registry("validated")

    def _validate_record(self, record: DropboxRecord) -> bool:
        logger.debug(f"Looking at dropbox ID {record.id}: {record.model_dump()}")

        if not self.validator.check_and_heal(record.directory, record.id):
            self._count_error()
            return False

        if not self.validator.check_pattern(record.pattern, record.id):
            # The worker runs in spite of a bogus pattern; keep the dropbox.
            self._count_error()

        if not self.validator.check_and_heal(record.log_directory, record.id):
            self._count_error()
            return False

        if not self.validator.check_log_file(record.log_path, record.id):
            self._count_error()
            return False

        return True

    def correlate(self, snapshot: ProcessSnapshot) -> set:
        result = self.correlator.correlate(self.registry, snapshot)
        self._count_error(result.errors)

        self.report.matched_pids = sorted(result.matched_pids)
        self.report.matched_ids = [r.id for r in self.registry.matched()]
        self.report.unmatched_ids = [r.id for r in self.registry.unmatched()]
        return result.matched_pids

    def remediate(self, matched_pids: set) -> None:
        """
        Stop matched workers and the supervisor, then make sure the
        supervisor comes back.
        """
        self._enter(RunState.STOP_WORKERS)
        self.stop_workers(matched_pids)

        self._enter(RunState.STOP_SUPERVISOR)
        self.stop_supervisor()

        self._enter(RunState.WAIT)
        logger.debug(f"Waiting {SUPERVISOR_SETTLE_SECONDS}s for {self.config.supervisor_name} to restart")
        self._sleep(SUPERVISOR_SETTLE_SECONDS)

        self._enter(RunState.RECHECK_SUPERVISOR)
        if self.supervisor_running():
            self._enter(RunState.CONFIRMED)
            self.report.supervisor = SupervisorOutcome.RESTARTED_EXTERNALLY
            logger.info(f"{self.config.supervisor_name} seems to have been restarted for us")
        else:
            self._enter(RunState.RELAUNCH_SUPERVISOR)
            self.relaunch_supervisor()

    def stop_workers(self, matched_pids: set) -> None:
        """Kill the workers tied to a dropbox, each PID once."""
        stopped = set()
        for record in self.registry.matched():
            pid = record.worker_pid
            if pid not in matched_pids or pid in stopped:
                continue
            stopped.add(pid)

            logger.info(f"Killing dropbox process for dropbox path '{record.path}' PID: {pid}")
            if self.inventory.terminate(pid):
                self.report.terminated_pids.append(pid)
            else:
                logger.error(f"Error attempting to stop dropbox PID {pid} (dropbox ID {record.id})")
                self._count_error()

    def stop_supervisor(self) -> None:
        """Kill every process named after the supervisor."""
        name = self.config.supervisor_name
        for process in self.inventory.snapshot().named(name):
            logger.info(f"Killing '{name}' process ID {process.pid}")
            if self.inventory.terminate(process.pid):
                self.report.terminated_pids.append(process.pid)
            else:
                logger.error(f"Error attempting to stop dropbox manager service '{name}' (PID {process.pid})")
                self._count_error()

    def supervisor_running(self) -> bool:
        """
        Look for the supervisor in a fresh snapshot.

        Any process named after the supervisor counts, whether or not its PID
        changed. A process whose name cannot be read counts as an error.
        """
        name = self.config.supervisor_name
        snapshot = self.inventory.snapshot()

        for process in snapshot.unnamed():
            logger.error(f"Error retrieving info about process {process.pid} ({process.name_error})")
            self._count_error()

        running = snapshot.named(name)
        for process in running:
            logger.info(f"{name} was restarted: new process ID {process.pid}")
        return bool(running)

    def relaunch_supervisor(self) -> None:
        """
        Start the supervisor directly.

        Raises:
            SupervisorNotFoundError: If the executable is not on $PATH
        """
        name = self.config.supervisor_name
        path = self.launcher.locate(name)
        if path is None:
            raise SupervisorNotFoundError(name)

        if self.launcher.launch(path):
            self.report.supervisor = SupervisorOutcome.LAUNCHED
            logger.info(f"Successfully (re)started {name}")
        else:
            self.report.supervisor = SupervisorOutcome.LAUNCH_FAILED
            logger.error(f"Could not launch command '{path}'")
            self._count_error()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _enter(self, state: RunState) -> None:
        if self.report.states:
            validate_transition(self.report.state, state)
        self.report.states.append(state)
        logger.debug(f"Entering state {state.value}")

    def _count_error(self, count: int = 1) -> None:
        self.report.error_count += count

    def _dump_registry(self, stage: str) -> None:
        if not self.config.debug:
            return
        records = [r.model_dump() for r in self.registry]
        logger.debug(f"Registry after {stage} ({len(records)} dropboxes): {records}")
