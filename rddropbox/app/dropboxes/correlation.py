"""
Process correlation.

Matches each dropbox to the import worker running against it by looking for
the dropbox's path spec in the workers' argument vectors.

Matching is exact string equality against the raw path spec stored in the
database. The worker must have been started with the identical string.
"""

import logging
from dataclasses import dataclass, field
from typing import Set

from ..config import RunConfig
from ..processes.models import ProcessInfo, ProcessSnapshot
from .registry import DropboxRegistry

logger = logging.getLogger(__name__)


@dataclass
class CorrelationResult:
    """
    Outcome of one correlation pass.

    Attributes:
        matched_pids: PIDs of workers attached to a dropbox
        errors: Number of worker processes whose arguments could not be read
    """
    matched_pids: Set[int] = field(default_factory=set)
    errors: int = 0


class ProcessCorrelator:
    """
    Attaches running workers to dropbox records.
    """

    def __init__(self, config: RunConfig):
        self.config = config

    def correlate(self, registry: DropboxRegistry, snapshot: ProcessSnapshot) -> CorrelationResult:
        """
        Match every record in the registry against the snapshot.

        For each record, workers are scanned in snapshot order and the first
        one carrying the record's path spec is attached. Records without a
        worker stay in the registry; they are what triggers remediation.

        A worker whose argument vector cannot be read is reported once per
        run and counted as an error; the scan continues.
        """
        result = CorrelationResult()
        workers = snapshot.named(self.config.worker_name)
        unreadable: Set[int] = set()

        for record in registry:
            for process in workers:
                if not process.cmdline_readable:
                    if process.pid not in unreadable:
                        unreadable.add(process.pid)
                        logger.error(
                            f"Unable to read command line args for process '{process.name}' "
                            f"(PID: {process.pid}) ({process.cmdline_error})"
                        )
                    continue

                if self._runs_dropbox(process, record.path):
                    if record.attach_worker(process):
                        logger.info(
                            f"Found process ID {process.pid} for dropbox ID {record.id} ({record.path})"
                        )
                    result.matched_pids.add(record.worker_pid)
                    break

            if not record.is_matched:
                logger.warning(
                    f"Unable to find a running process for dropbox ID {record.id} ({record.directory})"
                )

        result.errors = len(unreadable)
        return result

    @staticmethod
    def _runs_dropbox(process: ProcessInfo, path: str) -> bool:
        return any(arg == path for arg in process.cmdline)
