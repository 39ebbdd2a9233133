"""
Process inventory backed by psutil.

Provides the two process-table capabilities the reconciliation engine needs:
a snapshot of every visible process (name and argument vector) and
termination by PID.
"""

import logging

import psutil

from .errors import InventoryUnavailableError
from .models import ProcessInfo, ProcessSnapshot

logger = logging.getLogger(__name__)


class ProcessInventory:
    """
    Read access to the process table, write access limited to killing by PID.
    """

    def snapshot(self) -> ProcessSnapshot:
        """
        Capture the current process table.

        Processes that exit while being inspected are left out. Processes whose
        name or argument vector cannot be read are kept, with the reason
        recorded on the entry.

        Raises:
            InventoryUnavailableError: If the process table cannot be enumerated
        """
        entries = []

        try:
            processes = list(psutil.process_iter())
        except (psutil.Error, OSError) as e:
            raise InventoryUnavailableError(
                f"Unable to list running processes: {e}"
            ) from e

        for proc in processes:
            entry = self._inspect(proc)
            if entry is not None:
                entries.append(entry)

        logger.debug(f"Captured process snapshot: {len(entries)} processes")
        return ProcessSnapshot(processes=tuple(entries))

    def _inspect(self, proc: psutil.Process):
        name = None
        name_error = None
        cmdline = None
        cmdline_error = None

        try:
            name = proc.name()
        except psutil.ZombieProcess as e:
            name_error = str(e)
        except psutil.NoSuchProcess:
            return None
        except psutil.AccessDenied as e:
            name_error = str(e)

        try:
            cmdline = tuple(proc.cmdline())
        except psutil.ZombieProcess as e:
            cmdline_error = str(e)
        except psutil.NoSuchProcess:
            return None
        except psutil.AccessDenied as e:
            cmdline_error = str(e)

        return ProcessInfo(
            pid=proc.pid,
            name=name,
            cmdline=cmdline,
            name_error=name_error,
            cmdline_error=cmdline_error,
        )

    def terminate(self, pid: int) -> bool:
        """
        Kill a process by PID.

        Returns:
            True if the signal was delivered, False otherwise
        """
        try:
            psutil.Process(pid).kill()
        except psutil.NoSuchProcess as e:
            logger.error(f"Process {pid} no longer exists ({e})")
            return False
        except (psutil.AccessDenied, OSError) as e:
            logger.error(f"Not permitted to stop process {pid} ({e})")
            return False

        logger.debug(f"Sent kill signal to process {pid}")
        return True
