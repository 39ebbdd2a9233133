"""
Process table access for dropbox reconciliation.

Public API:
    ProcessInfo — One process table entry
    ProcessSnapshot — Immutable, ordered process table capture
    ProcessInventory — psutil-backed snapshot and termination
    SupervisorLauncher — $PATH lookup and launch of the supervisor daemon
"""

from .errors import (
    ProcessError,
    InventoryUnavailableError,
    SupervisorNotFoundError,
)
from .models import ProcessInfo, ProcessSnapshot
from .inventory import ProcessInventory
from .launcher import SupervisorLauncher

__all__ = [
    # Errors
    "ProcessError",
    "InventoryUnavailableError",
    "SupervisorNotFoundError",
    # Models
    "ProcessInfo",
    "ProcessSnapshot",
    # Providers
    "ProcessInventory",
    "SupervisorLauncher",
]
