"""
Process inventory and supervisor errors.

Both exceptions are fatal to a reconciliation run: without a process table
there is nothing to correlate, and without the supervisor executable there is
no way to remediate.
"""


class ProcessError(Exception):
    """Base exception for process-table operations."""

    pass


class InventoryUnavailableError(ProcessError):
    """Raised when the list of running processes cannot be obtained."""

    pass


class SupervisorNotFoundError(ProcessError):
    """Raised when the supervisor executable is not on the search path."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Cannot find executable '{name}' in $PATH")
