"""
Process table data models.

A ProcessSnapshot is captured once per inventory query and never mutated.
Callers that need current state take a new snapshot.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ProcessInfo(BaseModel):
    """
    One entry of the process table.

    name and cmdline are None when they could not be read (permission denied,
    process became a zombie). The matching *_error field holds the reason.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    pid: int = Field(..., description="Operating system process ID")
    name: Optional[str] = Field(None, description="Executable name as reported by the OS")
    cmdline: Optional[Tuple[str, ...]] = Field(
        None, description="Command-line argument vector, including argv[0]"
    )
    name_error: Optional[str] = None
    cmdline_error: Optional[str] = None

    @property
    def cmdline_readable(self) -> bool:
        return self.cmdline is not None


@dataclass(frozen=True)
class ProcessSnapshot:
    """
    Ordered, immutable view of the process table at one point in time.

    Ordering follows the enumeration order of the inventory provider and is
    not guaranteed to be stable between snapshots.
    """

    processes: Tuple[ProcessInfo, ...] = ()
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __iter__(self) -> Iterator[ProcessInfo]:
        return iter(self.processes)

    def __len__(self) -> int:
        return len(self.processes)

    def named(self, name: str) -> List[ProcessInfo]:
        """Processes whose reported name equals name, in snapshot order."""
        return [p for p in self.processes if p.name == name]

    def unnamed(self) -> List[ProcessInfo]:
        """Processes whose name could not be read."""
        return [p for p in self.processes if p.name_error is not None]

    def pids(self) -> List[int]:
        return [p.pid for p in self.processes]
