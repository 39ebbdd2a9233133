"""
Reconciliation run report.

Structured summary of one run for terminal and JSON output.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List

from .state import RunState


class SupervisorOutcome(str, Enum):
    """What happened to the supervisor during the run."""

    NOT_NEEDED = "not_needed"
    RESTARTED_EXTERNALLY = "restarted_externally"
    LAUNCHED = "launched"
    LAUNCH_FAILED = "launch_failed"


@dataclass
class RunReport:
    """
    Outcome of one reconciliation run.

    Attributes:
        station_name: Station whose dropboxes were checked
        states: Every state the engine entered, in order
        error_count: Failed checks and remediation steps
        loaded_ids: Dropbox IDs returned by the store
        dropped_ids: Dropbox IDs removed during validation
        matched_ids: Dropbox IDs with a running worker
        unmatched_ids: Valid dropbox IDs without a running worker
        matched_pids: Worker PIDs attached to a dropbox
        terminated_pids: PIDs successfully killed during remediation
        supervisor: Supervisor outcome
        timestamp: Report creation time (ISO format)
    """
    station_name: str
    states: List[RunState] = field(default_factory=list)
    error_count: int = 0
    loaded_ids: List[int] = field(default_factory=list)
    dropped_ids: List[int] = field(default_factory=list)
    matched_ids: List[int] = field(default_factory=list)
    unmatched_ids: List[int] = field(default_factory=list)
    matched_pids: List[int] = field(default_factory=list)
    terminated_pids: List[int] = field(default_factory=list)
    supervisor: SupervisorOutcome = SupervisorOutcome.NOT_NEEDED
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def state(self) -> RunState:
        """Last state entered."""
        return self.states[-1] if self.states else RunState.LOAD

    @property
    def succeeded(self) -> bool:
        return self.error_count == 0

    @property
    def fully_matched(self) -> bool:
        return RunState.FULLY_MATCHED in self.states

    @property
    def remediated(self) -> bool:
        return RunState.NEEDS_REMEDIATION in self.states

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        return {
            "station": self.station_name,
            "succeeded": self.succeeded,
            "timestamp": self.timestamp,
            "state": self.state.value,
            "states": [s.value for s in self.states],
            "summary": {
                "errors": self.error_count,
                "loaded": len(self.loaded_ids),
                "dropped": len(self.dropped_ids),
                "matched": len(self.matched_ids),
                "unmatched": len(self.unmatched_ids),
            },
            "dropboxes": {
                "loaded": self.loaded_ids,
                "dropped": self.dropped_ids,
                "matched": self.matched_ids,
                "unmatched": self.unmatched_ids,
            },
            "remediation": {
                "matched_pids": self.matched_pids,
                "terminated_pids": self.terminated_pids,
                "supervisor": self.supervisor.value,
            },
        }
