"""
Dropboxes — reconciliation of configured dropboxes with running workers.

Public API:
    DropboxRecord — One configured dropbox (path spec plus log path)
    DropboxRegistry — Ordered working set for one run
    PathValidator — Directory, pattern and log file checks with self-healing
    ProcessCorrelator — Attaches running import workers to dropboxes
    RemediationEngine — Orchestration: load → validate → correlate → restart
    RunReport — Structured outcome of a run
"""

from .errors import (
    DropboxError,
    DropboxNotFoundError,
    InvalidStateTransitionError,
)
from .models import DropboxRecord
from .registry import DropboxRegistry
from .validation import PathValidator
from .correlation import ProcessCorrelator, CorrelationResult
from .state import RunState, can_transition, validate_transition
from .report import RunReport, SupervisorOutcome
from .engine import RemediationEngine, SUPERVISOR_SETTLE_SECONDS

__all__ = [
    # Errors
    "DropboxError",
    "DropboxNotFoundError",
    "InvalidStateTransitionError",
    # Models
    "DropboxRecord",
    # Registry
    "DropboxRegistry",
    # Core
    "PathValidator",
    "ProcessCorrelator",
    "CorrelationResult",
    "RemediationEngine",
    "SUPERVISOR_SETTLE_SECONDS",
    # State
    "RunState",
    "can_transition",
    "validate_transition",
    # Reporting
    "RunReport",
    "SupervisorOutcome",
]
