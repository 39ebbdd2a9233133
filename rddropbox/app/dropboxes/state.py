"""
Reconciliation run states and legal transitions.

One pass per run:

    LOAD → VALIDATE → CORRELATE → FULLY_MATCHED → DONE
                                → NEEDS_REMEDIATION → STOP_WORKERS
                                  → STOP_SUPERVISOR → WAIT → RECHECK_SUPERVISOR
                                  → CONFIRMED | RELAUNCH_SUPERVISOR → DONE

INVARIANT: DONE is terminal. A run never leaves it.
"""

from enum import Enum
from typing import Set, Tuple

from .errors import InvalidStateTransitionError


class RunState(str, Enum):
    """Reconciliation engine state."""

    LOAD = "load"
    VALIDATE = "validate"
    CORRELATE = "correlate"
    FULLY_MATCHED = "fully_matched"
    NEEDS_REMEDIATION = "needs_remediation"
    STOP_WORKERS = "stop_workers"
    STOP_SUPERVISOR = "stop_supervisor"
    WAIT = "wait"
    RECHECK_SUPERVISOR = "recheck_supervisor"
    CONFIRMED = "confirmed"
    RELAUNCH_SUPERVISOR = "relaunch_supervisor"
    DONE = "done"


_TRANSITIONS: Set[Tuple[RunState, RunState]] = {
    (RunState.LOAD, RunState.VALIDATE),
    (RunState.VALIDATE, RunState.CORRELATE),

    # Decision
    (RunState.CORRELATE, RunState.FULLY_MATCHED),
    (RunState.CORRELATE, RunState.NEEDS_REMEDIATION),
    (RunState.FULLY_MATCHED, RunState.DONE),

    # Remediation sequence
    (RunState.NEEDS_REMEDIATION, RunState.STOP_WORKERS),
    (RunState.STOP_WORKERS, RunState.STOP_SUPERVISOR),
    (RunState.STOP_SUPERVISOR, RunState.WAIT),
    (RunState.WAIT, RunState.RECHECK_SUPERVISOR),
    (RunState.RECHECK_SUPERVISOR, RunState.CONFIRMED),
    (RunState.RECHECK_SUPERVISOR, RunState.RELAUNCH_SUPERVISOR),
    (RunState.CONFIRMED, RunState.DONE),
    (RunState.RELAUNCH_SUPERVISOR, RunState.DONE),
}


def is_terminal(state: RunState) -> bool:
    return state == RunState.DONE


def can_transition(from_state: RunState, to_state: RunState) -> bool:
    """
    Check if a run state transition is legal.

    Unlike job status updates, a run never re-enters the state it is in.
    """
    if is_terminal(from_state):
        return False
    return (from_state, to_state) in _TRANSITIONS


def validate_transition(from_state: RunState, to_state: RunState) -> None:
    """
    Validate a run state transition, raising an exception if illegal.

    Raises:
        InvalidStateTransitionError: If the transition is not allowed
    """
    if not can_transition(from_state, to_state):
        raise InvalidStateTransitionError(from_state.value, to_state.value)
