"""
Run configuration.

A RunConfig is built once from the command line and handed to every
component's constructor. Nothing reads verbosity or process names from
module-level state.
"""

import logging
import socket
import sys

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_WORKER_NAME = "rdimport"
DEFAULT_SUPERVISOR_NAME = "rdcatchd"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


class RunConfig(BaseModel):
    """
    Settings for one reconciliation run.

    debug implies verbose.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    station_name: str = Field(
        default_factory=socket.gethostname,
        description="Station whose dropboxes are checked (defaults to this host)",
    )
    worker_name: str = Field(
        default=DEFAULT_WORKER_NAME,
        description="Process name of the dropbox import worker",
    )
    supervisor_name: str = Field(
        default=DEFAULT_SUPERVISOR_NAME,
        description="Process and executable name of the worker supervisor",
    )
    verbose: bool = False
    debug: bool = False

    @model_validator(mode="before")
    @classmethod
    def debug_implies_verbose(cls, data):
        if isinstance(data, dict) and data.get("debug"):
            data = {**data, "verbose": True}
        return data

    @property
    def log_level(self) -> int:
        if self.debug:
            return logging.DEBUG
        if self.verbose:
            return logging.INFO
        return logging.WARNING


def configure_logging(config: RunConfig) -> None:
    """Configure the root logger for the run's verbosity."""
    root = logging.getLogger()
    root.setLevel(config.log_level)

    # Remove existing handlers to avoid duplicates
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root.addHandler(handler)
