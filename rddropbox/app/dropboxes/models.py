"""
Dropbox data models.

All models use Pydantic with strict validation and no silent coercion.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..processes.models import ProcessInfo


class DropboxRecord(BaseModel):
    """
    One dropbox configured for the local station.

    path is a path spec: the directory part is watched by the import worker
    and the base name is the file pattern (e.g. "/mnt/drop1/*.wav").

    worker_pid and worker_process are filled in during correlation and are
    only meaningful for the current run.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: int = Field(..., description="Dropbox ID in the station database")
    path: str = Field(..., description="Path spec: watched directory plus file pattern")
    log_path: str = Field(..., description="Log file the import worker appends to")
    worker_pid: Optional[int] = Field(
        default=None, description="PID of the matched import worker"
    )
    worker_process: Optional[ProcessInfo] = Field(
        default=None,
        exclude=True,
        description="Process table entry of the matched worker (this run only)",
    )

    @property
    def directory(self) -> str:
        """Watched directory. "." when path has no directory part."""
        return os.path.dirname(self.path) or "."

    @property
    def pattern(self) -> str:
        return os.path.basename(self.path)

    @property
    def log_directory(self) -> str:
        return os.path.dirname(self.log_path) or "."

    @property
    def is_matched(self) -> bool:
        return self.worker_pid is not None

    def attach_worker(self, process: ProcessInfo) -> bool:
        """
        Associate a running worker with this dropbox.

        A dropbox keeps the first worker attached during a run.

        Returns:
            True if the worker was attached, False if one was already attached
        """
        if self.is_matched:
            return False
        self.worker_pid = process.pid
        self.worker_process = process
        return True
