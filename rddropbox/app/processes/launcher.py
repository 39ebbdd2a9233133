"""
Supervisor launcher.

rdcatchd(8) puts itself into the background, so a launch that returns without
error only means the daemon forked, not that it is ready.
"""

import logging
import shutil
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)


class SupervisorLauncher:
    """Finds and starts the supervisor executable."""

    def locate(self, name: str) -> Optional[str]:
        """
        Find an executable on $PATH.

        Returns:
            Absolute path to the executable, or None if not found
        """
        path = shutil.which(name)
        if path:
            logger.debug(f"Found '{name}' at {path}")
        return path

    def launch(self, path: str) -> bool:
        """
        Run the executable with no arguments and wait for it to return.

        Returns:
            True if the command exited with status 0, False otherwise
        """
        try:
            subprocess.run([path], check=True)
        except subprocess.CalledProcessError as e:
            logger.error(f"Command '{path}' exited with status {e.returncode}")
            return False
        except OSError as e:
            logger.error(f"Could not launch command '{path}' ({e})")
            return False

        return True
