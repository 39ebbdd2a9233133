"""
Dropbox path validation with self-healing.

Checks a dropbox's watched directory, file pattern and log file, and repairs
what can be repaired: missing directories are created and unreadable
directories are chmod'ed. Nothing here raises; every check returns a bool
and logs the reason for a failure, leaving the decision to the caller.

All checks are idempotent. On a healthy path they change nothing.
"""

import logging
import os
import re
import stat

logger = logging.getLogger(__name__)

# One or more "/"-separated word segments, anchored at the start.
VALID_PATH = re.compile(r"^(/+\w+)+")

# Rivendell dropbox patterns: "*.wav", "?.mp3", "name.flac".
VALID_PATTERN = re.compile(r"^([*?]|\w+)\.(flac|mp[23]|ogg|wav)$")

DIRECTORY_MODE = 0o755
SENTINEL_NAME = ".rd-dropbox-write-test"


class PathValidator:
    """
    Filesystem precondition checks for one dropbox at a time.

    check_and_heal() handles directories (the watched directory and the log
    directory), check_pattern() the file pattern and check_log_file() the
    log file itself.
    """

    def __init__(self, directory_mode: int = DIRECTORY_MODE, sentinel_name: str = SENTINEL_NAME):
        self.directory_mode = directory_mode
        self.sentinel_name = sentinel_name

    def is_well_formed(self, path: str) -> bool:
        return bool(path) and VALID_PATH.match(path) is not None

    def check_and_heal(self, directory: str, dropbox_id: int) -> bool:
        """
        Check (and attempt to correct) a dropbox directory.

        1. Syntax: must start with one or more "/word" segments. No healing
           is attempted on a malformed path.
        2. Missing directory: created with mode 0755.
        3. Permission denied on stat: chmod 0755.
        4. Existing, accessible directory: a sentinel file is created and
           removed to prove the directory is writable.

        Returns:
            True if the directory is usable, False otherwise
        """
        if not self.is_well_formed(directory):
            logger.error(
                f"Path '{directory}' (dropbox ID {dropbox_id}) is an invalid filesystem path"
            )
            return False

        try:
            info = os.stat(directory)
        except FileNotFoundError:
            return self._create(directory, dropbox_id)
        except PermissionError:
            return self._repair_permissions(directory, dropbox_id)
        except OSError as e:
            logger.error(
                f"Unexpected error on stat of '{directory}' (dropbox ID {dropbox_id}): {e}"
            )
            return False

        if not stat.S_ISDIR(info.st_mode):
            logger.error(
                f"Path '{directory}' (dropbox ID {dropbox_id}) exists but is not a directory"
            )
            return False

        logger.info(f"Dropbox directory '{directory}', mode: {stat.filemode(info.st_mode)}")
        return self._probe_writable(directory, dropbox_id)

    def _create(self, directory: str, dropbox_id: int) -> bool:
        logger.warning(
            f"Directory '{directory}' (dropbox ID {dropbox_id}) does not exist. Creating it."
        )
        try:
            os.makedirs(directory, mode=self.directory_mode, exist_ok=True)
        except OSError as e:
            logger.error(f"Unable to create directory '{directory}' ({e})")
            return False

        logger.info(f"Successfully created '{directory}'")
        return True

    def _repair_permissions(self, directory: str, dropbox_id: int) -> bool:
        logger.warning(
            f"Directory '{directory}' (dropbox ID {dropbox_id}) is not readable. "
            "Attempting to fix permissions."
        )
        try:
            os.chmod(directory, self.directory_mode)
        except OSError as e:
            logger.error(f"Unable to change permissions on directory '{directory}' ({e})")
            return False

        logger.info(f"Successfully set permissions on '{directory}'")
        return True

    def _probe_writable(self, directory: str, dropbox_id: int) -> bool:
        sentinel = os.path.join(directory, self.sentinel_name)
        try:
            with open(sentinel, "w"):
                pass
            os.remove(sentinel)
        except OSError as e:
            logger.error(
                f"Unable to create a new file in '{directory}' for dropbox ID {dropbox_id} ({e}). "
                "Please correct this directory's ownership and/or permissions."
            )
            return False

        logger.info(f"Directory '{directory}' (dropbox ID {dropbox_id}) is writable")
        return True

    def check_pattern(self, pattern: str, dropbox_id: int) -> bool:
        """
        Check the file pattern of a path spec.

        A bad pattern does not stop the worker from running, so callers keep
        the dropbox.
        """
        if VALID_PATTERN.match(pattern) is None:
            logger.error(
                f"Pattern '{pattern}' (dropbox ID {dropbox_id}) is an invalid dropbox pattern"
            )
            return False
        return True

    def check_log_file(self, log_path: str, dropbox_id: int) -> bool:
        """
        Check that the worker can append to its log file.

        The containing directory must already have passed check_and_heal().
        If the file cannot be stat'ed for lack of permission, the directory
        (not the file) is chmod'ed and the stat retried.

        Returns:
            True if the file exists and opens read-write, False otherwise
        """
        logger.info(f"Checking log file '{log_path}' (dropbox ID {dropbox_id})")

        try:
            info = os.stat(log_path)
        except PermissionError as e:
            logger.warning(f"Could not access log file '{log_path}' ({e}). Attempting to fix.")
            info = self._restat_after_chmod(log_path, dropbox_id)
            if info is None:
                return False
        except OSError as e:
            logger.error(f"Could not access log file '{log_path}' (dropbox ID {dropbox_id}): {e}")
            return False

        logger.debug(f"Log file '{log_path}' exists, mode: {stat.filemode(info.st_mode)}")

        try:
            with open(log_path, "r+"):
                pass
        except OSError as e:
            logger.error(
                f"Unable to open log file for dropbox ID {dropbox_id} ({e}). "
                "Please correct this file's ownership and/or permissions."
            )
            return False

        logger.info(f"Log file '{log_path}' (dropbox ID {dropbox_id}) is writable")
        return True

    def _restat_after_chmod(self, log_path: str, dropbox_id: int):
        directory = os.path.dirname(log_path) or "."
        try:
            os.chmod(directory, self.directory_mode)
        except OSError as e:
            logger.error(
                f"Could not update permission on directory '{directory}' ({e}). "
                "Please correct this situation."
            )
            return None

        try:
            return os.stat(log_path)
        except OSError as e:
            logger.error(
                f"Log file '{log_path}' (dropbox ID {dropbox_id}) is still not accessible ({e})"
            )
            return None
