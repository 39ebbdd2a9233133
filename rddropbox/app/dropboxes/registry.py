"""
Dropbox registry.

In-memory working set of the dropbox records loaded for one run.
Records that fail validation are removed; removal always produces a new list
so that an iteration in progress is never disturbed.
"""

import logging
from typing import Callable, Iterator, List, Optional

from .models import DropboxRecord
from .errors import DropboxNotFoundError

logger = logging.getLogger(__name__)


class DropboxRegistry:
    """
    Ordered collection of DropboxRecords for the current run.
    """

    def __init__(self, records: Optional[List[DropboxRecord]] = None):
        """
        Initialize registry.

        Args:
            records: Records in store order (copied, not aliased)
        """
        self._records: List[DropboxRecord] = list(records or [])

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[DropboxRecord]:
        return iter(self._records)

    def list_records(self) -> List[DropboxRecord]:
        """Return a copy of the current records, in order."""
        return list(self._records)

    def get(self, dropbox_id: int) -> Optional[DropboxRecord]:
        """
        Retrieve a record by dropbox ID.

        Returns:
            DropboxRecord if found, None otherwise
        """
        for record in self._records:
            if record.id == dropbox_id:
                return record
        return None

    def get_or_raise(self, dropbox_id: int) -> DropboxRecord:
        """
        Retrieve a record by dropbox ID, raising if not found.

        Raises:
            DropboxNotFoundError: If dropbox_id is not in the registry
        """
        record = self.get(dropbox_id)
        if record is None:
            raise DropboxNotFoundError(dropbox_id)
        return record

    def remove_at(self, index: int) -> List[DropboxRecord]:
        """
        Remove the record at index.

        The registry switches to a new list; any list previously returned by
        list_records() is left as it was, so callers may remove while walking
        such a list.

        Returns:
            The new sequence of records

        Raises:
            IndexError: If index is out of range
        """
        removed = self._records[index]
        logger.info(
            f"Removing dropbox ID {removed.id} ('{removed.path}') from the "
            "list of dropboxes to consider for restarting"
        )
        self._records = self._records[:index] + self._records[index + 1:]
        return list(self._records)

    def retain(self, keep: Callable[[DropboxRecord], bool]) -> List[DropboxRecord]:
        """
        Keep only the records for which keep(record) is True.

        Every record is visited exactly once, in order. Survivors are
        collected into a fresh list that replaces the current one.

        Returns:
            The dropped records, in order
        """
        survivors = []
        dropped = []

        for record in self._records:
            if keep(record):
                survivors.append(record)
            else:
                logger.info(
                    f"Removing dropbox ID {record.id} ('{record.path}') from the "
                    "list of dropboxes to consider for restarting"
                )
                dropped.append(record)

        self._records = survivors
        return dropped

    def matched(self) -> List[DropboxRecord]:
        """Records with an attached worker."""
        return [r for r in self._records if r.is_matched]

    def unmatched(self) -> List[DropboxRecord]:
        """Records without an attached worker."""
        return [r for r in self._records if not r.is_matched]
