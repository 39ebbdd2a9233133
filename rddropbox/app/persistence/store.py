"""
Dropbox definition store.

Reads the DROPBOXES table of the Rivendell database. Read-only: the tool
never writes dropbox definitions.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional, Union

from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine, func, select
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..dropboxes.models import DropboxRecord
from .errors import DropboxStoreError

logger = logging.getLogger(__name__)

metadata = MetaData()

# Only the columns this tool reads.
dropboxes = Table(
    "DROPBOXES",
    metadata,
    Column("ID", Integer, primary_key=True),
    Column("STATION_NAME", String(64)),
    Column("PATH", String(255)),
    Column("LOG_PATH", String(255)),
)


class DropboxStore:
    """
    Source of dropbox definitions for a station.
    """

    def __init__(self, url: Union[str, URL], engine: Optional[Engine] = None):
        """
        Initialize store.

        Args:
            url: SQLAlchemy database URL
            engine: Optional pre-built engine (url is then only used in messages)

        Raises:
            DropboxStoreError: If the URL is unusable or its driver is missing
        """
        self.url = url
        if engine is not None:
            self._engine = engine
            return

        try:
            self._engine = create_engine(url, pool_pre_ping=True)
        except (SQLAlchemyError, ImportError) as e:
            raise DropboxStoreError(f"Unable to open database: {e}") from e

    @contextmanager
    def _connect(self):
        """Context manager for database connections."""
        try:
            with self._engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            raise DropboxStoreError(f"Database operation failed: {e}") from e

    def ping(self) -> None:
        """
        Verify the database is reachable.

        Raises:
            DropboxStoreError: If no connection can be made
        """
        with self._connect() as conn:
            conn.execute(select(1))
        logger.info("Pinged the database")

    def count_dropboxes(self, station_name: str) -> int:
        """Number of dropboxes configured for station_name."""
        stmt = (
            select(func.count())
            .select_from(dropboxes)
            .where(dropboxes.c.STATION_NAME == station_name)
        )
        with self._connect() as conn:
            return conn.execute(stmt).scalar_one()

    def list_dropboxes(self, station_name: str) -> List[DropboxRecord]:
        """
        Load every dropbox configured for station_name, ordered by ID.

        NULL paths are returned as empty strings so that validation rejects
        them like any other malformed path.

        Raises:
            DropboxStoreError: If the query fails
        """
        stmt = (
            select(dropboxes.c.ID, dropboxes.c.PATH, dropboxes.c.LOG_PATH)
            .where(dropboxes.c.STATION_NAME == station_name)
            .order_by(dropboxes.c.ID)
        )

        records = []
        with self._connect() as conn:
            for dropbox_id, path, log_path in conn.execute(stmt):
                records.append(
                    DropboxRecord(id=dropbox_id, path=path or "", log_path=log_path or "")
                )

        logger.info(f"Found {len(records)} dropboxes for station '{station_name}'")
        return records
