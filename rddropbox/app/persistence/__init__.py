"""
Persistence layer for rd-dropbox.

Read-only access to the Rivendell DROPBOXES table through SQLAlchemy, plus
MySQL option-file credential loading.
"""

from .credentials import DatabaseSettings, read_mycnf
from .errors import PersistenceError, DropboxStoreError, CredentialsError
from .store import DropboxStore

__all__ = [
    "DatabaseSettings",
    "read_mycnf",
    "DropboxStore",
    "PersistenceError",
    "DropboxStoreError",
    "CredentialsError",
]
