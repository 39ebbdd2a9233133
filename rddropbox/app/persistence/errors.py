"""
Persistence-specific errors.
"""


class PersistenceError(Exception):
    """Base exception for persistence operations."""
    
    pass


class DropboxStoreError(PersistenceError):
    """Failed to read dropbox definitions from the database."""
    
    pass


class CredentialsError(PersistenceError):
    """Database credentials could not be loaded."""
    
    pass
