"""
Dropbox error hierarchy.

Dropbox errors never abort a run on their own. Validation and correlation
report failures through return values; these exceptions cover programming
errors and lookups.
"""


class DropboxError(Exception):
    """Base exception for dropbox failures."""

    pass


class DropboxNotFoundError(DropboxError):
    """Raised when a dropbox ID is not present in the registry."""

    def __init__(self, dropbox_id: int):
        self.dropbox_id = dropbox_id
        super().__init__(f"Dropbox not found: {dropbox_id}")


class InvalidStateTransitionError(DropboxError):
    """Raised when the reconciliation engine attempts an illegal state transition."""

    def __init__(self, current_state: str, target_state: str):
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"Invalid reconciliation state transition: "
            f"{current_state} -> {target_state}"
        )
