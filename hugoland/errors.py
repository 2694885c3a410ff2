"""
Errors - Exception taxonomy.

Gameplay preconditions never raise: they come back as failed
ActionResults and leave state untouched. Only the persistence
layer has exceptions, and the store catches and logs them.
"""


class HugolandError(Exception):
    """Base class for all engine errors."""


class PersistenceError(HugolandError):
    """Raised when the storage backend cannot read or write a snapshot."""


class SnapshotDecodeError(PersistenceError):
    """Raised when a stored snapshot is not valid JSON or fails validation."""
