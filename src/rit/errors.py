"""Rit error types.

The core never prints; it raises one of these and lets the command layer
decide how to render it.
"""

from typing import Optional


class RitError(Exception):
    """Base class for all errors raised by the Rit core."""


class NotFoundError(RitError):
    """Raised when a referenced object, commit or working-tree file is missing."""


class CorruptObjectError(RitError):
    """Raised when stored bytes do not parse into the expected record shape."""


class AlreadyInitializedError(RitError):
    """Raised by ``init`` when the repository layout already exists.

    Callers treat this as informational; it never aborts a command.
    """


class IOFailureError(RitError):
    """Raised when the underlying storage fails to read or write.

    Attributes:
        key: Storage key that was being accessed, if known.
    """

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        self.key = key
        super().__init__(message)


class InvalidTextError(RitError):
    """Raised when a path or message cannot be encoded for storage."""
