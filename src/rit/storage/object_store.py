"""Content-addressable object storage for Rit.

Blobs and commits are stored under the SHA-1 of their content in
``objects/<hash>``. Objects are immutable: writing content that is already
present is a no-op.
"""

import hashlib
import logging
from typing import Union

from rit.constants import ENCODING, HASH_ALGORITHM, HASH_LENGTH, OBJECTS_DIR
from rit.errors import CorruptObjectError, NotFoundError
from rit.storage.backends import StorageBackend

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset("0123456789abcdef")


class ObjectStore:
    """Content-addressable storage for blobs and commit records.

    Attributes:
        backend: StorageBackend the objects are written to

    Example:
        >>> store = ObjectStore(MemoryBackend())
        >>> object_hash = store.put("hello\\n")
        >>> assert store.get(object_hash) == "hello\\n"
    """

    def __init__(self, backend: StorageBackend) -> None:
        self.backend = backend

    @staticmethod
    def hash_content(content: Union[str, bytes]) -> str:
        """Compute the SHA-1 hex digest of content.

        Text is hashed as its UTF-8 encoding.
        """
        if isinstance(content, str):
            content = content.encode(ENCODING)
        hasher = hashlib.new(HASH_ALGORITHM)
        hasher.update(content)
        return hasher.hexdigest()

    def put(self, content: Union[str, bytes]) -> str:
        """Store content and return its hash.

        If an object with the same hash already exists, nothing is written.

        Args:
            content: Text (encoded as UTF-8) or raw bytes

        Returns:
            SHA-1 hash of the content (40 hex characters)

        Raises:
            IOFailureError: If the write fails
        """
        if isinstance(content, str):
            content = content.encode(ENCODING)
        object_hash = self.hash_content(content)

        key = self._get_key(object_hash)
        if self.backend.exists(key):
            logger.debug("Object %s already stored", object_hash)
            return object_hash

        self.backend.write(key, content)
        logger.debug("Stored object %s (%d bytes)", object_hash, len(content))
        return object_hash

    def get_bytes(self, object_hash: str) -> bytes:
        """Read the raw bytes of an object.

        The bytes are not re-hashed against the key.

        Raises:
            NotFoundError: If no object is stored under ``object_hash``
        """
        if not self.is_valid_hash(object_hash):
            raise NotFoundError(f"Object not found: {object_hash!r} is not a valid hash")
        try:
            return self.backend.read(self._get_key(object_hash))
        except NotFoundError:
            raise NotFoundError(f"Object not found: {object_hash}") from None

    def get(self, object_hash: str) -> str:
        """Read an object as text.

        Raises:
            NotFoundError: If no object is stored under ``object_hash``
            CorruptObjectError: If the object is not valid UTF-8
        """
        data = self.get_bytes(object_hash)
        try:
            return data.decode(ENCODING)
        except UnicodeDecodeError as e:
            raise CorruptObjectError(
                f"Object {object_hash} is not valid {ENCODING} text: {e}"
            ) from e

    def exists(self, object_hash: str) -> bool:
        """Check if an object exists in the store."""
        if not self.is_valid_hash(object_hash):
            return False
        return self.backend.exists(self._get_key(object_hash))

    @staticmethod
    def is_valid_hash(object_hash: str) -> bool:
        """Check that a string looks like a full lowercase SHA-1 hex digest."""
        return (
            isinstance(object_hash, str)
            and len(object_hash) == HASH_LENGTH
            and set(object_hash) <= _HEX_DIGITS
        )

    @staticmethod
    def _get_key(object_hash: str) -> str:
        return f"{OBJECTS_DIR}/{object_hash}"
