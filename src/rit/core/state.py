"""Mutable repository state: the head pointer and the staging index.

Operations load a RepositoryState at their start, work on it in memory and
persist it at their end. Nothing else in the core reads or writes ``HEAD``
or ``index`` directly.
"""

import logging
from typing import Optional

from rit.constants import ENCODING, HEAD_FILE, INDEX_FILE
from rit.core.staging import StagingIndex
from rit.errors import CorruptObjectError, NotFoundError
from rit.storage.backends import StorageBackend
from rit.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


class RepositoryState:
    """The head pointer and staging index of one repository.

    Attributes:
        head: Hash of the latest commit, or None before the first commit
        index: Entries staged for the next commit
    """

    def __init__(self, head: Optional[str] = None, index: Optional[StagingIndex] = None) -> None:
        self.head = head
        self.index = index if index is not None else StagingIndex(base=head)

    @classmethod
    def load(cls, backend: StorageBackend) -> "RepositoryState":
        """Read HEAD and the index from storage.

        A missing HEAD or index is treated as empty. An index staged on top of
        a different head than the current one was already committed (the
        process stopped between advancing HEAD and clearing the index), so it
        is discarded.

        Raises:
            CorruptObjectError: If HEAD or the index cannot be parsed
            IOFailureError: If storage fails
        """
        head = cls._read_head(backend)

        try:
            index = StagingIndex.parse(backend.read(INDEX_FILE))
        except NotFoundError:
            index = StagingIndex(base=head)

        if index.base != head:
            logger.warning(
                "Discarding %d staged entries recorded against %s; HEAD is now %s",
                len(index),
                index.base,
                head,
            )
            index = StagingIndex(base=head)

        logger.debug("Loaded state: head=%s, %d staged entries", head, len(index))
        return cls(head=head, index=index)

    def save(self, backend: StorageBackend) -> None:
        """Persist HEAD, then the index.

        Each record is replaced atomically. HEAD goes first so that a crash
        between the two writes leaves an index whose base no longer matches
        HEAD, which ``load`` discards.
        """
        backend.write(HEAD_FILE, (self.head or "").encode(ENCODING))
        backend.write(INDEX_FILE, self.index.serialize())

    def advance(self, commit_hash: str) -> None:
        """Point HEAD at a new commit and reset the index on top of it."""
        self.head = commit_hash
        self.index = StagingIndex(base=commit_hash)

    @staticmethod
    def _read_head(backend: StorageBackend) -> Optional[str]:
        try:
            raw = backend.read(HEAD_FILE)
        except NotFoundError:
            return None

        try:
            head = raw.decode(ENCODING).strip()
        except UnicodeDecodeError as e:
            raise CorruptObjectError(f"Corrupted HEAD file: {e}") from e

        if not head:
            return None
        if not ObjectStore.is_valid_hash(head):
            raise CorruptObjectError(f"Corrupted HEAD file: {head!r} is not a commit hash")
        return head
