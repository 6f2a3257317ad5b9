"""Commit records and the linear commit chain.

A commit is a snapshot of the staging index plus a timestamp, a message and
the hash of its parent commit. Commits are stored in the object store under
the SHA-1 of their canonical JSON serialization.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from itertools import islice
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from rit.constants import COMMIT_SCHEMA_VERSION, ENCODING
from rit.core.staging import IndexEntry, check_encodable
from rit.core.state import RepositoryState
from rit.errors import CorruptObjectError, NotFoundError
from rit.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Commit:
    """An immutable commit record."""

    timestamp: str
    message: str
    files: Tuple[IndexEntry, ...]
    parent: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": COMMIT_SCHEMA_VERSION,
            "timeStamp": self.timestamp,
            "message": self.message,
            "files": [entry.to_dict() for entry in self.files],
            "parent": self.parent,
        }

    def serialize(self) -> bytes:
        """Canonical JSON: sorted keys, no whitespace, UTF-8.

        Identical logical content always yields identical bytes, and
        therefore the same hash.
        """
        canonical_json = json.dumps(
            self.to_dict(),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return canonical_json.encode(ENCODING)

    @property
    def hash(self) -> str:
        return ObjectStore.hash_content(self.serialize())

    @classmethod
    def parse(cls, data: bytes) -> "Commit":
        """Decode a stored commit record.

        Records without a ``version`` field are read with the legacy rules,
        where an empty string parent means "no parent".

        Raises:
            CorruptObjectError: If the bytes are not a valid commit record
        """
        try:
            record = json.loads(data.decode(ENCODING))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptObjectError(f"Not a commit record: {e}") from e

        if not isinstance(record, dict):
            raise CorruptObjectError("Not a commit record: expected a JSON object")

        version = record.get("version")
        if version is None:
            if record.get("parent") == "":
                record["parent"] = None
        elif version != COMMIT_SCHEMA_VERSION:
            raise CorruptObjectError(f"Unsupported commit version: {version}")

        timestamp = record.get("timeStamp")
        message = record.get("message")
        files = record.get("files")
        parent = record.get("parent")

        if not isinstance(timestamp, str):
            raise CorruptObjectError("Commit record has no valid 'timeStamp'")
        if not isinstance(message, str):
            raise CorruptObjectError("Commit record has no valid 'message'")
        if not isinstance(files, list):
            raise CorruptObjectError("Commit record has no valid 'files' list")
        if parent is not None and not ObjectStore.is_valid_hash(parent):
            raise CorruptObjectError(f"Commit record has invalid parent {parent!r}")

        return cls(
            timestamp=timestamp,
            message=message,
            files=tuple(IndexEntry.from_dict(entry) for entry in files),
            parent=parent,
        )


@dataclass(frozen=True)
class LogEntry:
    """Commit metadata shown by ``log``; the file list is left out."""

    hash: str
    timestamp: str
    message: str
    parent: Optional[str]


class CommitChain:
    """Builds, stores and walks the chain of commits.

    Attributes:
        store: ObjectStore holding blobs and commits
    """

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def commit(
        self,
        state: RepositoryState,
        message: str,
        now: Optional[datetime] = None,
    ) -> str:
        """Snapshot the staging index into a new commit.

        Stores the commit, advances ``state.head`` to it and clears the index.
        The caller persists ``state`` afterwards.

        Args:
            state: Loaded repository state; mutated in place
            message: Commit message
            now: Commit time, defaults to the current UTC time

        Returns:
            Hash of the new commit

        Raises:
            NotFoundError: If a staged blob is missing from the store
            InvalidTextError: If the message cannot be encoded
        """
        check_encodable(message, "Commit message")

        files = state.index.snapshot()
        for entry in files:
            if not self.store.exists(entry.hash):
                raise NotFoundError(f"Staged blob for {entry.path} not found: {entry.hash}")

        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        commit = Commit(
            timestamp=timestamp,
            message=message,
            files=tuple(files),
            parent=state.head,
        )

        commit_hash = self.store.put(commit.serialize())
        state.advance(commit_hash)

        logger.info("Created commit %s with %d file(s)", commit_hash, len(files))
        return commit_hash

    def get_commit(self, commit_hash: str) -> Commit:
        """Load and parse a commit.

        Raises:
            NotFoundError: If no object is stored under ``commit_hash``
            CorruptObjectError: If the object is not a commit record
        """
        data = self.store.get_bytes(commit_hash)
        try:
            return Commit.parse(data)
        except CorruptObjectError as e:
            raise CorruptObjectError(f"Object {commit_hash} is not a valid commit: {e}") from e

    def log(self, head: Optional[str]) -> Iterator[LogEntry]:
        """Walk the chain from ``head`` back to the root commit, newest first.

        Raises:
            NotFoundError: If a commit in the chain is missing
            CorruptObjectError: If a commit is unreadable or the chain loops
        """
        seen: Set[str] = set()
        current = head
        while current:
            if current in seen:
                raise CorruptObjectError(f"Commit chain loops back to {current}")
            seen.add(current)

            commit = self.get_commit(current)
            yield LogEntry(
                hash=current,
                timestamp=commit.timestamp,
                message=commit.message,
                parent=commit.parent,
            )
            current = commit.parent

    def history(self, head: Optional[str], limit: Optional[int] = None) -> List[LogEntry]:
        """Return at most ``limit`` entries of ``log(head)`` as a list."""
        return list(islice(self.log(head), limit))
