"""Staging area (index) for Rit.

The staging index is the ordered list of ``(path, hash)`` entries that will
make up the next commit. Entries are only ever appended; adding the same path
twice keeps both entries.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from rit.constants import ENCODING, INDEX_SCHEMA_VERSION
from rit.errors import CorruptObjectError, InvalidTextError


def check_encodable(text: str, what: str) -> None:
    """Raise InvalidTextError unless ``text`` encodes as UTF-8.

    Undecodable file names and argv bytes arrive as lone surrogates and
    fail this check.
    """
    try:
        text.encode(ENCODING)
    except UnicodeEncodeError as e:
        raise InvalidTextError(f"{what} {text!r} is not valid {ENCODING} text") from e


@dataclass(frozen=True)
class IndexEntry:
    """A staged file: its repository-relative path and blob hash."""

    path: str
    hash: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "hash": self.hash}

    @classmethod
    def from_dict(cls, data: Any) -> "IndexEntry":
        """Build an entry from its decoded JSON form.

        Raises:
            CorruptObjectError: If ``data`` is not a ``{path, hash}`` mapping
        """
        if not isinstance(data, dict):
            raise CorruptObjectError(f"File entry must be an object, got {type(data).__name__}")
        path = data.get("path")
        blob_hash = data.get("hash")
        if not isinstance(path, str) or not isinstance(blob_hash, str):
            raise CorruptObjectError(f"File entry must have string 'path' and 'hash': {data!r}")
        return cls(path=path, hash=blob_hash)


class StagingIndex:
    """Ordered, append-only list of staged entries.

    Index format (JSON):
    {
        "version": 1,
        "base": "<head hash the entries were staged on top of, or null>",
        "entries": [
            {"path": "a.txt", "hash": "<sha1>"},
            ...
        ]
    }

    Attributes:
        base: Head commit hash at the time the entries were staged
    """

    def __init__(
        self,
        entries: Optional[List[IndexEntry]] = None,
        base: Optional[str] = None,
    ) -> None:
        self._entries: List[IndexEntry] = list(entries or [])
        self.base = base

    def add(self, path: str, blob_hash: str) -> IndexEntry:
        """Append an entry without looking for earlier entries for ``path``."""
        entry = IndexEntry(path=path, hash=blob_hash)
        self._entries.append(entry)
        return entry

    def snapshot(self) -> List[IndexEntry]:
        """Return a copy of the current entries."""
        return list(self._entries)

    def clear(self) -> None:
        """Remove all staged entries."""
        self._entries = []

    def is_empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self.snapshot())

    def serialize(self) -> bytes:
        """Encode the index as JSON bytes."""
        index = {
            "version": INDEX_SCHEMA_VERSION,
            "base": self.base,
            "entries": [entry.to_dict() for entry in self._entries],
        }
        return json.dumps(index, indent=2, ensure_ascii=False).encode(ENCODING)

    @classmethod
    def parse(cls, data: bytes) -> "StagingIndex":
        """Decode an index record.

        Raises:
            CorruptObjectError: If the record is not valid JSON, has an
                unsupported version or the wrong shape
        """
        try:
            index = json.loads(data.decode(ENCODING))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptObjectError(f"Corrupted index file: {e}") from e

        if not isinstance(index, dict):
            raise CorruptObjectError("Corrupted index file: expected a JSON object")

        if index.get("version") != INDEX_SCHEMA_VERSION:
            raise CorruptObjectError(f"Unsupported index version: {index.get('version')}")

        base = index.get("base")
        entries = index.get("entries")
        if base is not None and not isinstance(base, str):
            raise CorruptObjectError(f"Corrupted index file: invalid base {base!r}")
        if not isinstance(entries, list):
            raise CorruptObjectError("Corrupted index file: 'entries' must be a list")

        return cls([IndexEntry.from_dict(entry) for entry in entries], base=base)
