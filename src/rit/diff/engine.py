"""Line-level diff engine for Rit.

This module computes longest-common-subsequence line diffs between two texts
and renders per-file diffs of a commit against its parent.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from rit.core.commit_chain import Commit, CommitChain
from rit.core.staging import IndexEntry
from rit.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)

EQUAL = "equal"
ADDED = "added"
REMOVED = "removed"

# File statuses reported by show_commit_diff
STATUS_INITIAL = "initial"    # commit has no parent
STATUS_NEW = "new"            # parent has no entry for the path
STATUS_MODIFIED = "modified"  # diffed against the parent's entry

_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")


@dataclass(frozen=True)
class DiffSegment:
    """A run of consecutive lines sharing one kind: equal, added or removed."""

    kind: str
    text: str

    @property
    def lines(self) -> List[str]:
        return split_lines(self.text)


@dataclass
class FileDiff:
    """Diff of one file entry of a commit against the parent commit.

    Attributes:
        path: Repository-relative file path
        hash: Blob hash of the new content
        status: One of "initial", "new", "modified"
        content: New content of the file
        old_hash: Blob hash of the parent's content, if any
        segments: Diff segments; empty unless status is "modified"
    """

    path: str
    hash: str
    status: str
    content: str
    old_hash: Optional[str] = None
    segments: List[DiffSegment] = field(default_factory=list)

    def stats(self) -> Dict[str, int]:
        """Count added and removed lines."""
        added = sum(len(s.lines) for s in self.segments if s.kind == ADDED)
        removed = sum(len(s.lines) for s in self.segments if s.kind == REMOVED)
        return {"added": added, "removed": removed}

    @property
    def has_changes(self) -> bool:
        return any(s.kind != EQUAL for s in self.segments)


@dataclass
class CommitDiff:
    """All file diffs of one commit, in the commit's file order."""

    hash: str
    commit: Commit
    files: List[FileDiff]


def split_lines(text: str) -> List[str]:
    """Split text into lines, keeping each line's terminator.

    Only ``\\n`` ends a line; a trailing fragment without one is its own line.
    """
    return _LINE_RE.findall(text)


def diff_lines(old: str, new: str) -> List[DiffSegment]:
    """Compute a line diff between two texts.

    Joining the equal and removed segments in order gives back ``old``;
    joining the equal and added segments gives back ``new``. Within a changed
    region removed lines come before added lines.

    Args:
        old: Old text
        new: New text

    Returns:
        List of segments with adjacent segments of the same kind merged
    """
    a = split_lines(old)
    b = split_lines(new)

    # Common prefix and suffix never take part in the LCS table.
    prefix = 0
    while prefix < len(a) and prefix < len(b) and a[prefix] == b[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < len(a) - prefix
        and suffix < len(b) - prefix
        and a[len(a) - 1 - suffix] == b[len(b) - 1 - suffix]
    ):
        suffix += 1

    a_mid = a[prefix:len(a) - suffix]
    b_mid = b[prefix:len(b) - suffix]

    ops = [(EQUAL, line) for line in a[:prefix]]
    ops.extend(_lcs_ops(a_mid, b_mid))
    ops.extend((EQUAL, line) for line in a[len(a) - suffix:])

    return _merge(ops)


def _lcs_ops(a: List[str], b: List[str]) -> List[tuple]:
    """Edit script between two line lists from an LCS length table."""
    n, m = len(a), len(b)
    # lengths[i][j] is the LCS length of a[i:] and b[j:]
    lengths = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = lengths[i], lengths[i + 1]
        for j in range(m - 1, -1, -1):
            if a[i] == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    ops = []
    i = j = 0
    while i < n and j < m:
        if a[i] == b[j]:
            ops.append((EQUAL, a[i]))
            i += 1
            j += 1
        elif lengths[i + 1][j] >= lengths[i][j + 1]:
            ops.append((REMOVED, a[i]))
            i += 1
        else:
            ops.append((ADDED, b[j]))
            j += 1
    ops.extend((REMOVED, line) for line in a[i:])
    ops.extend((ADDED, line) for line in b[j:])
    return ops


def _merge(ops: List[tuple]) -> List[DiffSegment]:
    segments: List[DiffSegment] = []
    kind: Optional[str] = None
    buffer: List[str] = []
    for op_kind, line in ops:
        if op_kind != kind and buffer:
            segments.append(DiffSegment(kind, "".join(buffer)))
            buffer = []
        kind = op_kind
        buffer.append(line)
    if buffer:
        segments.append(DiffSegment(kind, "".join(buffer)))
    return segments


class DiffEngine:
    """Renders the per-file diffs of a commit against its parent.

    Attributes:
        store: ObjectStore holding the blobs
        chain: CommitChain used to load commits
    """

    def __init__(self, store: ObjectStore, chain: CommitChain) -> None:
        self.store = store
        self.chain = chain

    def show_commit_diff(self, commit_hash: str) -> CommitDiff:
        """Diff every file entry of a commit against the parent commit.

        Entries are reported in the commit's order, duplicates included. When
        the parent lists the same path more than once, the last matching
        entry is the one diffed against.

        Raises:
            NotFoundError: If the commit, its parent or a blob is missing
            CorruptObjectError: If a commit cannot be parsed
        """
        commit = self.chain.get_commit(commit_hash)

        parent_files: Optional[Dict[str, IndexEntry]] = None
        if commit.parent:
            parent = self.chain.get_commit(commit.parent)
            # later entries overwrite earlier ones: last match wins
            parent_files = {entry.path: entry for entry in parent.files}

        file_diffs = []
        for entry in commit.files:
            content = self.store.get(entry.hash)

            if parent_files is None:
                file_diffs.append(FileDiff(entry.path, entry.hash, STATUS_INITIAL, content))
                continue

            old_entry = parent_files.get(entry.path)
            if old_entry is None:
                file_diffs.append(FileDiff(entry.path, entry.hash, STATUS_NEW, content))
                continue

            old_content = self.store.get(old_entry.hash)
            file_diffs.append(
                FileDiff(
                    entry.path,
                    entry.hash,
                    STATUS_MODIFIED,
                    content,
                    old_hash=old_entry.hash,
                    segments=diff_lines(old_content, content),
                )
            )

        logger.debug("Diffed %d file(s) of commit %s", len(file_diffs), commit_hash)
        return CommitDiff(hash=commit_hash, commit=commit, files=file_diffs)
