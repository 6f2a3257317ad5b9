"""Line-level diffs for Rit.

This module provides the LCS line diff and the per-commit diff engine.
"""

from rit.diff.engine import (
    ADDED,
    EQUAL,
    REMOVED,
    CommitDiff,
    DiffEngine,
    DiffSegment,
    FileDiff,
    diff_lines,
    split_lines,
)

__all__ = [
    "ADDED",
    "EQUAL",
    "REMOVED",
    "CommitDiff",
    "DiffEngine",
    "DiffSegment",
    "FileDiff",
    "diff_lines",
    "split_lines",
]
