"""Core engine layer for Rit.

This module provides the staging index, the persisted repository state and
the commit chain.
"""

from rit.core.commit_chain import Commit, CommitChain, LogEntry
from rit.core.staging import IndexEntry, StagingIndex
from rit.core.state import RepositoryState

__all__ = [
    "Commit",
    "CommitChain",
    "LogEntry",
    "IndexEntry",
    "StagingIndex",
    "RepositoryState",
]
