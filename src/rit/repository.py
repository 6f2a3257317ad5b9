"""Repository facade tying the Rit core together.

Each public method is one run-to-completion operation: load the repository
state, do the work, persist the state.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Union

from rit.constants import ENCODING, HEAD_FILE, INDEX_FILE, RIT_DIR
from rit.core.commit_chain import Commit, CommitChain, LogEntry
from rit.core.staging import IndexEntry, StagingIndex, check_encodable
from rit.core.state import RepositoryState
from rit.diff.engine import CommitDiff, DiffEngine
from rit.errors import AlreadyInitializedError, IOFailureError, NotFoundError, RitError
from rit.storage.backends import FileSystemBackend, StorageBackend
from rit.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


class Repository:
    """A Rit repository rooted at a working directory.

    Attributes:
        root: Working directory whose files are versioned
        rit_dir: Path to the ``.rit`` directory
        backend: StorageBackend holding HEAD, the index and the objects
        store: ObjectStore for blobs and commits
        chain: CommitChain for building and walking commits
        diff_engine: DiffEngine for ``show``
    """

    def __init__(self, root: Union[str, Path], backend: Optional[StorageBackend] = None) -> None:
        self.root = Path(root).resolve()
        self.rit_dir = self.root / RIT_DIR
        self.backend = backend if backend is not None else FileSystemBackend(self.rit_dir)
        self.store = ObjectStore(self.backend)
        self.chain = CommitChain(self.store)
        self.diff_engine = DiffEngine(self.store, self.chain)

    def is_initialized(self) -> bool:
        return self.backend.exists(HEAD_FILE) and self.backend.exists(INDEX_FILE)

    def init(self) -> None:
        """Create the repository layout.

        Missing pieces are created even when part of the layout exists.

        Raises:
            AlreadyInitializedError: If HEAD and the index already existed
        """
        self.backend.ensure_layout()

        already = self.is_initialized()
        if not self.backend.exists(HEAD_FILE):
            self.backend.write(HEAD_FILE, b"")
        if not self.backend.exists(INDEX_FILE):
            self.backend.write(INDEX_FILE, StagingIndex().serialize())

        if already:
            raise AlreadyInitializedError(f"Rit repository already exists in {self.rit_dir}")
        logger.info("Initialized empty Rit repository in %s", self.rit_dir)

    def load_state(self) -> RepositoryState:
        self._require_initialized()
        return RepositoryState.load(self.backend)

    def head(self) -> Optional[str]:
        return self.load_state().head

    def staged(self) -> List[IndexEntry]:
        return self.load_state().index.snapshot()

    def add(self, path: Union[str, Path]) -> IndexEntry:
        """Stage a working-tree file.

        Args:
            path: File path, absolute or relative to the repository root

        Returns:
            The appended index entry

        Raises:
            NotFoundError: If the file does not exist
            RitError: If the path is outside the working tree or not text
            InvalidTextError: If the file name is not valid UTF-8
        """
        abs_path = self._resolve_path(Path(path))
        if not abs_path.is_file():
            raise NotFoundError(f"File not found: {path}")

        try:
            content = abs_path.read_bytes().decode(ENCODING)
        except UnicodeDecodeError as e:
            raise RitError(f"{path} is not {ENCODING} text; binary files are not supported") from e
        except OSError as e:
            raise IOFailureError(f"Failed to read {abs_path}: {e}") from e

        return self.stage(abs_path.relative_to(self.root).as_posix(), content)

    def stage(self, path: str, content: Union[str, bytes]) -> IndexEntry:
        """Store content as a blob and append an index entry for ``path``."""
        check_encodable(path, "Path")
        state = self.load_state()
        blob_hash = self.store.put(content)
        entry = state.index.add(path, blob_hash)
        state.save(self.backend)
        logger.debug("Staged %s as %s", path, blob_hash)
        return entry

    def commit(self, message: str, now: Optional[datetime] = None) -> str:
        """Commit the staging index and return the new commit hash."""
        state = self.load_state()
        commit_hash = self.chain.commit(state, message, now=now)
        state.save(self.backend)
        return commit_hash

    def log(self) -> Iterator[LogEntry]:
        """Commit metadata from HEAD back to the root commit, newest first."""
        return self.chain.log(self.head())

    def get_commit(self, commit_hash: str) -> Commit:
        self._require_initialized()
        return self.chain.get_commit(commit_hash)

    def show(self, commit_hash: str) -> CommitDiff:
        """Diff a commit against its parent."""
        self._require_initialized()
        return self.diff_engine.show_commit_diff(commit_hash)

    def _require_initialized(self) -> None:
        if not self.is_initialized():
            raise NotFoundError(f"Not a Rit repository (no {RIT_DIR}/ found in {self.root})")

    def _resolve_path(self, path: Path) -> Path:
        """Resolve path to an absolute path within the working tree."""
        if path.is_absolute():
            abs_path = path.resolve()
        else:
            abs_path = (self.root / path).resolve()

        try:
            abs_path.relative_to(self.root)
        except ValueError:
            raise RitError(f"Path {path} is outside repository root {self.root}") from None

        try:
            abs_path.relative_to(self.rit_dir)
        except ValueError:
            return abs_path
        raise RitError(f"Refusing to add {path}: it is inside {RIT_DIR}/")
