"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from rit.repository import Repository
from rit.storage import MemoryBackend, ObjectStore


@pytest.fixture
def memory_backend() -> MemoryBackend:
    """Create an empty in-memory storage backend."""
    return MemoryBackend()


@pytest.fixture
def store(memory_backend: MemoryBackend) -> ObjectStore:
    """Create an ObjectStore on top of the in-memory backend."""
    return ObjectStore(memory_backend)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create an empty working directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def repo(workspace: Path) -> Repository:
    """Create an initialized on-disk repository."""
    repository = Repository(workspace)
    repository.init()
    return repository


@pytest.fixture
def memory_repo(workspace: Path, memory_backend: MemoryBackend) -> Repository:
    """Create an initialized repository whose storage lives in memory."""
    repository = Repository(workspace, backend=memory_backend)
    repository.init()
    return repository
