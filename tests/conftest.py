"""
Shared pytest fixtures for JobSync tests.

Provides temporary source/replica trees, a log sink writing into the
test's temp directory, and a synchronizer factory.

Author: JobSync Project
License: MIT
"""

import os

import pytest

from jobsync.config.schema import SyncConfig
from jobsync.core.cancellation import CancellationContext
from jobsync.core.synchronizer import Synchronizer
from jobsync.utils.logger import SyncLogger


@pytest.fixture(autouse=True)
def clean_jobsync_env(monkeypatch):
    """Keep the developer's JOBSYNC_* variables out of the tests."""
    for name in list(os.environ):
        if name.startswith("JOBSYNC_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def tree_dirs(tmp_path):
    """Create empty source and replica directories."""
    source = tmp_path / "source"
    replica = tmp_path / "replica"
    source.mkdir()
    replica.mkdir()
    return {"source": source, "replica": replica, "root": tmp_path}


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "logs" / "jobsync.log"


@pytest.fixture
def sync_logger(log_path):
    """Verbose log sink, drained and closed after the test."""
    logger = SyncLogger(str(log_path), verbose=2)
    yield logger
    logger.close()


@pytest.fixture
def make_synchronizer(tree_dirs, sync_logger):
    """Factory building a Synchronizer over tree_dirs with fast retries."""
    def _make(logger=None, cancellation=None, file_ops=None, **overrides):
        settings = {
            "source_path": str(tree_dirs["source"]),
            "replica_path": str(tree_dirs["replica"]),
            "interval": 20,
            "retry_delay": 0,
        }
        settings.update(overrides)
        return Synchronizer(
            SyncConfig(**settings),
            logger or sync_logger,
            cancellation or CancellationContext(),
            file_ops=file_ops
        )
    return _make


def snapshot_tree(root):
    """Map of relative path -> file bytes (None for directories)."""
    result = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames:
            path = os.path.join(dirpath, name)
            result[os.path.relpath(path, root)] = None
        for name in filenames:
            path = os.path.join(dirpath, name)
            with open(path, "rb") as f:
                result[os.path.relpath(path, root)] = f.read()
    return result


@pytest.fixture
def read_tree():
    return snapshot_tree
