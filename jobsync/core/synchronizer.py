"""
Synchronizer

Core synchronization logic: periodically makes the replica tree identical
to the source tree by copying new or changed files and pruning entries
that no longer exist in the source.

Author: JobSync Project
License: MIT
"""

import os
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import Dict, Optional

from ..config.schema import SyncConfig
from ..sync_engine.comparator import files_equal
from ..sync_engine.tree_scanner import TreeEntry, TreeSnapshot, scan_tree
from ..utils.file_ops import FileOps
from ..utils.logger import SyncLogger
from ..utils.retry import RetryPolicy
from .cancellation import CancellationContext


class SyncState(Enum):
    """Lifecycle of a synchronizer."""
    IDLE = "idle"
    RUNNING = "running"
    CYCLE_IN_PROGRESS = "cycle_in_progress"
    WAITING = "waiting"
    STOPPED = "stopped"


@dataclass
class CycleStats:
    """Counters for one synchronization cycle. Updated from worker threads."""
    directories_created: int = 0
    files_copied: int = 0
    files_deleted: int = 0
    directories_deleted: int = 0
    errors: int = 0
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def add(self, counter: str, amount: int = 1):
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    @property
    def changes(self) -> int:
        """Number of create/copy/delete operations performed."""
        return (
            self.directories_created + self.files_copied
            + self.files_deleted + self.directories_deleted
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "directories_created": self.directories_created,
            "files_copied": self.files_copied,
            "files_deleted": self.files_deleted,
            "directories_deleted": self.directories_deleted,
            "errors": self.errors,
        }


class Synchronizer:
    """
    One-way mirroring engine.

    Each cycle runs two phases concurrently, each over its own snapshot:
    reconcile (source -> replica copies) and prune (replica-only
    deletions). Every file is handled by its own unit of work on a thread
    pool, and a phase ends only when all of its units have finished.

    Errors are isolated per unit. In fragile mode an error requests
    cancellation, which stops future cycles but lets units already
    dispatched in the current cycle run to completion.
    """

    def __init__(
        self,
        config: SyncConfig,
        logger: SyncLogger,
        cancellation: Optional[CancellationContext] = None,
        file_ops: Optional[FileOps] = None
    ):
        """
        Initialize synchronizer.

        Args:
            config: Normalized sync configuration
            logger: Event sink shared by all workers
            cancellation: Stop signal shared with the caller
            file_ops: Copy/delete primitives (defaults to the configured retry policy)
        """
        self.config = config
        self.source_path = config.source_path
        self.replica_path = config.replica_path
        self.comparator = config.comparator
        self.logger = logger
        self.cancellation = cancellation or CancellationContext()
        self.file_ops = file_ops or FileOps(
            logger,
            RetryPolicy(max_attempts=config.retry_attempts, delay=config.retry_delay)
        )

        self.last_cycle: Optional[CycleStats] = None
        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        return self._state

    def to_replica(self, source_path: str) -> str:
        """Map a path under the source root to its replica counterpart."""
        return _swap_root(source_path, self.source_path, self.replica_path)

    def to_source(self, replica_path: str) -> str:
        """Map a path under the replica root to its source counterpart."""
        return _swap_root(replica_path, self.replica_path, self.source_path)

    def start(self):
        """
        Run cycles until cancellation is requested.

        Blocks the calling thread. Cancellation is observed between cycles
        and during the interval wait; it ends the loop without raising.
        """
        self._state = SyncState.RUNNING
        try:
            while not self.cancellation.is_cancelled():
                self.run_cycle()
                self._state = SyncState.WAITING
                if self.cancellation.wait(self.config.interval_seconds):
                    break
            self.logger.log("Synchronization operation was cancelled.")
        finally:
            self._state = SyncState.STOPPED

    def stop(self):
        """Request cancellation. In-flight file operations are not interrupted."""
        self.logger.log("Disabling synchronization process.")
        self.cancellation.cancel()

    def run_cycle(self) -> CycleStats:
        """
        Run one reconcile + prune pass.

        Returns:
            CycleStats for this pass
        """
        stats = CycleStats()
        previous_state = self._state
        self._state = SyncState.CYCLE_IN_PROGRESS

        try:
            self.logger.log("Starting synchronization.")
            started = time.monotonic()

            if not os.path.isdir(self.source_path):
                self.logger.log_error(f"Source directory '{self.source_path}' does not exist.")
                if self.config.fragile:
                    self.stop()
                return stats

            if not os.path.isdir(self.replica_path):
                self.logger.log_important(f"Replica directory '{self.replica_path}' does not exist. Creating...")
                os.makedirs(self.replica_path, exist_ok=True)

            with ThreadPoolExecutor(
                max_workers=self.config.max_workers,
                thread_name_prefix="jobsync-worker"
            ) as workers:
                # Phases get their own threads so they never wait on a pool slot
                with ThreadPoolExecutor(max_workers=2, thread_name_prefix="jobsync-phase") as phases:
                    reconcile = phases.submit(self._reconcile, workers, stats)
                    prune = phases.submit(self._prune, workers, stats)
                    wait([reconcile, prune])

            for phase in (reconcile, prune):
                error = phase.exception()
                if error is not None:
                    self._handle_exception(error, stats)

            elapsed_ms = (time.monotonic() - started) * 1000
            self.logger.log(f"Finishing synchronization, {elapsed_ms:.0f} ms elapsed.")

        except Exception as e:
            self._handle_exception(e, stats)
        finally:
            self.last_cycle = stats
            self._state = previous_state

        return stats

    def _reconcile(self, workers: ThreadPoolExecutor, stats: CycleStats):
        """Create missing replica directories, then copy new or changed files."""
        snapshot = self._scan(self.source_path, stats)

        for entry in snapshot.directories:
            try:
                target = self.to_replica(snapshot.path_of(entry))
                self._remove_link(target, stats)
                if self.file_ops.ensure_directory(target):
                    stats.add("directories_created")
            except Exception as e:
                self._handle_exception(e, stats)

        units = [
            workers.submit(self._run_unit, self._reconcile_file, snapshot, entry, stats)
            for entry in snapshot.files
        ]
        wait(units)

    def _reconcile_file(self, snapshot: TreeSnapshot, entry: TreeEntry, stats: CycleStats):
        source = snapshot.path_of(entry)
        target = self.to_replica(source)

        self._remove_link(target, stats)
        if self._should_copy(source, entry, target):
            self.file_ops.copy_file(source, target)
            stats.add("files_copied")

    def _should_copy(self, source: str, entry: TreeEntry, target: str) -> bool:
        try:
            target_stat = os.stat(target)
        except FileNotFoundError:
            return True

        if entry.mtime > target_stat.st_mtime:
            return True
        if entry.size != target_stat.st_size:
            return True
        if not files_equal(self.comparator, source, target):
            self.logger.log(f"{source} and {target} didn't match")
            return True
        return False

    def _remove_link(self, path: str, stats: CycleStats):
        """Delete a replica symlink so nothing is written through it."""
        if os.path.islink(path):
            self.file_ops.delete_file(path)
            stats.add("files_deleted")

    def _prune(self, workers: ThreadPoolExecutor, stats: CycleStats):
        """Delete replica files, then directories, missing from the source."""
        snapshot = self._scan(self.replica_path, stats)

        units = [
            workers.submit(self._run_unit, self._prune_file, snapshot, entry, stats)
            for entry in snapshot.files
        ]
        wait(units)

        # Deepest first: children are gone before their parent is tested
        remaining = self._scan(self.replica_path, stats)
        directories = sorted(
            (remaining.path_of(entry) for entry in remaining.directories),
            key=len,
            reverse=True
        )
        for path in directories:
            try:
                source = self.to_source(path)
                if os.path.islink(path):
                    # Links over existing source entries are replaced by reconcile
                    if not os.path.lexists(source):
                        self.file_ops.delete_file(path)
                        stats.add("files_deleted")
                elif not os.path.isdir(source) and os.path.isdir(path):
                    self.file_ops.delete_directory(path)
                    stats.add("directories_deleted")
            except Exception as e:
                self._handle_exception(e, stats)

    def _prune_file(self, snapshot: TreeSnapshot, entry: TreeEntry, stats: CycleStats):
        path = snapshot.path_of(entry)
        source = self.to_source(path)

        if os.path.islink(path):
            if os.path.lexists(source):
                return
        elif os.path.isfile(source):
            return
        if os.path.lexists(path):
            self.file_ops.delete_file(path)
            stats.add("files_deleted")

    def _scan(self, root: str, stats: CycleStats) -> TreeSnapshot:
        """Snapshot a root, reporting unreadable subtrees as errors."""
        return scan_tree(root, onerror=lambda e: self._handle_exception(e, stats))

    def _run_unit(self, func, snapshot: TreeSnapshot, entry: TreeEntry, stats: CycleStats):
        """Run one per-file unit of work, containing its errors."""
        try:
            func(snapshot, entry, stats)
        except Exception as e:
            self._handle_exception(e, stats)

    def _handle_exception(self, error: BaseException, stats: CycleStats):
        stats.add("errors")
        self.logger.log_error(f"Error during synchronization: {error}")
        if self.config.fragile:
            self.logger.log_error("Error was encountered, unable to safely proceed.")
            self.stop()


def _swap_root(path: str, from_root: str, to_root: str) -> str:
    if not path.startswith(from_root):
        raise ValueError(f"Path '{path}' is not under '{from_root}'")
    return to_root + path[len(from_root):]
