"""
Tree Scanner

Captures a point-in-time listing of a directory tree. Each synchronization
phase works from its own snapshot rather than a live view.

Author: JobSync Project
License: MIT
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional


class EntryKind(Enum):
    """Kind of filesystem entry."""
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class TreeEntry:
    """One file or directory found under a root."""
    relative_path: str
    kind: EntryKind
    size: int
    mtime: float


@dataclass
class TreeSnapshot:
    """Files and directories found under a root at scan time."""
    root: str
    files: List[TreeEntry] = field(default_factory=list)
    directories: List[TreeEntry] = field(default_factory=list)

    def path_of(self, entry: TreeEntry) -> str:
        """Absolute path of an entry (root carries the trailing separator)."""
        return self.root + entry.relative_path


def scan_tree(root: str, onerror: Optional[Callable[[OSError], None]] = None) -> TreeSnapshot:
    """
    Enumerate every file and directory below a root, recursively.

    Symlinked directories are listed as directories but not descended
    into. Dangling symlinks are listed as files. Entries that vanish
    while scanning are skipped.

    Args:
        root: Normalized root path ending with a separator
        onerror: Called with the OSError of a directory that can't be
            listed; the scan then continues without that subtree. If
            None, the error is raised.

    Returns:
        TreeSnapshot of the root
    """
    snapshot = TreeSnapshot(root=root)

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror or _raise):
        for name in dirnames:
            _add_entry(snapshot, os.path.join(dirpath, name), EntryKind.DIRECTORY)
        for name in filenames:
            _add_entry(snapshot, os.path.join(dirpath, name), EntryKind.FILE)

    return snapshot


def _raise(error: OSError):
    raise error


def _add_entry(snapshot: TreeSnapshot, path: str, kind: EntryKind):
    try:
        stat = os.stat(path)
    except FileNotFoundError:
        # Dangling symlink, or the entry is already gone
        try:
            stat = os.lstat(path)
        except FileNotFoundError:
            return
        kind = EntryKind.FILE

    entry = TreeEntry(
        relative_path=path[len(snapshot.root):],
        kind=kind,
        size=stat.st_size,
        mtime=stat.st_mtime
    )
    if kind is EntryKind.DIRECTORY:
        snapshot.directories.append(entry)
    else:
        snapshot.files.append(entry)
