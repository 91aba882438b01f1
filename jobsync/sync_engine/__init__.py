"""
Sync Engine Module

File equality strategies and directory tree snapshots.

Author: JobSync Project
License: MIT
"""

from .comparator import (
    compare_binary,
    compare_md5,
    compare_sha256,
    compare_none,
    files_equal
)
from .tree_scanner import EntryKind, TreeEntry, TreeSnapshot, scan_tree

__all__ = [
    'compare_binary', 'compare_md5', 'compare_sha256', 'compare_none', 'files_equal',
    'EntryKind', 'TreeEntry', 'TreeSnapshot', 'scan_tree'
]
