"""
JobSync Core Module

Synchronization engine and the cancellation signal that drives it.

Author: JobSync Project
License: MIT
"""

from .cancellation import CancellationContext
from .synchronizer import Synchronizer, SyncState, CycleStats

__all__ = ['CancellationContext', 'Synchronizer', 'SyncState', 'CycleStats']
