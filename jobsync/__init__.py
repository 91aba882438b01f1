"""
JobSync

Periodic one-way mirroring of a source directory tree into a replica.

Author: JobSync Project
License: MIT
"""

__version__ = "1.0.0"
