"""
File Operation Utilities

Provides hashing and the retrying copy/delete primitives the synchronizer
applies to the replica tree.

Author: JobSync Project
License: MIT
"""

import os
import shutil
import hashlib
from typing import Optional

from .logger import SyncLogger
from .retry import RetryPolicy

CHUNK_SIZE = 1024 * 1024  # 1 MiB


def calculate_file_hash(file_path: str, algorithm: str = "sha256", chunk_size: int = CHUNK_SIZE) -> bytes:
    """
    Calculate the digest of a file in a single streaming pass.

    Args:
        file_path: Path to the file
        algorithm: Hash algorithm (md5, sha256, etc.)
        chunk_size: Size of chunks to read (bytes)

    Returns:
        Raw digest bytes

    Raises:
        OSError: If the file can't be read
        ValueError: If algorithm is unsupported
    """
    try:
        hash_func = hashlib.new(algorithm)
    except ValueError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            hash_func.update(chunk)

    return hash_func.digest()


class FileOps:
    """
    Copy and delete primitives wrapped in a retry policy.

    Each failed attempt is reported through the sink; the error of the
    final attempt propagates to the caller.
    """

    def __init__(self, logger: SyncLogger, retry_policy: Optional[RetryPolicy] = None):
        """
        Initialize file operations.

        Args:
            logger: Event sink for attempt and success messages
            retry_policy: Policy applied to every operation
        """
        self.logger = logger
        self.retry_policy = retry_policy or RetryPolicy()

    def _report_attempt(self, attempt: int, error: BaseException, will_retry: bool):
        suffix = " Retrying..." if will_retry else ""
        self.logger.log(f"Attempt {attempt} failed: {error}{suffix}")

    def copy_file(self, source: str, target: str):
        """
        Copy a whole file over the target, keeping its timestamps.

        Args:
            source: Source file path
            target: Destination file path (overwritten)
        """
        self.retry_policy.call(lambda: shutil.copy2(source, target), self._report_attempt)
        self.logger.log_important(f"Copied file '{source}' to '{target}'.")

    def delete_file(self, path: str):
        """Delete a single file."""
        self.retry_policy.call(lambda: os.remove(path), self._report_attempt)
        self.logger.log_important(f"Deleted file '{path}' from replica.")

    def delete_directory(self, path: str):
        """Delete a directory and everything below it."""
        self.retry_policy.call(lambda: shutil.rmtree(path), self._report_attempt)
        self.logger.log_important(f"Deleted directory '{path}' from replica.")

    def ensure_directory(self, path: str) -> bool:
        """
        Create a directory (and parents) if it is missing.

        Returns:
            True if the directory was created
        """
        if os.path.isdir(path):
            return False
        os.makedirs(path, exist_ok=True)
        self.logger.log_important(f"Created directory '{path}'.")
        return True
