"""
Comparator

File equality strategies used to decide whether a replica file still
matches its source. Every function takes two existing, readable files;
read errors propagate to the caller.

Author: JobSync Project
License: MIT
"""

from ..config.schema import ComparatorKind
from ..utils.file_ops import calculate_file_hash, CHUNK_SIZE


def compare_binary(path_a: str, path_b: str, chunk_size: int = CHUNK_SIZE) -> bool:
    """
    Compare two files chunk by chunk.

    Returns:
        True only if both files reach end-of-file together with every
        chunk identical
    """
    with open(path_a, 'rb') as fa, open(path_b, 'rb') as fb:
        while True:
            chunk_a = fa.read(chunk_size)
            chunk_b = fb.read(chunk_size)
            if len(chunk_a) != len(chunk_b) or chunk_a != chunk_b:
                return False
            if not chunk_a:
                return True


def compare_md5(path_a: str, path_b: str) -> bool:
    """Compare the MD5 digests of two files."""
    return calculate_file_hash(path_a, "md5") == calculate_file_hash(path_b, "md5")


def compare_sha256(path_a: str, path_b: str) -> bool:
    """Compare the SHA-256 digests of two files."""
    return calculate_file_hash(path_a, "sha256") == calculate_file_hash(path_b, "sha256")


def compare_none(path_a: str, path_b: str) -> bool:
    """
    Treat any two files as equal.

    Leaves the decision to the caller's existence/size/mtime checks,
    for trees where reading content every cycle is too slow.
    """
    return True


COMPARATORS = {
    ComparatorKind.NONE: compare_none,
    ComparatorKind.BINARY: compare_binary,
    ComparatorKind.MD5: compare_md5,
    ComparatorKind.SHA256: compare_sha256,
}


def files_equal(kind, path_a: str, path_b: str) -> bool:
    """
    Compare two files with the selected strategy.

    Args:
        kind: ComparatorKind or its name (case-insensitive, unknown names
            mean BINARY)
        path_a: First file
        path_b: Second file
    """
    return COMPARATORS[ComparatorKind.parse(kind)](path_a, path_b)
