"""
Streaming content hashing.
"""

import hashlib
from typing import Union
import os

CHUNK_SIZE = 64 * 1024


def hash_file(path: Union[str, os.PathLike], chunk_size: int = CHUNK_SIZE) -> str:
    """
    Compute the hex SHA-256 digest of a file without loading it into memory.

    Args:
        path: File to hash
        chunk_size: Bytes read per iteration

    Returns:
        Hex-encoded 256-bit digest

    Raises:
        OSError: If the file cannot be opened or read
    """
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()
