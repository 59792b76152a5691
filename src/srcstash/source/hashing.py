"""
Content digests for fetched sources.

SHA-256 is the canonical cache key. SHA-1 exists only so legacy manifests,
which record SHA-1 sums, can still find their sources.
"""

import hashlib

from srcstash.constants import (
    CANONICAL_ALGORITHM,
    LEGACY_ALGORITHM,
    SUPPORTED_ALGORITHMS,
)


def digest(path: str, algorithm: str) -> str:
    """
    Compute the hex digest of a file.

    The whole file is read into memory; source artifacts are small enough for this
    and backends always finish writing before a digest is requested.

    Parameters:
        path (str): File to hash.
        algorithm (str): Either "sha256" or "sha1".

    Returns:
        str: Lowercase hexadecimal digest.

    Raises:
        ValueError: If `algorithm` is not supported.
        OSError: If the file cannot be read.
    """
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")
    with open(path, "rb") as f:
        data = f.read()
    return hashlib.new(algorithm, data).hexdigest()


def sha256sum(path: str) -> str:
    return digest(path, CANONICAL_ALGORITHM)


def sha1sum(path: str) -> str:
    return digest(path, LEGACY_ALGORITHM)
