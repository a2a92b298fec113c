"""
Fingerprinting of task content.

A task's fingerprint is a hex digest of its raw bytes. The ledger stores the
fingerprint a task had when it ran; a different value on a later run means
the task was edited after execution.

Manifesto:
    Fingerprints must be:
    - **Deterministic:** Same bytes → same fingerprint, always
    - **Content-only:** File name, mtime and path never enter the digest
    - **Stable across releases:** MD5 by default, matching ledgers written
      by earlier deployments (``md5`` column)

Examples:
    >>> compute_fingerprint(b"hello")
    '5d41402abc4b2a76b9719d911017c592'
    >>> compute_fingerprint("hello") == compute_fingerprint(b"hello")
    True

Tags:
    hashing, fingerprint, drift-detection, dbupdater
"""

from __future__ import annotations

import hashlib


DEFAULT_ALGORITHM = "md5"


def compute_fingerprint(content: bytes | str, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Compute the fingerprint of task content.

    ``str`` content is encoded as UTF-8 first, so text and the bytes it was
    read from produce the same fingerprint.

    Args:
        content: Raw task body
        algorithm: Any name accepted by :func:`hashlib.new`

    Returns:
        Hex digest string
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.new(algorithm, content).hexdigest()


__all__ = ["DEFAULT_ALGORITHM", "compute_fingerprint"]
