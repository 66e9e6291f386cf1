"""SHA-256 content digests in the ``sha256:<hex>`` format used by the server."""

from __future__ import annotations

import hashlib
import logging
from typing import Optional

CHECKSUM_PREFIX = "sha256:"
CHUNK_SIZE = 1 << 20


def digest(path: str) -> str:
    hasher = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            hasher.update(chunk)
    return f"{CHECKSUM_PREFIX}{hasher.hexdigest()}"


def verify(path: str, expected: Optional[str]) -> bool:
    """Checks ``path`` against ``expected``; assets without a checksum are trusted."""

    if not expected:
        return True
    actual = digest(path)
    if actual != expected:
        logging.error("Checksum mismatch for %s: expected %s, got %s", path, expected, actual)
        return False
    return True
