"""Content fingerprints used as exact-duplicate keys."""
from __future__ import annotations

import hashlib


def fingerprint(canonical_text: str) -> str:
    """Return the SHA-256 hex digest of already-normalized text."""
    return hashlib.sha256(canonical_text.encode("utf-8")).hexdigest()
