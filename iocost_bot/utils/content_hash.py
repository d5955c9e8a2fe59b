"""
Content Hash Utility
====================
Deterministic naming of downloaded results.

Rules:
    - Hash the raw bytes exactly as received.
    - md5 hex digest; only exact duplicates matter, not adversarial collisions.
    - Same bytes always produce the same filename.
"""
import hashlib

from iocost_bot.core.constants import RESULT_PREFIX, RESULT_SUFFIX


def compute_content_hash(content: bytes) -> str:
    return hashlib.md5(content).hexdigest()


def result_filename(content_hash: str) -> str:
    """Return 'result-<hash>.json.gz' for a content hash."""
    return f"{RESULT_PREFIX}{content_hash}{RESULT_SUFFIX}"
