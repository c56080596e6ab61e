"""Storage key generation shared by the staging and durable stores.

Key format: images/{category}/{epoch_ms}_{token}_{base}{ext}

The timestamp plus random token make keys collision-resistant without a
directory lookup; the category prefix partitions both stores.
"""

import secrets
import time
from pathlib import PurePosixPath
from typing import Optional

from .validation import sanitize_filename

KEY_ROOT = "images"
TOKEN_BYTES = 6


def generate_storage_key(
    original_filename: str,
    category: str,
    timestamp_ms: Optional[int] = None,
    token: Optional[str] = None,
) -> str:
    """Generate a unique, category-partitioned key for a file.

    Args:
        original_filename: Name supplied by the uploader (sanitized here)
        category: Category value used as the partition directory
        timestamp_ms: Override for the epoch-millisecond component
        token: Override for the random component

    Returns:
        str: Relative storage key

    Example:
        >>> generate_storage_key('my art.png', 'fanart', 1700000000000, 'abc123')
        'images/fanart/1700000000000_abc123_my_art.png'
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    if token is None:
        token = secrets.token_hex(TOKEN_BYTES)

    safe_name = sanitize_filename(original_filename)
    path = PurePosixPath(safe_name)
    base, ext = path.stem, path.suffix

    return f"{KEY_ROOT}/{category}/{timestamp_ms}_{token}_{base}{ext}"
