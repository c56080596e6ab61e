"""File validation utilities for submission intake"""

import os
import re
from enum import Enum
from typing import Optional, Tuple


class SubmissionCategory(str, Enum):
    """Gallery category a submission is filed under"""
    OFFICIAL = "official"
    ANIME = "anime"
    WALLPAPER = "wallpaper"
    FANART = "fanart"


DEFAULT_CATEGORY = SubmissionCategory.FANART

# Upload allow-list shared with the general media upload endpoints
ALLOWED_MIME_TYPES = {
    'image/jpeg',
    'image/png',
    'image/gif',
    'image/webp',
    'video/mp4',
    'video/webm',
    'audio/mp3',
    'audio/wav',
    'audio/ogg',
}

# The review pipeline only accepts images, even though the allow-list is wider
REVIEWABLE_MIME_PREFIX = 'image/'


def is_supported_mime_type(mime_type: Optional[str]) -> bool:
    """Check if MIME type is on the upload allow-list

    Example:
        >>> is_supported_mime_type('image/png')
        True
        >>> is_supported_mime_type('application/pdf')
        False
    """
    return mime_type in ALLOWED_MIME_TYPES


def is_reviewable_mime_type(mime_type: Optional[str]) -> bool:
    """Check if MIME type may enter the review pipeline (allow-listed images only)

    Example:
        >>> is_reviewable_mime_type('image/webp')
        True
        >>> is_reviewable_mime_type('video/mp4')
        False
    """
    return is_supported_mime_type(mime_type) and mime_type.startswith(REVIEWABLE_MIME_PREFIX)


def parse_category(value: Optional[str]) -> SubmissionCategory:
    """Parse a category string, falling back to the default when omitted

    Raises:
        ValueError: If value is given but is not a known category
    """
    if value is None or value == "":
        return DEFAULT_CATEGORY
    return SubmissionCategory(value)


def validate_file_size(size_bytes: int, max_size: int) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Args:
        size_bytes: File size in bytes
        max_size: Maximum allowed size

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024, 10 * 1024 * 1024)
        (True, None)
        >>> validate_file_size(0, 10 * 1024 * 1024)
        (False, 'File is empty (0 bytes)')
    """
    if size_bytes == 0:
        return False, "File is empty (0 bytes)"

    if size_bytes > max_size:
        return False, f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"

    return True, None


def validate_filename(filename: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded filename

    Validation rules:
    - Not empty
    - Max 255 characters
    - No path traversal (../, ..\\)
    - No null bytes or control characters

    Example:
        >>> validate_filename('cover.png')
        (True, None)
        >>> validate_filename('')
        (False, 'Filename cannot be empty')
    """
    if not filename or len(filename.strip()) == 0:
        return False, "Filename cannot be empty"

    if len(filename) > 255:
        return False, f"Filename exceeds 255 characters (got {len(filename)})"

    if '..' in filename or '/' in filename or '\\' in filename:
        return False, "Filename contains path traversal or directory separators"

    if '\x00' in filename:
        return False, "Filename contains null bytes"

    if any(ord(c) < 32 for c in filename):
        return False, "Filename contains control characters"

    return True, None


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for use inside a storage key

    Example:
        >>> sanitize_filename('../../cover.png')
        'cover.png'
        >>> sanitize_filename('my cover (v2).png')
        'my_cover_v2_.png'
    """
    filename = os.path.basename(filename)

    # Replace problematic characters with underscore
    filename = re.sub(r'[^\w.-]', '_', filename)

    # Collapse runs of underscores
    filename = re.sub(r'_+', '_', filename)

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        max_name_len = 255 - len(ext)
        filename = name[:max_name_len] + ext

    return filename
