"""Unit tests for intake validation and storage key generation"""

import re

import pytest

from fanvault.domain.submissions import (
    DEFAULT_CATEGORY,
    SubmissionCategory,
    generate_storage_key,
    is_reviewable_mime_type,
    is_supported_mime_type,
    parse_category,
    sanitize_filename,
    validate_file_size,
    validate_filename,
)

TEN_MB = 10 * 1024 * 1024


class TestMimeTypes:
    """Allow-list versus review pipeline"""

    @pytest.mark.parametrize("mime", ["image/jpeg", "image/png", "image/gif", "image/webp"])
    def test_images_are_reviewable(self, mime):
        assert is_supported_mime_type(mime)
        assert is_reviewable_mime_type(mime)

    @pytest.mark.parametrize("mime", ["video/mp4", "video/webm", "audio/mp3", "audio/wav", "audio/ogg"])
    def test_media_is_allowed_but_not_reviewable(self, mime):
        assert is_supported_mime_type(mime)
        assert not is_reviewable_mime_type(mime)

    @pytest.mark.parametrize("mime", ["application/pdf", "image/svg+xml", "text/html", "", None])
    def test_unsupported_types(self, mime):
        assert not is_supported_mime_type(mime)
        assert not is_reviewable_mime_type(mime)


class TestFileSize:
    def test_valid_size(self):
        assert validate_file_size(1024, TEN_MB) == (True, None)

    def test_exactly_max_size_is_valid(self):
        assert validate_file_size(TEN_MB, TEN_MB) == (True, None)

    def test_empty_file(self):
        is_valid, error = validate_file_size(0, TEN_MB)
        assert not is_valid
        assert "empty" in error

    def test_too_large(self):
        is_valid, error = validate_file_size(TEN_MB + 1, TEN_MB)
        assert not is_valid
        assert "exceeds" in error


class TestFilename:
    def test_valid_filename(self):
        assert validate_filename("cover.png") == (True, None)

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_filename(self, name):
        is_valid, _ = validate_filename(name)
        assert not is_valid

    @pytest.mark.parametrize("name", ["../etc/passwd", "a/b.png", "a\\b.png"])
    def test_path_traversal(self, name):
        is_valid, error = validate_filename(name)
        assert not is_valid
        assert "traversal" in error

    def test_control_characters(self):
        is_valid, _ = validate_filename("bad\x07name.png")
        assert not is_valid

    def test_too_long(self):
        is_valid, _ = validate_filename("a" * 252 + ".png")
        assert not is_valid

    def test_sanitize(self):
        assert sanitize_filename("my cover (v2).png") == "my_cover_v2_.png"
        assert sanitize_filename("../../cover.png") == "cover.png"


class TestCategory:
    def test_default_category(self):
        assert parse_category(None) == DEFAULT_CATEGORY == SubmissionCategory.FANART
        assert parse_category("") == SubmissionCategory.FANART

    @pytest.mark.parametrize("value", ["official", "anime", "wallpaper", "fanart"])
    def test_known_categories(self, value):
        assert parse_category(value).value == value

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            parse_category("memes")


class TestStorageKey:
    def test_deterministic_parts(self):
        key = generate_storage_key("my art.png", "fanart", timestamp_ms=1700000000000, token="abc123")
        assert key == "images/fanart/1700000000000_abc123_my_art.png"

    def test_format(self):
        key = generate_storage_key("sunset.jpeg", "official")
        assert re.fullmatch(r"images/official/\d{13}_[0-9a-f]{12}_sunset\.jpeg", key)

    def test_keys_are_unique(self):
        keys = {generate_storage_key("a.png", "anime") for _ in range(200)}
        assert len(keys) == 200

    def test_no_extension(self):
        key = generate_storage_key("README", "wallpaper", timestamp_ms=1, token="t")
        assert key == "images/wallpaper/1_t_README"
