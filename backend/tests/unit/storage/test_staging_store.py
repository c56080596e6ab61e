"""Unit tests for the local staging store"""

import os

import pytest

from fanvault.domain.submissions.errors import StagingWriteError
from fanvault.infrastructure.storage.staging_store import LocalStagingStore


@pytest.fixture
def store(tmp_path):
    return LocalStagingStore(tmp_path / "pending-images", "http://preview.test/staged/")


class TestStagingStore:
    def test_root_is_created(self, tmp_path):
        LocalStagingStore(tmp_path / "new" / "root", "http://preview.test")
        assert (tmp_path / "new" / "root").is_dir()

    def test_write_and_read(self, store):
        key = store.generate_key("cat.png", "fanart")
        store.write(key, b"cat-bytes")

        assert store.exists(key)
        assert store.read(key) == b"cat-bytes"
        assert key.startswith("images/fanart/")

    def test_write_leaves_no_temp_files(self, store):
        key = store.generate_key("cat.png", "anime")
        store.write(key, b"cat-bytes")

        directory = (store.root_dir / key).parent
        assert os.listdir(directory) == [os.path.basename(key)]

    def test_overwrite_is_atomic_replace(self, store):
        key = store.generate_key("cat.png", "anime")
        store.write(key, b"first")
        store.write(key, b"second")
        assert store.read(key) == b"second"

    def test_read_missing_raises(self, store):
        with pytest.raises(FileNotFoundError):
            store.read("images/fanart/missing.png")

    def test_delete_is_idempotent(self, store):
        key = store.generate_key("cat.png", "fanart")
        store.write(key, b"x")

        assert store.delete(key) is True
        assert store.delete(key) is False
        assert not store.exists(key)

    def test_public_url(self, store):
        assert store.public_url("images/fanart/a.png") == "http://preview.test/staged/images/fanart/a.png"

    def test_key_cannot_escape_root(self, store):
        with pytest.raises(ValueError):
            store.read("../../etc/passwd")

    def test_write_failure_raises_staging_write_error(self, store, monkeypatch):
        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        key = store.generate_key("cat.png", "fanart")

        with pytest.raises(StagingWriteError):
            store.write(key, b"x")

        directory = (store.root_dir / key).parent
        assert os.listdir(directory) == []
