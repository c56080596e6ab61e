"""Local staging store for unreviewed submissions.

Staged files live under a private directory that is not part of the public
gallery serving path. Keys are relative POSIX paths produced by
generate_storage_key, e.g. images/fanart/1700000000000_ab12cd_cat.png.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from ...domain.submissions.errors import StagingWriteError
from ...domain.submissions.storage_keys import generate_storage_key

logger = logging.getLogger(__name__)


class LocalStagingStore:
    """Filesystem-backed staging area.

    Writes are atomic (temp file + os.replace) so a crash never leaves a
    half-written file under a key a row points at. Deletes are idempotent.

    Example:
        staging = LocalStagingStore("./temp/pending-images", "http://localhost:8000/api/v1/review/staged")
        key = staging.generate_key("cat.png", "fanart")
        staging.write(key, content)
        staging.read(key)
        staging.delete(key)
    """

    def __init__(self, root_dir: Union[str, Path], base_url: str):
        self.root_dir = Path(root_dir).resolve()
        self.base_url = base_url.rstrip("/")
        self.root_dir.mkdir(parents=True, exist_ok=True)

    def generate_key(self, original_filename: str, category: str) -> str:
        return generate_storage_key(original_filename, category)

    def write(self, key: str, content: bytes) -> None:
        """Atomically write content under key.

        Raises:
            StagingWriteError: If the file cannot be written
        """
        path = self._resolve(key)
        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".upload-", suffix=".tmp")
            with os.fdopen(fd, "wb") as tmp_file:
                tmp_file.write(content)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            logger.error(f"Staging write failed: key={key}, error={e}")
            raise StagingWriteError(f"Failed to stage file: {e}") from e

        logger.debug(f"Staged file: key={key}, size={len(content)}")

    def read(self, key: str) -> bytes:
        """Read staged bytes.

        Raises:
            FileNotFoundError: If nothing is staged under key
        """
        return self._resolve(key).read_bytes()

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def delete(self, key: str) -> bool:
        """Delete the staged file under key.

        Returns:
            bool: True if a file was removed, False if it was already absent

        Raises:
            OSError: If the file exists but cannot be removed
        """
        try:
            self._resolve(key).unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted staged file: key={key}")
        return True

    def public_url(self, key: str) -> str:
        """Preview URL operators use to look at a staged file."""
        return f"{self.base_url}/{key}"

    def _resolve(self, key: str) -> Path:
        path = (self.root_dir / key).resolve()
        if self.root_dir not in path.parents:
            raise ValueError(f"Staging key escapes staging root: {key}")
        return path
