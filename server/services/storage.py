"""
Blob storage for ingested repository files.

Files are written under BLOB_STORAGE_DIR using their key as the relative
path, e.g. repositories/<id>/src/app.py.
"""

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from config import BLOB_STORAGE_DIR

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised for invalid keys or unreadable blobs"""


@dataclass
class StoredObject:
    key: str
    size: int
    last_modified: datetime


def repository_prefix(repository_id: str) -> str:
    return f"repositories/{repository_id}"


class BlobStore:
    def __init__(self, root: str | Path = BLOB_STORAGE_DIR):
        self.root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        parts = PurePosixPath(key.replace("\\", "/")).parts
        if not parts or key.startswith("/") or any(part in ("..", "") for part in parts):
            raise StorageError(f"Invalid blob key: {key!r}")
        path = (self.root / Path(*parts)).resolve()
        if self.root not in path.parents:
            raise StorageError(f"Blob key escapes storage root: {key!r}")
        return path

    def put(self, key: str, content: str) -> StoredObject:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8")
        path.write_bytes(data)
        return StoredObject(key=key, size=len(data), last_modified=_mtime(path))

    def get(self, key: str) -> str | None:
        """Return the blob's text, or None when it does not exist."""
        path = self._path_for(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read blob {key}: {e}")
            raise StorageError(f"Failed to read blob {key}") from e

    def list(self, prefix: str) -> list[StoredObject]:
        """All blobs under `prefix`, sorted by key."""
        base = self._path_for(prefix.rstrip("/"))
        if not base.is_dir():
            return []

        objects = []
        for path in sorted(base.rglob("*")):
            if not path.is_file():
                continue
            key = path.relative_to(self.root).as_posix()
            objects.append(StoredObject(key=key, size=path.stat().st_size, last_modified=_mtime(path)))
        return objects

    def delete_prefix(self, prefix: str) -> None:
        """Remove every blob under `prefix`. Missing prefixes are ignored."""
        base = self._path_for(prefix.rstrip("/"))
        if base.is_dir():
            shutil.rmtree(base)
        elif base.is_file():
            base.unlink()


def _mtime(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


def get_blob_store() -> BlobStore:
    """FastAPI dependency"""
    return BlobStore()
