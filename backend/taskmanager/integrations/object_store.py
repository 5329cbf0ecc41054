"""File-system backed object store for user uploads."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path


class ObjectStoreError(RuntimeError):
    """Raised when storage operations fail."""


@dataclass(frozen=True)
class StoredObject:
    """Metadata for an object written to the store."""

    key: str
    path: Path
    size: int
    url: str


class ObjectStore:
    """Stores blobs under ``root`` and publishes them below ``url_prefix``."""

    def __init__(self, root: Path, *, url_prefix: str = "/uploads") -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _normalise_key(self, key: str) -> str:
        normalised = key.lstrip("/")
        if not normalised:
            raise ObjectStoreError("Storage object key cannot be empty")
        if any(part in {"", ".", ".."} for part in normalised.split("/")):
            raise ObjectStoreError(f"Invalid storage object key: {key!r}")
        return normalised

    def _path_for(self, key: str) -> Path:
        path = self.root / self._normalise_key(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def put_object(self, key: str, data: bytes) -> StoredObject:
        """Write ``data`` in one step: a temp file renamed into place."""
        path = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise ObjectStoreError(f"Could not store object {key}") from exc
        return StoredObject(
            key=self._normalise_key(key),
            path=path,
            size=len(data),
            url=self.build_object_url(key),
        )

    def delete_object(self, key: str) -> bool:
        """Remove an object; returns False when it did not exist."""
        path = self.root / self._normalise_key(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise ObjectStoreError(f"Could not delete object {key}") from exc
        return True

    def build_object_url(self, key: str) -> str:
        return f"{self.url_prefix}/{self._normalise_key(key)}"

    def key_for_url(self, url: str) -> str | None:
        """Inverse of ``build_object_url``; None for URLs this store did not issue."""
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            return None
        try:
            return self._normalise_key(url[len(prefix):])
        except ObjectStoreError:
            return None


def build_object_store(**overrides: object) -> ObjectStore:
    """Factory that honours application settings."""

    from taskmanager.core.config import get_settings

    settings = get_settings()
    root = overrides.get("root") or settings.upload_dir
    url_prefix = overrides.get("url_prefix") or settings.uploads_url_prefix
    return ObjectStore(Path(str(root)), url_prefix=str(url_prefix))
