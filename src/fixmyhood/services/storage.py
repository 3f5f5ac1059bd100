"""Local-disk blob storage for report and comment photos."""

from __future__ import annotations

import logging
import shutil
from functools import lru_cache
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

from fixmyhood.core.settings import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})


class BlobStoreError(RuntimeError):
    """Raised when a blob cannot be stored."""


class LocalBlobStore:
    """Stores uploads as ``<owner>/<uuid><ext>`` under ``base_dir``.

    Public URLs are ``<url_prefix>/<owner>/<name>``; :meth:`remove` only acts on
    URLs carrying that prefix.
    """

    def __init__(self, base_dir: Path, url_prefix: str) -> None:
        self.base_dir = base_dir
        self.url_prefix = url_prefix.rstrip("/")

    def save(self, stream: BinaryIO, *, owner_id: str, filename: str) -> str:
        """Copy ``stream`` into the store and return its public URL."""
        suffix = Path(filename).suffix.lower()
        if suffix not in ALLOWED_IMAGE_EXTENSIONS:
            raise BlobStoreError(f"Unsupported file type: {suffix or 'none'}")
        owner_dir = self.base_dir / owner_id
        owner_dir.mkdir(parents=True, exist_ok=True)
        name = f"{uuid4()}{suffix}"
        destination = owner_dir / name
        stream.seek(0)
        with destination.open("wb") as buffer:
            shutil.copyfileobj(stream, buffer)
        return f"{self.url_prefix}/{owner_id}/{name}"

    def path_for(self, url: str) -> Path | None:
        """Return the on-disk path behind a URL this store issued."""
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            return None
        relative = Path(url[len(prefix):])
        if relative.is_absolute() or ".." in relative.parts:
            return None
        return self.base_dir / relative

    def remove(self, url: str | None) -> bool:
        """Delete the blob behind ``url``; foreign or missing blobs are ignored."""
        if not url:
            return False
        path = self.path_for(url)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Could not remove blob %s: %s", path, exc)
            return False
        return True


@lru_cache(maxsize=1)
def get_blob_store() -> LocalBlobStore:
    """Return the blob store configured by settings."""
    return LocalBlobStore(Path(settings.upload_dir), settings.upload_url_prefix)
