"""Blob store for book photos.

Photos are plain files under ``<target_folder>/books``, named by a uuid4
locator. The same folder is served read-only under ``/images``.
"""

import asyncio
import logging
import uuid
from pathlib import Path

from booktrade.config import Settings
from booktrade.errors import StorageError

logger = logging.getLogger(__name__)


class BlobStore:
    """Writes and removes photo blobs on the local filesystem."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.root: Path = settings.books_folder

    def new_locator(self) -> str:
        """Fresh, never reused storage name."""
        return f"{uuid.uuid4()}.jpg"

    def path_for(self, locator: str) -> Path:
        # Locators are bare file names; anything else would escape the root
        if not locator or Path(locator).name != locator:
            raise StorageError(f"Invalid image locator: {locator!r}")
        return self.root / locator

    def public_url(self, locator: str) -> str:
        return self.settings.backend_url(f"images/{locator}")

    async def save(self, data: bytes) -> str:
        """Write ``data`` under a new locator and return the locator."""
        locator = self.new_locator()
        path = self.path_for(locator)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            logger.error(f"Failed to write blob {locator}: {e}")
            raise StorageError("Image could not be stored") from e
        logger.debug(f"Stored blob {locator} ({len(data)} bytes)")
        return locator

    async def delete(self, locator: str) -> bool:
        """Remove a blob. Returns False when it was already gone."""
        path = self.path_for(locator)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            logger.warning(f"Blob {locator} already missing on delete")
            return False
        except OSError as e:
            logger.error(f"Failed to delete blob {locator}: {e}")
            raise StorageError("Image could not be removed") from e
        return True

    def exists(self, locator: str) -> bool:
        return self.path_for(locator).is_file()

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
