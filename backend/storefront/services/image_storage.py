"""
Image Storage
Stores uploaded product images on local disk

Images are referenced by their public path, "/uploads/<file name>", which is
what gets persisted in the products table.
"""
import logging
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/"


class ImageStorage:
    """Stores bytes and hands back a reference path"""

    def __init__(self, upload_dir: str):
        self.upload_dir = Path(upload_dir)

    @staticmethod
    def is_reference(path) -> bool:
        return isinstance(path, str) and path.startswith(PUBLIC_PREFIX)

    def _file_for(self, reference: str) -> Optional[Path]:
        if not self.is_reference(reference):
            return None
        # Only the last component: references must not escape upload_dir
        name = Path(reference[len(PUBLIC_PREFIX):]).name
        if not name:
            return None
        return self.upload_dir / name

    def save(self, original_filename: str, data: bytes) -> str:
        """
        Write an upload to disk

        The stored name is "<epoch millis>-<original stem><ext>" so repeated
        uploads of the same file never collide.

        Returns:
            Reference path, e.g. "/uploads/1700000000000-chair.jpg"
        """
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        original = Path(original_filename or "upload").name
        stem, suffix = Path(original).stem, Path(original).suffix
        filename = f"{int(time.time() * 1000)}-{stem}{suffix}"
        target = self.upload_dir / filename

        counter = 1
        while target.exists():
            filename = f"{int(time.time() * 1000)}-{stem}-{counter}{suffix}"
            target = self.upload_dir / filename
            counter += 1

        target.write_bytes(data)
        logger.debug(f"Stored image {filename} ({len(data)} bytes)")
        return f"{PUBLIC_PREFIX}{filename}"

    def delete(self, reference: str) -> bool:
        """
        Remove the file behind a reference path

        Returns:
            True if a file was removed. Failures are logged, never raised.
        """
        target = self._file_for(reference)
        if target is None or not target.exists():
            return False
        try:
            target.unlink()
        except OSError as e:
            logger.error(f"Failed to delete image {reference}: {e}")
            return False
        return True
