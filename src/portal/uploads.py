"""Storage for uploaded slide images and watermarks."""

import asyncio
import functools
import logging
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO

from fastapi import UploadFile


UPLOAD_CHUNK_SIZE = 1024 * 1024


def _copy_stream(source: BinaryIO, target: Path, chunk_size: int = UPLOAD_CHUNK_SIZE) -> None:
    source.seek(0)
    with target.open("wb") as buffer:
        shutil.copyfileobj(source, buffer, length=chunk_size)


class UploadStorage:
    """Saves uploaded files under the public media directories."""

    def __init__(self, upload_dir: str, watermark_dir: str):
        """Initialize upload storage."""
        self.upload_dir = Path(upload_dir)
        self.watermark_dir = Path(watermark_dir)
        self.logger = logging.getLogger(__name__)

    def ensure_directories(self) -> None:
        """Create media directories. Failure aborts startup."""
        for directory in (self.upload_dir, self.watermark_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.logger.error(f"Error creating directory {directory}: {e}")
                raise

    async def save_image(self, upload: UploadFile) -> str:
        """Store a slide image and return its public path."""
        filename = f"{uuid.uuid4()}-{self._safe_name(upload.filename)}"
        await self._persist(upload, self.upload_dir / filename)
        self.logger.info(f"Stored slide image {filename}")
        return f"/upload/{filename}"

    async def save_watermark(self, upload: UploadFile) -> str:
        """Store a watermark image and return its public path."""
        extension = Path(self._safe_name(upload.filename)).suffix
        filename = f"watermark-{uuid.uuid4()}{extension}"
        await self._persist(upload, self.watermark_dir / filename)
        self.logger.info(f"Stored watermark {filename}")
        return f"/watermarks/{filename}"

    @staticmethod
    def _safe_name(filename: str) -> str:
        # Browsers may send a full client path
        name = Path(filename.replace("\\", "/")).name
        return name.replace(" ", "_") or "upload"

    async def _persist(self, upload: UploadFile, target: Path) -> None:
        """Copy the upload to disk without blocking the event loop."""
        loop = asyncio.get_running_loop()
        copy_operation = functools.partial(_copy_stream, upload.file, target)
        try:
            await loop.run_in_executor(None, copy_operation)
        except OSError:
            target.unlink(missing_ok=True)
            raise
        finally:
            await upload.close()
