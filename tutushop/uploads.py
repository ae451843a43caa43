# tutushop/uploads.py
import logging
import os
import random
import time
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from .config import Settings
from .errors import BadRequest, PayloadTooLarge, UnsupportedMediaType
from .models import UploadResult

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def generate_filename(original_name: Optional[str]) -> str:
    """<unix-millis>-<random>.<original-extension>"""
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    ext = os.path.splitext(original_name or "")[1]
    return suffix + ext


class UploadHandler:
    """Stores one kind of upload (images or audio) under its own directory."""

    def __init__(self, kind: str, directory: Path, url_prefix: str, mime_prefix: str, max_bytes: int):
        self.kind = kind
        self.directory = directory
        self.url_prefix = url_prefix.rstrip("/")
        self.mime_prefix = mime_prefix
        self.max_bytes = max_bytes

    async def save(self, upload: Optional[UploadFile]) -> UploadResult:
        if upload is None or not upload.filename:
            raise BadRequest(f"No {self.kind} file provided")
        if not (upload.content_type or "").startswith(self.mime_prefix):
            raise UnsupportedMediaType(f"Only {self.kind} files are allowed!")

        await aiofiles.os.makedirs(self.directory, exist_ok=True)
        filename = generate_filename(upload.filename)
        path = self.directory / filename

        written = 0
        too_large = False
        try:
            async with aiofiles.open(path, "wb") as out:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        too_large = True
                        break
                    await out.write(chunk)
        except Exception:
            await self._discard(path)
            raise

        if too_large:
            await self._discard(path)
            logger.warning("Rejected %s upload %r: larger than %d bytes", self.kind, upload.filename, self.max_bytes)
            raise PayloadTooLarge("File too large")

        logger.info("Stored %s upload %s (%d bytes)", self.kind, filename, written)
        return UploadResult(url=f"{self.url_prefix}/{filename}", filename=filename)

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass


def image_handler(settings: Settings) -> UploadHandler:
    return UploadHandler("image", settings.images_dir, "/uploads/images", "image/", settings.image_max_bytes)


def audio_handler(settings: Settings) -> UploadHandler:
    return UploadHandler("audio", settings.audio_dir, "/uploads/audio", "audio/", settings.audio_max_bytes)
