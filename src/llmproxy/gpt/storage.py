"""Local storage for generated and uploaded files.

Layout under the base directory:

    images/   PNGs produced by image generation, edits and variations
    audios/   MP3s produced by text-to-speech
    uploads/  audio files received for transcription

OpenAI's image edit and variation endpoints only accept RGBA PNGs, so
every stored image is converted with Pillow on the way in.
"""

import asyncio
import base64
import binascii
import io
import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiohttp
from PIL import Image, UnidentifiedImageError

from ..api.exceptions import InvalidUploadError, ResourceNotFoundError, UpstreamServiceError

logger = logging.getLogger(__name__)


# ========== Audio upload validation ==========

ALLOWED_AUDIO_MIME_TYPES = frozenset({
    "audio/mpeg",
    "audio/mp3",
    "audio/mp4",
    "audio/wav",
    "audio/m4a",
    "audio/aac",
    "audio/ogg",
    "audio/webm",
    "audio/flac",
    "audio/x-wav",
    "audio/x-m4a",
})

MAX_AUDIO_UPLOAD_BYTES = 5 * 1000 * 1024


@dataclass
class AudioFileValidator:
    """Rejects uploads that are missing, too large or not audio."""

    allowed_mime_types: frozenset[str] = ALLOWED_AUDIO_MIME_TYPES
    max_size_bytes: int = MAX_AUDIO_UPLOAD_BYTES

    def validate(self, filename: Optional[str], content_type: Optional[str], size: int) -> None:
        if not filename:
            raise InvalidUploadError("No file uploaded")
        if size > self.max_size_bytes:
            raise InvalidUploadError(
                f"File is bigger than {self.max_size_bytes // (1000 * 1024)} MB"
            )
        if content_type not in self.allowed_mime_types:
            raise InvalidUploadError(
                f"Invalid file type. Expected audio file, but received: {content_type}"
            )


# ========== Generated file store ==========


def _timestamp_name(suffix: str) -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{suffix}"


def _to_rgba_png(data: bytes, path: Path) -> None:
    with Image.open(io.BytesIO(data)) as img:
        img.convert("RGBA").save(path, format="PNG")


class GeneratedFileStore:
    """Owns the generated/ directory tree.

    Usage:
        store = GeneratedFileStore(Path("generated"))
        store.ensure_dirs()

        png = await store.download_image_as_png(openai_url)
        path = store.image_path(png.name)
    """

    def __init__(self, base_dir: Path, session: Optional[aiohttp.ClientSession] = None):
        self.base_dir = Path(base_dir)
        self.images_dir = self.base_dir / "images"
        self.audios_dir = self.base_dir / "audios"
        self.uploads_dir = self.base_dir / "uploads"
        self._owns_session = session is None
        self._session = session

    def ensure_dirs(self) -> None:
        for directory in (self.images_dir, self.audios_dir, self.uploads_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=60))
        return self._session

    async def download_image_as_png(self, url: str) -> Path:
        """Download an image and store it as an RGBA PNG.

        Raises:
            UpstreamServiceError: If the download fails
            InvalidUploadError: If the payload is not an image
        """
        try:
            async with self._get_session().get(url) as response:
                response.raise_for_status()
                content = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Image download failed: {e}")
            raise UpstreamServiceError(
                "Download image was not possible", service="image_download", cause=e
            ) from e

        return await self._store_png(content, _timestamp_name(".png"))

    async def save_base64_image_as_png(self, data: str) -> Path:
        """Store a base64 image (data URL header optional) as an RGBA PNG."""
        encoded = data.split(";base64,")[-1]
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidUploadError("Image is not valid base64", cause=e) from e

        return await self._store_png(raw, _timestamp_name("-64.png"))

    async def _store_png(self, data: bytes, file_name: str) -> Path:
        self.images_dir.mkdir(parents=True, exist_ok=True)
        path = self.images_dir / file_name
        try:
            await asyncio.to_thread(_to_rgba_png, data, path)
        except UnidentifiedImageError as e:
            raise InvalidUploadError("Payload is not a recognizable image", cause=e) from e
        logger.info(f"Stored image {path.name}")
        return path

    def new_audio_path(self) -> Path:
        self.audios_dir.mkdir(parents=True, exist_ok=True)
        return self.audios_dir / f"{int(time.time() * 1000)}.mp3"

    def save_upload(self, original_name: str, content: bytes) -> Path:
        """Write an uploaded file under uploads/ with a timestamp name."""
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(original_name).suffix
        path = self.uploads_dir / _timestamp_name(suffix)
        path.write_bytes(content)
        return path

    def audio_path(self, file_id: str) -> Path:
        """Resolve a generated MP3 by id (file name without extension)."""
        return self._resolve(self.audios_dir, f"{_safe_name(file_id)}.mp3", file_id)

    def image_path(self, file_name: str) -> Path:
        """Resolve a generated image by file name."""
        return self._resolve(self.images_dir, _safe_name(file_name), file_name)

    @staticmethod
    def _resolve(directory: Path, name: str, requested: str) -> Path:
        path = directory / name
        if not path.is_file():
            raise ResourceNotFoundError(f"File {requested} not found", resource=requested)
        return path

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None


def _safe_name(name: str) -> str:
    candidate = Path(name).name
    if not candidate or candidate != name or candidate.startswith("."):
        raise ResourceNotFoundError(f"File {name} not found", resource=name)
    return candidate
