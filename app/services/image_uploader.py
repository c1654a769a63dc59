"""Event image validation, transformation and upload."""

import asyncio
import io
import time
from typing import Optional, Tuple
from uuid import uuid4

from PIL import Image, ImageOps, UnidentifiedImageError
from pydantic import BaseModel

from app.core.config import ImageBoxConfig, settings
from app.core.logging_config import get_logger
from app.storage.protocol import StorageBackend


logger = get_logger(__name__)


class InvalidImage(ValueError):
    """The uploaded bytes are not an acceptable event image."""


class UploadedImage(BaseModel):
    """Where an uploaded image ended up and what it looks like now."""
    url: str
    path: str
    width: int
    height: int
    format: str = "webp"
    size_bytes: int


class ImageUploader:
    """Validates, resizes and stores event images.

    Images are fitted inside the configured box without upscaling, stripped
    of metadata, re-encoded as WebP and stored under
    ``<bucket>/<folder>/<uuid>.webp``.
    """

    def __init__(
        self,
        storage: StorageBackend,
        bucket: str = settings.STORAGE_BUCKET,
        folder: str = settings.IMAGE_FOLDER,
        box: ImageBoxConfig = settings.IMAGE_BOX,
        quality: int = settings.IMAGE_QUALITY,
        max_bytes: int = settings.max_upload_bytes,
        max_pixels: int = settings.MAX_IMAGE_PIXELS,
        allowed_mime_types: Optional[list] = None,
    ):
        self.storage = storage
        self.bucket = bucket
        self.folder = folder.strip("/")
        self.box = box
        self.quality = quality
        self.max_bytes = max_bytes
        self.max_pixels = max_pixels
        self.allowed_mime_types = allowed_mime_types or list(settings.ALLOWED_MIME_TYPES)

    def inspect(self, data: bytes) -> str:
        """Check size and sniff the real content type.

        Never trust the client-declared MIME type; the format is read from
        the bytes themselves.

        Returns:
            str: Detected MIME type

        Raises:
            InvalidImage: With a user-facing message
        """
        if not data:
            raise InvalidImage("Image file cannot be empty")
        if len(data) > self.max_bytes:
            raise InvalidImage(f"Image must be less than {self.max_bytes // (1024 * 1024)}MB")

        try:
            with Image.open(io.BytesIO(data)) as image:
                mime = Image.MIME.get(image.format or "", "")
                pixels = image.width * image.height
        except Image.DecompressionBombError:
            raise InvalidImage("Image dimensions are too large")
        except (UnidentifiedImageError, OSError):
            raise InvalidImage("Image must be JPEG, PNG, or WebP format")

        if mime not in self.allowed_mime_types:
            raise InvalidImage("Image must be JPEG, PNG, or WebP format")

        if pixels > self.max_pixels:
            raise InvalidImage("Image dimensions are too large")
        return mime

    def transform(self, data: bytes) -> Tuple[bytes, int, int]:
        """Fit the image into the box and re-encode it as WebP.

        Returns:
            tuple: (webp_bytes, width, height)
        """
        try:
            with Image.open(io.BytesIO(data)) as opened:
                image = ImageOps.exif_transpose(opened)
                image.load()
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
            raise InvalidImage(f"Image could not be decoded: {exc}")

        if image.mode not in ("RGB", "RGBA"):
            has_alpha = image.mode in ("LA", "PA") or "transparency" in image.info
            image = image.convert("RGBA" if has_alpha else "RGB")

        # thumbnail() only ever shrinks, keeping the aspect ratio
        image.thumbnail((self.box.width, self.box.height), Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        image.save(buffer, format="WEBP", quality=self.quality, method=6)
        return buffer.getvalue(), image.width, image.height

    async def upload(self, data: bytes) -> UploadedImage:
        """Validate, transform and store an image.

        Raises:
            InvalidImage: If the image is rejected
            Exception: Whatever the storage backend raised
        """
        start_time = time.time()
        detected_mime = self.inspect(data)

        webp_bytes, width, height = await asyncio.to_thread(self.transform, data)

        path = f"{self.folder}/{uuid4().hex}.webp" if self.folder else f"{uuid4().hex}.webp"
        await self.storage.save(io.BytesIO(webp_bytes), self.bucket, path, content_type="image/webp")
        url = await self.storage.get_url(self.bucket, path)

        logger.info(
            "image_uploaded",
            path=path,
            source_mime=detected_mime,
            original_bytes=len(data),
            stored_bytes=len(webp_bytes),
            width=width,
            height=height,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )

        return UploadedImage(
            url=url,
            path=path,
            width=width,
            height=height,
            size_bytes=len(webp_bytes),
        )

    async def remove(self, path: str) -> None:
        """Delete a previously uploaded image by its path within the bucket."""
        await self.storage.delete(self.bucket, path)
        logger.info("image_removed", path=path)
