"""Local filesystem storage backend."""

import aiofiles
from pathlib import Path
from typing import BinaryIO, Optional

from app.core.logging_config import get_logger


logger = get_logger(__name__)


class LocalStorageBackend:
    """Local filesystem storage implementation.

    Stores files in a local directory structure organized by bucket and path.
    Files are served by the application under ``/storage``.
    """

    def __init__(self, base_path: str, public_base_url: str = ""):
        """Initialize local storage backend.

        Args:
            base_path: Root directory for file storage
            public_base_url: Scheme and host prefixed to returned URLs
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, bucket: str, path: str) -> Path:
        full_path = (self.base_path / bucket / path).resolve()
        if self.base_path.resolve() not in full_path.parents:
            raise ValueError("Path traversal patterns (..) are not allowed")
        return full_path

    async def save(
        self,
        file: BinaryIO,
        bucket: str,
        path: str,
        content_type: Optional[str] = None,
    ) -> str:
        """Save file to local filesystem.

        Returns:
            str: Storage path in format "bucket/path"
        """
        full_path = self._resolve(bucket, path)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug(
            "local_storage_save_started",
            bucket=bucket,
            path=path,
            full_path=str(full_path),
        )

        try:
            bytes_written = 0
            async with aiofiles.open(full_path, 'wb') as f:
                while chunk := file.read(8192):
                    await f.write(chunk)
                    bytes_written += len(chunk)

            logger.info(
                "local_storage_save_success",
                bucket=bucket,
                path=path,
                bytes_written=bytes_written,
            )

            return f"{bucket}/{path}"

        except Exception as exc:
            logger.error(
                "local_storage_save_failed",
                bucket=bucket,
                path=path,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            raise

    async def load(self, bucket: str, path: str) -> bytes:
        """Load file from local filesystem."""
        full_path = self._resolve(bucket, path)

        try:
            async with aiofiles.open(full_path, 'rb') as f:
                data = await f.read()
        except FileNotFoundError:
            logger.error(
                "local_storage_load_not_found",
                bucket=bucket,
                path=path,
                full_path=str(full_path),
            )
            raise

        logger.debug("local_storage_load_success", bucket=bucket, path=path, bytes_read=len(data))
        return data

    async def delete(self, bucket: str, path: str) -> None:
        """Delete file from local filesystem."""
        full_path = self._resolve(bucket, path)

        if full_path.exists():
            full_path.unlink()
            logger.info("local_storage_delete_success", bucket=bucket, path=path)
        else:
            logger.warning(
                "local_storage_delete_not_found",
                bucket=bucket,
                path=path,
                full_path=str(full_path),
            )

    async def get_url(self, bucket: str, path: str) -> str:
        """URL served by the ``/storage`` static mount."""
        return f"{self.public_base_url}/storage/{bucket}/{path}"

    def get_local_path(self, bucket: str, path: str) -> Path:
        return self._resolve(bucket, path)
