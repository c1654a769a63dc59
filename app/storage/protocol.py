"""Storage backend protocol definition."""

from typing import Protocol, BinaryIO, Optional


class StorageBackend(Protocol):
    """Interface implemented by every image store.

    Lets the application switch between local filesystem and S3 without
    changing service code.
    """

    async def save(
        self,
        file: BinaryIO,
        bucket: str,
        path: str,
        content_type: Optional[str] = None,
    ) -> str:
        """Save file to storage.

        Args:
            file: Binary file object to save
            bucket: Storage bucket/container name
            path: Relative path within bucket
            content_type: MIME type recorded with the object, if supported

        Returns:
            str: Storage path identifier ("bucket/path")
        """
        ...

    async def load(self, bucket: str, path: str) -> bytes:
        """Load file from storage."""
        ...

    async def delete(self, bucket: str, path: str) -> None:
        """Delete file from storage. Deleting a missing file is not an error."""
        ...

    async def get_url(self, bucket: str, path: str) -> str:
        """Get the public URL for a stored file."""
        ...
