"""AWS S3 storage backend."""

import aioboto3
from typing import BinaryIO, Optional
from botocore.exceptions import ClientError, BotoCoreError

from app.core.logging_config import get_logger


logger = get_logger(__name__)


class S3StorageBackend:
    """AWS S3 storage implementation using a single bucket with prefixes.

    The logical "bucket" argument (e.g. "images") becomes a key prefix inside
    one physical S3 bucket. Objects are written publicly readable so event
    pages can embed their URLs directly.

    Supports both AWS S3 and S3-compatible services (e.g., MinIO) via endpoint_url.
    """

    def __init__(
        self,
        region: str,
        bucket_name: str,
        endpoint_url: Optional[str] = None
    ):
        """Initialize S3 storage backend.

        Args:
            region: AWS region name (e.g., "eu-west-1")
            bucket_name: Physical S3 bucket name
            endpoint_url: Optional S3-compatible endpoint (e.g., "http://minio:9000")
        """
        self.session = aioboto3.Session()
        self.region = region
        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url

        logger.info(
            "s3_storage_backend_initialized",
            region=self.region,
            bucket_name=self.bucket_name,
            endpoint_url=self.endpoint_url,
            s3_compatible=bool(endpoint_url),
        )

    def _get_s3_client(self):
        return self.session.client(
            's3',
            region_name=self.region,
            endpoint_url=self.endpoint_url
        )

    @staticmethod
    def _normalize_path(bucket: str, path: str) -> str:
        """Normalize and validate S3 object key.

        Raises:
            ValueError: If bucket or path are invalid
        """
        if not bucket or not bucket.strip():
            raise ValueError("Bucket parameter cannot be empty")
        if not path or not path.strip():
            raise ValueError("Path parameter cannot be empty")

        bucket = bucket.strip().strip('/')
        path = path.strip().strip('/')

        if not bucket:
            raise ValueError("Bucket parameter contains only whitespace or slashes")
        if not path:
            raise ValueError("Path parameter contains only whitespace or slashes")

        if '..' in bucket or '..' in path:
            raise ValueError("Path traversal patterns (..) are not allowed")

        s3_key = f"{bucket}/{path}"

        # S3 limit is 1024 bytes
        if len(s3_key.encode('utf-8')) > 1024:
            raise ValueError(
                f"S3 object key too long ({len(s3_key.encode('utf-8'))} bytes, max 1024)"
            )

        return s3_key

    def _handle_s3_error(
        self,
        exc: Exception,
        operation: str,
        bucket: str,
        path: str
    ) -> Exception:
        """Translate boto errors into builtin exceptions with context."""
        error_context = {
            "operation": operation,
            "logical_bucket": bucket,
            "path": path,
            "physical_bucket": self.bucket_name,
        }

        if isinstance(exc, ClientError):
            error_code = exc.response.get('Error', {}).get('Code', 'Unknown')
            error_context.update({
                "error_code": error_code,
                "error_message": exc.response.get('Error', {}).get('Message', str(exc)),
                "http_status": exc.response.get('ResponseMetadata', {}).get('HTTPStatusCode'),
            })

            if error_code == 'NoSuchBucket':
                return FileNotFoundError(
                    f"S3 bucket '{self.bucket_name}' does not exist. Context: {error_context}"
                )
            elif error_code == 'NoSuchKey':
                return FileNotFoundError(
                    f"Object not found in S3: {bucket}/{path}. Context: {error_context}"
                )
            elif error_code in ('AccessDenied', '403'):
                return PermissionError(
                    f"Access denied to S3 bucket '{self.bucket_name}'. Context: {error_context}"
                )

        elif isinstance(exc, BotoCoreError):
            error_context["botocore_error"] = type(exc).__name__

        return RuntimeError(f"{operation.capitalize()} failed: {exc}. Context: {error_context}")

    async def save(
        self,
        file: BinaryIO,
        bucket: str,
        path: str,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload file to S3.

        Returns:
            str: Storage path in format "bucket/path"

        Raises:
            ValueError: If bucket or path are invalid
            FileNotFoundError: If S3 bucket doesn't exist
            PermissionError: If access is denied
        """
        s3_key = self._normalize_path(bucket, path)
        extra_args = {'ServerSideEncryption': 'AES256', 'ACL': 'public-read'}
        if content_type:
            extra_args['ContentType'] = content_type

        try:
            if hasattr(file, 'seek'):
                file.seek(0)

            async with self._get_s3_client() as s3:
                await s3.upload_fileobj(file, self.bucket_name, s3_key, ExtraArgs=extra_args)

            logger.info(
                "s3_storage_save_success",
                physical_bucket=self.bucket_name,
                s3_key=s3_key,
                content_type=content_type,
            )
            return s3_key

        except Exception as exc:
            logger.error(
                "s3_storage_save_failed",
                physical_bucket=self.bucket_name,
                s3_key=s3_key,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            raise self._handle_s3_error(exc, "upload", bucket, path)

    async def load(self, bucket: str, path: str) -> bytes:
        """Download file from S3."""
        s3_key = self._normalize_path(bucket, path)

        try:
            async with self._get_s3_client() as s3:
                response = await s3.get_object(Bucket=self.bucket_name, Key=s3_key)
                data = await response['Body'].read()
        except Exception as exc:
            logger.error(
                "s3_storage_load_failed",
                physical_bucket=self.bucket_name,
                s3_key=s3_key,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise self._handle_s3_error(exc, "download", bucket, path)

        logger.debug("s3_storage_load_success", s3_key=s3_key, bytes_read=len(data))
        return data

    async def delete(self, bucket: str, path: str) -> None:
        """Delete file from S3 (idempotent on S3's side)."""
        s3_key = self._normalize_path(bucket, path)

        try:
            async with self._get_s3_client() as s3:
                await s3.delete_object(Bucket=self.bucket_name, Key=s3_key)
        except Exception as exc:
            logger.error(
                "s3_storage_delete_failed",
                physical_bucket=self.bucket_name,
                s3_key=s3_key,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise self._handle_s3_error(exc, "delete", bucket, path)

        logger.info("s3_storage_delete_success", physical_bucket=self.bucket_name, s3_key=s3_key)

    async def get_url(self, bucket: str, path: str) -> str:
        """Public object URL (virtual-hosted style, or path style for custom endpoints)."""
        s3_key = self._normalize_path(bucket, path)
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{s3_key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{s3_key}"
