"""FastAPI dependencies for upload limits and service construction."""

from typing import Optional

from fastapi import Depends, Header, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.logging_config import get_logger
from app.db.session import get_session
from app.services.booking_service import BookingService
from app.services.event_service import EventService
from app.services.image_uploader import ImageUploader
from app.storage import StorageBackend, get_storage


logger = get_logger(__name__)

# Room for the text fields sent alongside the image in the same multipart body
FORM_OVERHEAD_BYTES = 1024 * 1024


async def verify_content_length(
    content_length: Optional[int] = Header(None),
) -> Optional[int]:
    """Pre-validate upload size before the body is parsed.

    Raises:
        HTTPException: 413 if the request body is clearly too large

    Returns:
        int: Content length if valid
    """
    max_size = settings.max_upload_bytes + FORM_OVERHEAD_BYTES
    if content_length and content_length > max_size:
        logger.warning(
            "upload_too_large",
            content_length=content_length,
            max_size=max_size,
        )
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum allowed: {settings.MAX_UPLOAD_SIZE_MB}MB"
        )
    return content_length


async def read_image(file: Optional[UploadFile]) -> Optional[bytes]:
    """Read an uploaded image into memory, capped just past the size limit.

    Returns None when no file (or an empty file field without a name) was sent.
    The cap keeps an oversized upload from being read in full; the uploader
    then rejects it on size.
    """
    if file is None or (not file.filename and not file.size):
        return None
    data = await file.read(settings.max_upload_bytes + 1)
    await file.close()
    return data


def get_image_uploader(
    storage: StorageBackend = Depends(get_storage),
) -> ImageUploader:
    return ImageUploader(storage)


def get_event_service(
    session: AsyncSession = Depends(get_session),
    uploader: ImageUploader = Depends(get_image_uploader),
) -> EventService:
    """Factory for EventService with dependency injection.

    Injects the memoized database session and the configured image store,
    keeping the service free of FastAPI concerns.
    """
    return EventService(session, uploader)


def get_booking_service(
    session: AsyncSession = Depends(get_session),
) -> BookingService:
    return BookingService(session)
