"""
Configuration tests for the DevEvent API.

Tests the type-safe Pydantic configuration system.
"""

import pytest
from pydantic import ValidationError

from app.core.config import ImageBoxConfig, Settings


# ============================================================================
# ImageBoxConfig tests
# ============================================================================

@pytest.mark.unit
def test_image_box_default_values():
    """Event images fit a 1200x630 box by default."""
    config = ImageBoxConfig()

    assert config.width == 1200
    assert config.height == 630


@pytest.mark.unit
def test_image_box_validation_zero():
    with pytest.raises(ValidationError) as exc_info:
        ImageBoxConfig(width=0)

    errors = exc_info.value.errors()
    assert len(errors) > 0
    assert "positive" in str(errors[0]["msg"]).lower()


@pytest.mark.unit
def test_image_box_validation_too_large():
    """Test ImageBoxConfig rejects dimensions over 8192."""
    with pytest.raises(ValidationError) as exc_info:
        ImageBoxConfig(height=10000)

    assert "too large" in str(exc_info.value.errors()[0]["msg"]).lower()


# ============================================================================
# Settings tests
# ============================================================================

@pytest.mark.unit
def test_settings_defaults():
    settings = Settings()

    assert settings.SERVICE_NAME == "devevent-api"
    assert settings.MAX_UPLOAD_SIZE_MB == 5
    assert settings.max_upload_bytes == 5 * 1024 * 1024
    assert settings.IMAGE_FOLDER == "DevEvent"
    assert isinstance(settings.IMAGE_BOX, ImageBoxConfig)
    assert "image/webp" in settings.ALLOWED_MIME_TYPES


@pytest.mark.unit
def test_settings_rejects_sync_database_driver():
    """The engine is async-only; a plain sqlite:// URL is refused."""
    with pytest.raises(ValidationError) as exc_info:
        Settings(DATABASE_URL="sqlite:///devevent.db")

    assert "async driver" in str(exc_info.value)


@pytest.mark.unit
def test_settings_accepts_async_database_driver():
    settings = Settings(DATABASE_URL="postgresql+asyncpg://user:pw@db/devevent")
    assert settings.DATABASE_URL.startswith("postgresql+asyncpg://")


@pytest.mark.unit
def test_settings_rejects_unknown_storage_backend():
    with pytest.raises(ValidationError) as exc_info:
        Settings(STORAGE_BACKEND="cloudinary")

    assert "STORAGE_BACKEND" in str(exc_info.value)


@pytest.mark.unit
@pytest.mark.parametrize("bucket", ["ab", "Upper-Case", "bad..dots", "192.168.1.1"])
def test_settings_rejects_invalid_s3_bucket_names(bucket):
    with pytest.raises(ValidationError):
        Settings(AWS_S3_BUCKET_NAME=bucket)


@pytest.mark.unit
def test_settings_endpoint_url_requires_scheme():
    with pytest.raises(ValidationError):
        Settings(AWS_ENDPOINT_URL="minio:9000")

    assert Settings(AWS_ENDPOINT_URL="").AWS_ENDPOINT_URL is None


@pytest.mark.unit
@pytest.mark.parametrize("quality", [0, 101])
def test_settings_image_quality_bounds(quality):
    with pytest.raises(ValidationError):
        Settings(IMAGE_QUALITY=quality)


@pytest.mark.unit
def test_settings_debug_mode_from_log_level():
    assert Settings(LOG_LEVEL="debug").is_debug_mode is True
    assert Settings(LOG_LEVEL="INFO", DEBUG=False).is_debug_mode is False


@pytest.mark.unit
def test_settings_json_logs_forced_in_production():
    settings = Settings(ENVIRONMENT="production", DEBUG=True, LOG_JSON=False)
    assert settings.use_json_logs is True

    settings = Settings(ENVIRONMENT="development", DEBUG=True, LOG_JSON=False)
    assert settings.use_json_logs is False
