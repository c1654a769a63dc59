"""Application configuration using Pydantic Settings."""

import re
from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import os


class ImageBoxConfig(BaseModel):
    """Bounding box that uploaded event images are fitted into.

    Images larger than the box are scaled down keeping their aspect ratio;
    smaller images are never upscaled.
    """
    width: int = 1200
    height: int = 630

    @field_validator('width', 'height')
    @classmethod
    def validate_dimension(cls, v: int) -> int:
        """Ensure dimensions are positive and reasonable."""
        if v <= 0:
            raise ValueError(f"Image dimension must be positive, got {v}")
        if v > 8192:
            raise ValueError(f"Image dimension too large (max 8192), got {v}")
        return v


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Service Identity
    SERVICE_NAME: str = "devevent-api"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development, staging, production

    # Logging Configuration
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_JSON: bool = True    # JSON logs (prod) vs pretty console (dev)
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = f"sqlite+aiosqlite:///{os.path.join(os.getcwd(), 'devevent.db')}"

    # Storage Backend Configuration
    STORAGE_BACKEND: str = "local"  # Options: "local" or "s3"
    STORAGE_PATH: str = os.path.join(os.getcwd(), "storage")
    STORAGE_BUCKET: str = "images"
    PUBLIC_BASE_URL: str = ""  # Prefix for local image URLs, e.g. "https://devevent.example"

    # S3 Storage Configuration
    AWS_REGION: str = "eu-west-1"
    AWS_S3_BUCKET_NAME: str = "devevent-dev"
    AWS_ENDPOINT_URL: Optional[str] = None  # For MinIO or S3-compatible services

    # Upload Constraints
    MAX_UPLOAD_SIZE_MB: int = 5
    ALLOWED_MIME_TYPES: List[str] = ["image/jpeg", "image/png", "image/webp"]

    # Image transformation applied before storage
    IMAGE_FOLDER: str = "DevEvent"
    IMAGE_BOX: ImageBoxConfig = ImageBoxConfig()
    IMAGE_QUALITY: int = 85
    MAX_IMAGE_PIXELS: int = 50_000_000  # width * height accepted before decoding

    # HTTP
    CORS_ORIGINS: List[str] = ["*"]

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """The engine is async-only, so the URL must name an async driver."""
        if not v:
            raise ValueError("DATABASE_URL must be set")
        scheme = v.split("://", 1)[0]
        if "+" not in scheme:
            raise ValueError(
                f"DATABASE_URL must use an async driver "
                f"(e.g. sqlite+aiosqlite://, postgresql+asyncpg://), got '{scheme}://'"
            )
        return v

    @field_validator('AWS_S3_BUCKET_NAME')
    @classmethod
    def validate_s3_bucket_name(cls, v: str) -> str:
        """Validate S3 bucket name follows AWS naming conventions.

        Rules:
        - 3-63 characters long
        - Lowercase letters, numbers, hyphens, and dots only
        - Must start and end with a letter or number
        - No consecutive dots
        - Not formatted as an IP address
        """
        if not v:  # Allow empty for local storage backend
            return v

        if not 3 <= len(v) <= 63:
            raise ValueError(f"S3 bucket name must be 3-63 characters long, got {len(v)}")

        if not re.match(r'^[a-z0-9][a-z0-9.-]*[a-z0-9]$', v):
            raise ValueError(
                f"S3 bucket name '{v}' must start/end with letter or number, "
                "and contain only lowercase letters, numbers, hyphens, and dots"
            )

        if '..' in v:
            raise ValueError("S3 bucket name cannot contain consecutive dots")

        if re.match(r'^\d+\.\d+\.\d+\.\d+$', v):
            raise ValueError("S3 bucket name cannot be formatted as an IP address")

        return v

    @field_validator('AWS_ENDPOINT_URL')
    @classmethod
    def validate_endpoint_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate AWS endpoint URL format if provided."""
        if v is None or v == "":
            return None

        if not re.match(r'^https?://.+', v):
            raise ValueError(
                f"AWS_ENDPOINT_URL must start with http:// or https://, got '{v}'"
            )

        return v

    @field_validator('IMAGE_QUALITY')
    @classmethod
    def validate_image_quality(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError(f"IMAGE_QUALITY must be between 1 and 100, got {v}")
        return v

    @field_validator('MAX_IMAGE_PIXELS')
    @classmethod
    def validate_max_image_pixels(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"MAX_IMAGE_PIXELS must be positive, got {v}")
        return v

    @model_validator(mode='after')
    def validate_storage_configuration(self):
        """Ensure the selected storage backend has its required configuration."""
        if self.STORAGE_BACKEND not in ("local", "s3"):
            raise ValueError(
                f"STORAGE_BACKEND must be 'local' or 's3', got '{self.STORAGE_BACKEND}'"
            )
        if self.STORAGE_BACKEND == "s3":
            if not self.AWS_S3_BUCKET_NAME:
                raise ValueError(
                    "AWS_S3_BUCKET_NAME must be set when STORAGE_BACKEND=s3"
                )
            if not self.AWS_REGION:
                raise ValueError(
                    "AWS_REGION must be set when STORAGE_BACKEND=s3"
                )
        return self

    @property
    def is_debug_mode(self) -> bool:
        """Check if application is in debug mode."""
        return self.DEBUG or self.LOG_LEVEL.upper() == "DEBUG"

    @property
    def use_json_logs(self) -> bool:
        """Determine if JSON logging should be used.

        In production, always use JSON logs.
        In development, allow override via LOG_JSON setting.
        """
        if self.ENVIRONMENT == "production":
            return True
        if self.DEBUG:
            return self.LOG_JSON
        return True

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024


# Global settings instance
settings = Settings()
