"""Application settings and configuration."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: Optional[str] = None
    postgres_user: str = "sightings"
    postgres_password: str = "sightings_dev_password"
    postgres_db: str = "sightings"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    # Redis (Celery broker)
    redis_url: str = "redis://localhost:6379/0"

    # MinIO / S3
    minio_endpoint: str = "localhost:9000"
    minio_access_key: Optional[str] = None  # Required in non-dev
    minio_secret_key: Optional[str] = None  # Required in non-dev
    minio_bucket: str = "sighting-images"
    minio_use_ssl: bool = False
    attachment_ttl_days: int = 365

    # API
    environment: str = "development"

    # Operator credential (Basic Auth password)
    admin_password: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    # Intake
    max_photo_bytes: int = 1 * 1024 * 1024

    # Moderation lifecycle
    pending_ttl_hours: int = 48
    purge_attachments_on_expire: bool = True
    expiry_interval_seconds: int = 60 * 60

    # Public feed paging
    feed_default_limit: int = 20
    feed_max_limit: int = 50

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_methods: list[str] = ["GET", "POST", "OPTIONS"]
    cors_allow_headers: list[str] = ["Content-Type", "Authorization", "Accept", "Origin"]

    @property
    def database_url_computed(self) -> str:
        """Compute database URL if not explicitly set."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    def validate_production_settings(self):
        """Validate settings for non-development environments."""
        env = self.environment.lower()
        if env not in ("development", "test", "dev"):
            if not self.admin_password:
                raise ValueError(
                    "ADMIN_PASSWORD is required outside development. "
                    "The moderation endpoints would otherwise be unreachable."
                )
            if not self.minio_access_key or not self.minio_secret_key:
                raise ValueError(
                    "MINIO_ACCESS_KEY and MINIO_SECRET_KEY are required in production. "
                    "Do not use default credentials."
                )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
