"""
Configuration management for the lead capture pipeline.

This module implements environment-specific configuration with validation
and a factory function for configuration selection.
"""

import os
from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environments."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class QueueBackend(str, Enum):
    """Local storage backends for the fallback queue."""

    FILE = "file"
    MEMORY = "memory"


class RemoteBackend(str, Enum):
    """Remote data service backends."""

    POSTGREST = "postgrest"
    MEMORY = "memory"


PLACEHOLDER_URL = "https://placeholder.supabase.co"
PLACEHOLDER_KEY = "placeholder-key"


class RemoteServiceSettings(BaseSettings):
    """Remote data service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="REMOTE_", env_file=".env", extra="ignore"
    )

    backend: RemoteBackend = RemoteBackend.POSTGREST
    url: str = PLACEHOLDER_URL
    api_key: str = PLACEHOLDER_KEY
    table: str = "contact_forms"
    request_timeout: float = 10.0

    # Sent with every request so the service can attribute traffic
    client_source: str = "lead-capture"
    client_version: str = "1.0.0"

    @property
    def is_configured(self) -> bool:
        """Check that real credentials were supplied."""
        return (
            bool(self.url)
            and bool(self.api_key)
            and self.url != PLACEHOLDER_URL
            and self.api_key != PLACEHOLDER_KEY
        )


class SubmissionSettings(BaseSettings):
    """Submission orchestrator configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUBMISSION_", env_file=".env", extra="ignore"
    )

    timeout: float = Field(default=5.0, gt=0)
    max_attempts: int = Field(default=3, ge=1, le=10)
    base_delay: float = Field(default=1.0, ge=0)
    required_fields: list[str] = Field(
        default_factory=lambda: ["first_name", "last_name", "email", "company"]
    )
    require_consent: bool = False


class QueueSettings(BaseSettings):
    """Durable fallback queue configuration."""

    model_config = SettingsConfigDict(
        env_prefix="QUEUE_", env_file=".env", extra="ignore"
    )

    backend: QueueBackend = QueueBackend.FILE
    directory: Path = Path(".lead_capture")
    key: str = "lead_submission_queue"
    legacy_keys: list[str] = Field(
        default_factory=lambda: ["pending_submissions", "contact_submissions"]
    )
    migrate_legacy_on_startup: bool = True

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        if not v or "/" in v or v.startswith("."):
            raise ValueError("Queue key must be a plain, non-empty name")
        return v


class ReconciliationSettings(BaseSettings):
    """Reconciliation engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RECONCILIATION_", env_file=".env", extra="ignore"
    )

    enabled: bool = True
    settle_delay: float = Field(default=5.0, ge=0)
    max_attempts: int = Field(default=3, ge=1, le=10)
    base_delay: float = Field(default=1.0, ge=0)
    trigger_on_recovery: bool = True
    purge_after_sync: bool = False


class NotificationSettings(BaseSettings):
    """Post-acceptance notification configuration."""

    model_config = SettingsConfigDict(
        env_prefix="NOTIFY_", env_file=".env", extra="ignore"
    )

    webhook_url: str | None = None
    timeout: float = 5.0


class ObservabilitySettings(BaseSettings):
    """Observability configuration."""

    model_config = SettingsConfigDict(
        env_prefix="OBSERVABILITY_", env_file=".env", extra="ignore"
    )

    log_level: LogLevel = LogLevel.INFO
    log_format: str = "json"
    log_file: str | None = None

    metrics_enabled: bool = True
    metrics_path: str = "/metrics"

    health_check_timeout: float = 5.0


class ApplicationSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    app_name: str = "Lead Capture"
    app_version: str = "1.0.0"
    app_description: str = "Resilient lead submission pipeline"

    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    remote: RemoteServiceSettings = Field(default_factory=RemoteServiceSettings)
    submission: SubmissionSettings = Field(default_factory=SubmissionSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    reconciliation: ReconciliationSettings = Field(
        default_factory=ReconciliationSettings
    )
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == Environment.DEVELOPMENT


# Environment-specific configurations
class DevelopmentSettings(ApplicationSettings):
    """Development environment settings."""

    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True

    observability: ObservabilitySettings = Field(
        default_factory=lambda: ObservabilitySettings(
            log_level=LogLevel.DEBUG, log_format="console"
        )
    )


class TestingSettings(ApplicationSettings):
    """Testing environment settings."""

    environment: Environment = Environment.TESTING
    debug: bool = True

    remote: RemoteServiceSettings = Field(
        default_factory=lambda: RemoteServiceSettings(backend=RemoteBackend.MEMORY)
    )
    queue: QueueSettings = Field(
        default_factory=lambda: QueueSettings(backend=QueueBackend.MEMORY)
    )
    reconciliation: ReconciliationSettings = Field(
        default_factory=lambda: ReconciliationSettings(
            settle_delay=0.0, base_delay=0.0
        )
    )
    submission: SubmissionSettings = Field(
        default_factory=lambda: SubmissionSettings(timeout=1.0, base_delay=0.0)
    )

    # Minimal logging for testing
    observability: ObservabilitySettings = Field(
        default_factory=lambda: ObservabilitySettings(log_level=LogLevel.WARNING)
    )


class StagingSettings(ApplicationSettings):
    """Staging environment settings."""

    environment: Environment = Environment.STAGING
    debug: bool = False


class ProductionSettings(ApplicationSettings):
    """Production environment settings."""

    environment: Environment = Environment.PRODUCTION
    debug: bool = False

    observability: ObservabilitySettings = Field(
        default_factory=lambda: ObservabilitySettings(log_level=LogLevel.INFO)
    )


def get_settings() -> ApplicationSettings:
    """Get application settings based on environment."""
    environment = os.getenv("ENVIRONMENT", "development").lower()

    if environment == "development":
        return DevelopmentSettings()
    elif environment == "testing":
        return TestingSettings()
    elif environment == "staging":
        return StagingSettings()
    elif environment == "production":
        return ProductionSettings()
    else:
        raise ValueError(f"Unknown environment: {environment}")
