"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Storage
    database_url: str = "sqlite+aiosqlite:///./book_catalog.db"

    # Validation: lenient by default, matching the historical behavior
    strict_validation: bool = False

    # Comma-separated bearer tokens accepted on admin and cart routes.
    # Empty disables auth.
    auth_tokens: str = ""

    # Client
    api_base_url: str = "http://localhost:3000"

    # OpenTelemetry
    otel_enabled: bool = False
    otel_service_name: str = "book-catalog"
    otel_exporter_otlp_endpoint: str = "http://localhost:4318/v1/traces"
    otel_exporter_otlp_protocol: str = "http"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def accepted_tokens(self) -> list[str]:
        return [token.strip() for token in self.auth_tokens.split(",") if token.strip()]

    @property
    def auth_enabled(self) -> bool:
        return bool(self.accepted_tokens)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
