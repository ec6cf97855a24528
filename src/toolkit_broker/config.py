"""Configuration management for Toolkit Broker"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .services.broker import DEFAULT_CREDENTIAL_ENV_VARS


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8001

    # Shared secret for /api/toolkit/call (disabled when unset)
    api_secret_key: str | None = None

    # Catalog and alias sources
    catalog_path: str = "catalog"
    aliases_path: str | None = None

    # Rate limiting
    rate_limit_max_tokens: int = Field(100, gt=0)
    rate_limit_refill_rate: float = Field(10.0, gt=0)
    rate_limit_cost_per_request: int = Field(1, ge=0)
    # Buckets idle this long are evicted; None keeps them for the process lifetime
    rate_limit_idle_ttl: float | None = Field(None, gt=0)

    # Execution
    max_response_bytes: int = Field(100 * 1024, gt=0)
    executor_base_urls: dict[str, str] = Field(default_factory=dict)
    executor_timeout: float = 30.0

    # Credentials whose presence is reported by the health check
    credential_env_vars: list[str] = Field(
        default_factory=lambda: [
            *DEFAULT_CREDENTIAL_ENV_VARS,
            "OPENAI_API_KEY",
            "STRIPE_SECRET_KEY",
            "SUPABASE_KEY",
            "TWILIO_AUTH_TOKEN",
            "RESEND_API_KEY",
            "CLOUDFLARE_API_TOKEN",
        ]
    )

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @property
    def requires_api_key(self) -> bool:
        """Check if callers must present X-API-Key"""
        return bool(self.api_secret_key)


# Global settings instance
settings = Settings()


def get_config() -> Settings:
    """Get the global configuration instance."""
    return settings
