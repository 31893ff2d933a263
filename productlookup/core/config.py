"""
Core configuration management using Pydantic Settings.
Follows 12-factor app principles for environment-based configuration.
"""

from typing import List, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application
    app_name: str = "Product Lookup API"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: Union[List[str], str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    # Outbound lookups
    lookup_user_agent: str = "ProductLookup/1.0 (contact@productlookup.com)"
    # Per request. Every retry must fit inside the engine budget.
    lookup_http_timeout: float = 4.0
    lookup_engine_timeout: float = 10.0

    # Retry of transient network failures inside an engine call
    lookup_retry_attempts: int = 2
    lookup_retry_initial_delay: float = 0.5
    lookup_retry_max_delay: float = 2.0
    lookup_retry_backoff: float = 2.0

    # Engine names left out of the default registry
    lookup_disabled_engines: Union[List[str], str] = Field(default_factory=list)

    @field_validator("cors_origins", "lookup_disabled_engines", mode="before")
    @classmethod
    def parse_comma_separated(cls, v):
        """Parse comma-separated values from string or list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment values."""
        allowed = ["development", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v

    @field_validator("lookup_engine_timeout", "lookup_http_timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("Timeouts must be positive")
        return v

    @field_validator("lookup_retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v):
        if v < 1:
            raise ValueError("At least one attempt is required")
        return v

    @model_validator(mode="after")
    def validate_retry_budget(self):
        """Worst-case retried request must finish before the orchestrator gives up on the engine."""
        delays = 0.0
        delay = self.lookup_retry_initial_delay
        for _ in range(self.lookup_retry_attempts - 1):
            delays += delay
            delay = min(delay * self.lookup_retry_backoff, self.lookup_retry_max_delay)

        worst_case = self.lookup_http_timeout * self.lookup_retry_attempts + delays
        if worst_case >= self.lookup_engine_timeout:
            raise ValueError(
                f"lookup_http_timeout x lookup_retry_attempts plus backoff ({worst_case:g}s) "
                f"must be below lookup_engine_timeout ({self.lookup_engine_timeout:g}s)"
            )
        return self


# Global settings instance
settings = Settings()


# Environment-specific configurations
class DevelopmentConfig(Settings):
    """Development environment configuration."""
    debug: bool = True
    log_level: str = "DEBUG"


class ProductionConfig(Settings):
    """Production environment configuration."""
    debug: bool = False
    log_level: str = "WARNING"


def get_settings() -> Settings:
    """Factory function to get environment-specific settings."""
    env = settings.environment.lower()

    if env == "production":
        return ProductionConfig()
    elif env == "development":
        return DevelopmentConfig()
    else:
        return Settings()
