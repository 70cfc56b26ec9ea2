"""Configuration management for lakelist."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "lakelist"

    # Per-request timeout scope for object store calls
    connect_timeout: float = 10.0
    read_timeout: float = 60.0

    model_config = {
        "env_prefix": "LAKELIST_",
        "case_sensitive": False,
    }


settings = Settings()
