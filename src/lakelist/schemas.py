"""Environment configuration schema for lakelist."""

import os
from typing import Optional

from pydantic import BaseModel, Field

# Keys picked up from the process environment by EnvironmentConfig.from_env
ENVIRONMENT_KEYS = (
    "AWS_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
    "AWS_PROFILE",
    "S3_ENDPOINT_URL",
)


class EnvironmentConfig(BaseModel):
    """Resolved key/value configuration handed to object store backends."""

    settings: dict[str, str] = Field(
        default_factory=dict, description="Configuration values by key"
    )

    def get(self, key: str) -> Optional[str]:
        """Return the value for ``key``, treating empty strings as unset."""
        value = self.settings.get(key)
        return value or None

    def with_overrides(self, **overrides: Optional[str]) -> "EnvironmentConfig":
        """Return a copy with the given non-empty values replacing existing ones."""
        merged = dict(self.settings)
        merged.update({key: value for key, value in overrides.items() if value})
        return EnvironmentConfig(settings=merged)

    @classmethod
    def from_env(cls) -> "EnvironmentConfig":
        """Build a configuration from the recognised environment variables."""
        return cls(
            settings={key: os.environ[key] for key in ENVIRONMENT_KEYS if key in os.environ}
        )
