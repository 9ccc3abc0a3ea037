"""Configuration for the imagehost service."""

import json
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_AUTH_KEY = "changeme123"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    environment: str = "development"
    exit_on_error: bool = Field(
        default=True,
        description="Stop the server after an unhandled error so a supervisor can restart it",
    )

    # Storage
    serve_dir: Path = Field(default=Path("./public"), description="Flat directory holding stored images")
    read_only: bool = Field(
        default=False,
        description="Serve list/health/static only; no auth check, upload or delete routes",
    )

    # Auth
    require_auth: bool = True
    auth_key: str = DEFAULT_AUTH_KEY

    # Logging
    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"

    # CORS - can be JSON string or comma-separated
    cors_origins: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from JSON string or comma-separated string."""
        if not self.cors_origins:
            return ["*"]
        try:
            parsed = json.loads(self.cors_origins)
            if isinstance(parsed, list):
                return [str(origin) for origin in parsed]
            return [str(parsed)]
        except (json.JSONDecodeError, TypeError):
            return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def uses_default_key(self) -> bool:
        """True when auth is enforced with the well-known placeholder secret."""
        return self.require_auth and self.auth_key == DEFAULT_AUTH_KEY
