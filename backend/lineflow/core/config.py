"""Application configuration using Pydantic Settings.

Environment variables are loaded from .env files and system environment.
Geometry offsets accept either a tuple or a "dx,dy" string.
"""

from functools import lru_cache
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

Offset = tuple[float, float]


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "Lineflow API"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # CORS
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:4200"]

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v: Any) -> list[str]:
        """Parse ALLOWED_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, list):
            return v
        return ["http://localhost:4200"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None  # Console only when unset
    LOG_JSON_FORMAT: bool = True

    # Topology model
    REMOVE_NODE_CASCADE: bool = True

    # Live state reconciliation
    MACHINE_NAME_FALLBACK: bool = True
    PUSH_QUEUE_MAXSIZE: int = 1000

    # Connector anchor offsets relative to a node's top-left corner
    QUEUE_EXIT_OFFSET: Annotated[Offset, NoDecode] = (176.0, 72.0)
    QUEUE_ENTRY_OFFSET: Annotated[Offset, NoDecode] = (-6.0, 72.0)
    MACHINE_EXIT_OFFSET: Annotated[Offset, NoDecode] = (176.0, 80.0)
    MACHINE_ENTRY_OFFSET: Annotated[Offset, NoDecode] = (-6.0, 80.0)

    @field_validator(
        "QUEUE_EXIT_OFFSET",
        "QUEUE_ENTRY_OFFSET",
        "MACHINE_EXIT_OFFSET",
        "MACHINE_ENTRY_OFFSET",
        mode="before",
    )
    @classmethod
    def parse_offset(cls, v: Any) -> Any:
        """Parse an offset from a "dx,dy" string."""
        if isinstance(v, str):
            parts = [part.strip() for part in v.split(",")]
            if len(parts) != 2:
                raise ValueError(f"Offset must be 'dx,dy', got {v!r}")
            return (float(parts[0]), float(parts[1]))
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are cached after first load for performance.
    """
    return Settings()


# Global settings instance
settings = get_settings()
