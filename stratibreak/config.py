"""Configuration settings for Stratibreak."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global settings.

    Every field can be overridden with an environment variable carrying the
    STRATIBREAK_ prefix, e.g. STRATIBREAK_UTILIZATION_THRESHOLD=0.85
    """

    # Storage
    db_path: Path = Field(
        default=Path.home() / ".stratibreak" / "stratibreak.db",
        description="SQLite database file",
    )
    default_tenant: str = Field(
        default="default",
        description="Tenant used when a command does not name one",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Root log level when --verbose is not given",
    )

    # Detection thresholds
    variance_threshold: float = Field(
        default=0.1,
        ge=0.0,
        description="Goal gaps with smaller absolute variance are ignored",
    )
    utilization_threshold: float = Field(
        default=0.9,
        ge=0.0,
        le=1.0,
        description="Resource utilization above this is an over-utilization gap",
    )
    defect_rate_threshold: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Defect rate above this is a quality gap",
    )

    model_config = {
        "env_prefix": "STRATIBREAK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
