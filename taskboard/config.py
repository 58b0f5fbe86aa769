"""Runtime configuration read from environment variables."""
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


ENV_PREFIX = "TASKBOARD_"


class Config(BaseModel):
    """Service settings."""
    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(8000, ge=1, le=65535, description="Port to listen on")
    api_prefix: str = Field("/api", description="Path the API is mounted at")
    storage: Literal["memory", "sqlite"] = Field(
        "memory", description="Storage backend")
    db_path: str = Field("taskboard.db", description="SQLite database file")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Optional[str] = Field(
        None, description="Also log to this file when set")

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = "/" + value.strip().strip("/")
        if value == "/":
            raise ValueError("must name a path below the root, e.g. /api")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("log_file", mode="before")
    @classmethod
    def _empty_log_file(cls, value):
        return value or None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build settings from ``TASKBOARD_*`` variables, defaults otherwise."""
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in environ:
                values[name] = environ[key]
        return cls(**values)
