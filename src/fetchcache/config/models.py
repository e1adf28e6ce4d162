"""Pydantic models describing fetchcache configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CacheSettings(BaseModel):
    """Where cache entries are stored."""

    model_config = ConfigDict(extra="allow")

    app_name: Optional[str] = "fetchcache"
    root: Optional[Path] = None


class TransportSettings(BaseModel):
    """Options shared by the blocking and awaitable transports."""

    model_config = ConfigDict(extra="allow")

    timeout_seconds: float = Field(default=10.0, gt=0)
    user_agent: Optional[str] = None


class LoggingSettings(BaseModel):
    """Package logger level and optional log file."""

    model_config = ConfigDict(extra="allow")

    level: str = "INFO"
    log_path: Optional[Path] = None

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}:
            raise ValueError(f"Unknown log level {value!r}.")
        return level


class FetchCacheConfig(BaseModel):
    """Root configuration object for fetchcache."""

    model_config = ConfigDict(extra="allow")

    cache: CacheSettings = Field(default_factory=CacheSettings)
    transport: TransportSettings = Field(default_factory=TransportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


__all__ = [
    "CacheSettings",
    "FetchCacheConfig",
    "LoggingSettings",
    "TransportSettings",
]
