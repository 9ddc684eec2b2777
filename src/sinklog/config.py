"""
Logger configuration.

``LoggerConfig`` is the construction-time option set consumed by loggers.
``LoggingSettings`` loads the same options from the environment (prefix
``SINKLOG_``) or a ``.env`` file.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .levels import SeverityLevel, rank_of
from .sinks import BaseSink

DEFAULT_THRESHOLD = SeverityLevel.INFO
MINIMAL_THRESHOLD = SeverityLevel.WARNING


class LoggerConfig(BaseModel):
    """Immutable options for building a logger."""

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        populate_by_name=True,
        extra="forbid",
    )

    threshold: SeverityLevel = Field(
        default=DEFAULT_THRESHOLD,
        validation_alias=AliasChoices("threshold", "log_level", "level"),
        description="Least severe rank that is still written",
    )
    error_sink: Optional[BaseSink] = Field(
        default=None,
        validation_alias=AliasChoices("error_sink", "error_stream"),
        description="Receives a copy of every critical line",
    )
    path: Optional[str] = Field(default=None, description="Enables file mode")
    flags: str = Field(default="a", description="File open mode")
    fd: Optional[int] = Field(default=None, description="Descriptor override for stream sinks")

    @field_validator("threshold", mode="before")
    @classmethod
    def _parse_threshold(cls, value: Any) -> SeverityLevel:
        return rank_of(value)

    @classmethod
    def minimal(cls, **overrides: Any) -> "LoggerConfig":
        """The minimal variant: same options, threshold defaults to WARNING."""
        if not {"threshold", "log_level", "level"} & overrides.keys():
            overrides["threshold"] = MINIMAL_THRESHOLD
        return cls(**overrides)


class LoggingSettings(BaseSettings):
    """Environment-driven logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SINKLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: str = Field(default="info", description="Level name or numeric rank")
    path: Optional[str] = Field(default=None, description="Log file path; stdout when unset")
    flags: str = Field(default="a", description="File open mode")
    fd: Optional[int] = Field(default=None, description="Descriptor override for stdout")
    mirror_critical: bool = Field(default=True, description="Copy critical lines to stderr")

    def to_config(self, **overrides: Any) -> LoggerConfig:
        options: dict[str, Any] = {
            "threshold": self.level,
            "path": self.path or None,
            "flags": self.flags,
            "fd": self.fd,
        }
        options.update(overrides)
        return LoggerConfig(**options)
