"""Pydantic models for diffmend configuration validation."""

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class PatchConfig(BaseModel):
    """Defaults for parsing and applying patches.

    Example in config.json:
        "patch": {
            "strip_prefix_segments": 1,
            "fuzz": 2,
            "ignore_whitespace": true
        }
    """

    model_config = ConfigDict(extra="forbid")

    strip_prefix_segments: int = Field(default=0, ge=0)
    """Leading path segments removed before a target is looked up (like patch -p)."""

    fuzz: int = Field(default=0, ge=0)
    """Maximum line offset tried on either side of a hunk's expected position."""

    ignore_whitespace: bool = False
    """Compare lines with all whitespace removed."""

    reversed: bool = False
    """Apply every diff in reverse (new -> old)."""

    index_path_policy: Literal["index", "header"] = "index"
    """Which name wins when an `Index:` line disagrees with the header path."""

    reject_suffix: str = ".rej"
    """Suffix appended to a target path for its reject report."""

    write_rejects: bool = True
    """Write a reject report next to files with failed hunks."""

    add_markers: bool = True
    """Raise an annotation against files with failed hunks."""

    encoding: str = "utf-8"
    """Text encoding of patch and target files."""

    @field_validator("reject_suffix")
    @classmethod
    def validate_reject_suffix(cls, v: str) -> str:
        """Reject suffixes must look like a file extension."""
        if not v.startswith(".") or len(v) < 2 or "/" in v:
            raise ValueError(f"reject_suffix must look like '.rej', got {v!r}")
        return v

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Ensure the codec exists."""
        import codecs

        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v!r}") from e
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: LogLevel = "WARNING"
    """Console log level."""

    file: str | None = None
    """Optional log file (rotated at 5MB)."""

    @property
    def level_number(self) -> int:
        """Numeric logging level for the console handler."""
        return logging.getLevelName(self.level)


class Config(BaseModel):
    """Root configuration model.

    Example config.json:
        {
            "patch": {"strip_prefix_segments": 1, "fuzz": 2},
            "logging": {"level": "INFO", "file": "~/.diffmend/diffmend.log"}
        }
    """

    model_config = ConfigDict(extra="forbid")

    patch: PatchConfig = PatchConfig()
    logging: LoggingConfig = LoggingConfig()

    ancestor_depth: int = Field(default=2, ge=0, le=10)
    """How many parent directories are searched for .diffmend/config.json."""
