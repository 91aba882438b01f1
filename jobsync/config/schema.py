"""
Configuration Schema and Models

Defines Pydantic models for the configuration schema, providing validation,
normalization and default values for the synchronizer and its log sink.

Author: JobSync Project
License: MIT
"""

import os
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class ComparatorKind(str, Enum):
    """File equality strategies."""
    NONE = "NONE"
    BINARY = "BINARY"
    MD5 = "MD5"
    SHA256 = "SHA256"

    @classmethod
    def parse(cls, value) -> "ComparatorKind":
        """
        Resolve a comparator name case-insensitively.

        Unrecognized names fall back to BINARY.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.BINARY


def normalize_root(path: str) -> str:
    """
    Make a directory path absolute and give it a trailing separator.

    Args:
        path: Directory path, relative or absolute

    Returns:
        Normalized absolute path ending with os.sep
    """
    path = os.path.abspath(os.path.expanduser(path))
    if not path.endswith(os.sep):
        path += os.sep
    return path


class SyncConfig(BaseModel):
    """Synchronization engine configuration."""

    source_path: str = Field(
        description="Directory to mirror from"
    )
    replica_path: str = Field(
        description="Directory kept identical to the source"
    )
    interval: int = Field(
        gt=0,
        description="Delay between synchronization cycles (milliseconds)"
    )
    fragile: bool = Field(
        default=False,
        description="Stop synchronizing on the first error"
    )
    comparator: ComparatorKind = Field(
        default=ComparatorKind.BINARY,
        description="File equality strategy (NONE, BINARY, MD5, SHA256)"
    )
    max_workers: Optional[int] = Field(
        default=None,
        gt=0,
        description="Upper bound on concurrent per-file workers (None = ThreadPoolExecutor default, min(32, cpu + 4))"
    )
    retry_attempts: int = Field(
        default=5,
        gt=0,
        description="Attempts for a copy or delete before giving up"
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Delay between retry attempts in seconds"
    )

    model_config = {"frozen": True}

    @field_validator("source_path", "replica_path")
    @classmethod
    def validate_root(cls, v):
        """Ensure roots are absolute with a trailing separator."""
        if not v or not str(v).strip():
            raise ValueError("Directory path must not be empty")
        return normalize_root(str(v))

    @field_validator("comparator", mode="before")
    @classmethod
    def parse_comparator(cls, v):
        """Accept comparator names in any case."""
        if v is None:
            return ComparatorKind.BINARY
        return ComparatorKind.parse(v)

    @model_validator(mode="after")
    def validate_disjoint_roots(self):
        """Reject roots that are equal or nested inside each other."""
        if self.source_path.startswith(self.replica_path) or self.replica_path.startswith(self.source_path):
            raise ValueError(
                f"Source and replica must not overlap: {self.source_path} / {self.replica_path}"
            )
        return self

    @property
    def interval_seconds(self) -> float:
        """Cycle interval in seconds."""
        return self.interval / 1000.0


class LoggingConfig(BaseModel):
    """Log sink configuration."""

    log_file_path: str = Field(
        default="jobsync.log",
        description="File every log line is appended to"
    )
    verbose: int = Field(
        default=1,
        ge=0,
        le=2,
        description="0 = errors only, 1 = + important events, 2 = everything"
    )
    json_format: bool = Field(
        default=False,
        description="Write the log file as JSON lines instead of the console line format (no ERROR: prefix; severity is in levelname)"
    )


class Config(BaseModel):
    """
    Root configuration model for JobSync.

    Loaded from an optional YAML file, overridden by environment
    variables and command-line arguments.
    """

    sync: SyncConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
