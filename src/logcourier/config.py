"""Configuration model for Log Courier."""

import os
import shlex
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from logcourier.core.exceptions import ConfigurationError
from logcourier.core.models import MissingEntryPolicy

ENV_PREFIX = "LC_"
DEFAULT_LOG_COMMAND = ["journalctl", "--no-pager", "-o", "short-iso"]

_TRUE_VALUES = {"1", "true", "yes", "on"}


class CourierConfig(BaseModel):
    """Settings for capturing, storing, and handing off logs."""

    app_id: str = Field(default="logcourier", description="Application identifier")
    app_name: str = Field(default="Log Courier", description="Human-readable name")
    cache_dir: Path = Field(
        default_factory=lambda: Path.home() / ".cache" / "logcourier",
        description="Root directory for captured artifacts",
    )
    log_subdir: str = Field(default="log", description="Subdirectory holding log artifacts")
    chunk_size: int = Field(default=10 * 1024, description="Persist chunk size in bytes")
    archive_chunk_size: int = Field(default=2048, description="Zip copy chunk size in bytes")
    mark_private: bool = Field(default=True, description="Drop a privacy marker in log dirs")
    marker_name: str = Field(default=".nomedia", description="Privacy marker file name")
    missing_entry_policy: MissingEntryPolicy = Field(
        default=MissingEntryPolicy.ABORT,
        description="What compress does with missing source files",
    )
    log_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LOG_COMMAND),
        description="Command whose stdout is the raw log",
    )
    outbox_dir: Path | None = Field(default=None, description="Email draft outbox")
    share_dir: Path | None = Field(default=None, description="Share target directory")
    sender_address: str = Field(
        default="logcourier@localhost", description="From address on email drafts"
    )

    @field_validator("app_id")
    @classmethod
    def validate_app_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("app_id must not be empty")
        if "/" in v or "\\" in v:
            raise ValueError("app_id must not contain path separators")
        return v

    @field_validator("chunk_size", "archive_chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("chunk sizes must be positive")
        return v

    @field_validator("missing_entry_policy", mode="before")
    @classmethod
    def validate_missing_entry_policy(cls, v):
        """Convert string to MissingEntryPolicy enum."""
        if isinstance(v, str):
            return MissingEntryPolicy(v.strip().lower())
        return v

    @field_validator("log_command", mode="before")
    @classmethod
    def validate_log_command(cls, v):
        """Accept a shell-style command string."""
        if isinstance(v, str):
            v = shlex.split(v)
        if not v:
            raise ValueError("log_command must not be empty")
        return v

    @property
    def log_prefix(self) -> str:
        """Prefix shared by every log artifact this app creates."""
        return f"{self.app_id}_log_"

    @property
    def log_dir(self) -> Path:
        """Directory log artifacts are written to."""
        return self.cache_dir / self.log_subdir

    @property
    def resolved_outbox_dir(self) -> Path:
        return self.outbox_dir or self.cache_dir / "outbox"

    @property
    def resolved_share_dir(self) -> Path:
        return self.share_dir or self.cache_dir / "shared"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "CourierConfig":
        """
        Build configuration from LC_* environment variables.

        Unset variables fall back to the field defaults.

        Raises:
            ConfigurationError: if a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        for field_name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{field_name.upper()}")
            if raw is None or raw == "":
                continue
            if field_name == "mark_private":
                values[field_name] = raw.strip().lower() in _TRUE_VALUES
            elif field_name in ("cache_dir", "outbox_dir", "share_dir"):
                values[field_name] = Path(raw).expanduser()
            else:
                values[field_name] = raw

        try:
            return cls(**values)
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}", details={"source": "environment"}
            ) from e
