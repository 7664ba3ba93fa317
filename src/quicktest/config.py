"""Configuration management for quicktest."""

import json
import logging
import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from quicktest.backtrace import DEFAULT_INTERNAL_PATTERN, configure_backtrace, debug_from_env
from quicktest.errors import DEFAULT_MARKERS, configure_markers

CONFIG_NAMES = ["quicktest.json", ".quicktest.json"]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class QuicktestConfig(BaseModel):
    """Project-level configuration for quicktest runs."""

    modules: list[str] = Field(default_factory=list, description="Modules to import so their tests register")
    debug: bool = Field(default=False, description="Show unfiltered backtraces")
    assertion_markers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MARKERS),
        description="Function name prefixes identifying assertion helper frames",
    )
    internal_pattern: str = Field(
        default=DEFAULT_INTERNAL_PATTERN,
        description="Regex matching backtrace frames from quicktest itself",
    )
    no_skip_message: bool = Field(default=False, description="Suppress the skipped tests hint")
    log_level: str = Field(default="WARNING", description="Logging level for quicktest loggers")

    @field_validator("assertion_markers")
    @classmethod
    def validate_markers(cls, v: list[str]) -> list[str]:
        markers = [m.strip() for m in v if m.strip()]
        if not markers:
            raise ValueError("At least one assertion marker is required")
        return markers

    @field_validator("internal_pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid internal pattern: {e}") from e
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {LOG_LEVELS}")
        return v.upper()

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_file(cls, path: Path | str) -> "QuicktestConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find(cls, start_dir: Path | str | None = None) -> Optional[Path]:
        """Search up the directory tree for a configuration file."""
        current = Path.cwd() if start_dir is None else Path(start_dir)
        current = current.resolve()

        for directory in [current, *current.parents]:
            for name in CONFIG_NAMES:
                config_path = directory / name
                if config_path.exists():
                    return config_path
        return None

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "QuicktestConfig":
        """Load the nearest configuration file, or defaults when there is none."""
        config_path = cls.find(start_dir)
        if config_path is None:
            return cls()
        return cls.from_file(config_path)

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(exclude={"internal_pattern"}), f, indent=2)

    def apply(self) -> None:
        """Install the backtrace and assertion marker settings process-wide."""
        configure_backtrace(
            internal_pattern=self.internal_pattern,
            debug=self.debug or debug_from_env(),
        )
        configure_markers(self.assertion_markers)
