from __future__ import annotations

import os
from pathlib import Path

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "EXTRACT_CODE_"
_TRUTHY = {"1", "true", "yes", "on"}


def env_value(name: str, default: str = "") -> str:
    """Read an `EXTRACT_CODE_*` setting from the environment or the nearest `.env` file.

    The process environment wins over the `.env` file.

    Args:
        name (str): the setting name without prefix, e.g. "TRACK_SIZE"
        default (str): the value used when the setting is not defined

    Returns:
        str: the raw setting value
    """
    key = ENV_PREFIX + name
    if key in os.environ:
        return os.environ[key]
    env_file = find_dotenv(usecwd=True)
    if env_file:
        value = dotenv_values(env_file).get(key)
        if value is not None:
            return value
    return default


def env_flag(name: str) -> bool:
    return env_value(name).strip().lower() in _TRUTHY


class Settings(BaseModel):
    """Configuration settings for an extract_code invocation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    files: list[str] = Field(default_factory=list, description="File arguments (flat mode).")
    output: Path | None = Field(default=None, description="Append output to this file.")
    track_size: bool = Field(
        default_factory=lambda: env_flag("TRACK_SIZE"),
        description="Show size tracking and progress.",
    )
    section: list[str] = Field(
        default_factory=list,
        description="Section headers, the Nth one printed before the Nth file.",
    )
    config: Path | None = Field(default=None, description="Batch config document.")
    log_file: str = Field(
        default_factory=lambda: env_value("LOG_FILE"),
        description="Log file path.",
    )
    verbose: bool = Field(default=False, description="Log diagnostics at debug level.")

    @property
    def non_blank_files(self) -> list[str]:
        """File arguments with blank tokens removed."""
        return [f for f in self.files if f and f.strip()]
