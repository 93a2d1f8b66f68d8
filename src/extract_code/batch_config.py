"""Load batch extraction plans from JSON, YAML or TOML documents.

A plan looks like::

    {
      "output": "consultation.md",
      "trackSize": true,
      "sections": [
        {"header": "Core Interfaces", "files": ["src/Service.cs", "src/Model.cs:1-40"]},
        {"header": "What Changed", "files": ["src/Service.cs:diff=master..HEAD"]}
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import tomlkit
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tomlkit.exceptions import TOMLKitError

from extract_code.config import NO_HEADER, Section
from extract_code.exceptions import SchemaError
from extract_code.logging import logger


class BatchConfig(BaseModel):
    """A validated batch extraction plan."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    output: Path | None = Field(default=None, description="Output file, overridden by --output.")
    track_size: bool = Field(default=False, alias="trackSize", description="Show size tracking.")
    sections: list[Section] = Field(..., min_length=1)


def parse_document(text: str, suffix: str) -> Any:  # noqa: ANN401
    """Parse a config document according to its file suffix.

    Args:
        text (str): the document text
        suffix (str): the file suffix; ".yaml"/".yml" and ".toml" are recognized,
            anything else is parsed as JSON

    Raises:
        SchemaError: if the document cannot be parsed

    Returns:
        Any: the parsed document
    """
    suffix = suffix.lower()
    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(text)
        if suffix == ".toml":
            return tomlkit.parse(text).unwrap()
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError, TOMLKitError) as e:
        raise SchemaError(message=f"Failed to parse config file: {e}") from e


def validate_sections(data: Any) -> None:  # noqa: ANN401
    """Check the shape of the section list before building models.

    Raises:
        SchemaError: if `sections` is missing, not a list or empty, or if a
            section has no non-empty `files` list
    """
    sections = data.get("sections") if isinstance(data, dict) else None
    if not isinstance(sections, list):
        raise SchemaError(message='Config must have "sections" array. See example config for format.')
    if not sections:
        raise SchemaError(message="Config must have at least one section")
    for index, section in enumerate(sections, start=1):
        header = section.get("header") if isinstance(section, dict) else None
        label = header or NO_HEADER
        files = section.get("files") if isinstance(section, dict) else None
        if not isinstance(files, list):
            raise SchemaError(message=f'Section {index} must have "files" array. Header: {label}')
        if not files:
            raise SchemaError(message=f"Section {index} must have at least one file. Header: {label}")


def load_batch_config(path: Path) -> BatchConfig:
    """Read and validate a batch config document.

    Args:
        path (Path): the config file

    Raises:
        SchemaError: if the file is missing, unparsable or does not match the schema

    Returns:
        BatchConfig: the validated plan
    """
    if not path.is_file():
        raise SchemaError(message=f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaError(message=f"Failed to read config file {path}: {e}") from e
    data = parse_document(text, path.suffix)
    validate_sections(data)
    try:
        config = BatchConfig.model_validate(data)
    except ValidationError as e:
        raise SchemaError(message=f"Invalid config file {path}: {e}") from e
    logger.info("batch_config_loaded", path=str(path), sections=len(config.sections))
    return config
