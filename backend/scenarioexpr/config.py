"""
Engine configuration.

Loaded from YAML, either as a bare mapping or under a top-level ``engine:``
section:

    engine:
      entry_point_group: scenarioexpr.conditions
      validate_names: true
      log_level: DEBUG
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .logic.registry import DEFAULT_ENTRY_POINT_GROUP

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

GROUP_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class EngineConfig(BaseModel):
    """Settings for a ConditionEngine."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    entry_point_group: str = Field(
        default=DEFAULT_ENTRY_POINT_GROUP,
        description="Entry point group scanned for conditions",
    )
    validate_names: bool = Field(
        default=False,
        description="Reject unknown predicate names when parsing",
    )
    log_level: str = Field(default="WARNING", description="Level for the package logger")

    @field_validator("entry_point_group")
    @classmethod
    def validate_group(cls, v: str) -> str:
        if not GROUP_PATTERN.match(v):
            raise ValueError(f"entry_point_group must be a dotted identifier, got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "EngineConfig":
        """Load configuration from YAML content."""
        data = yaml.safe_load(yaml_content) or {}
        if not isinstance(data, dict):
            raise ValueError("Engine configuration must be a mapping")
        if "engine" in data:
            data = data["engine"] or {}
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "EngineConfig":
        """Load configuration from a YAML file."""
        return cls.from_yaml(Path(path).read_text(encoding="utf-8"))
