# MIT License
# Copyright (c) 2025 Hashborn

"""
Node configuration for the export command.

AppOptions holds the merged contents of config/config.yaml and
config/app.yaml. ExportConfig is the single value the CLI builds from
options and flags and hands to the orchestrator.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...protocol.config.params import (
    APP_CONFIG_FILENAME,
    CONFIG_DIR,
    DEFAULT_HOME,
    HOME_ENV_VAR,
    LATEST_HEIGHT,
    NODE_CONFIG_FILENAME,
    OPT_APP_DB_BACKEND,
    OPT_DB_BACKEND,
)

logger = logging.getLogger(__name__)


class AppOptions:
    """Read-only option lookup with dot-separated paths."""

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        self._options = dict(options or {})

    @classmethod
    def load(cls, root_dir: str) -> "AppOptions":
        """
        Load options from the node home.

        config.yaml is read first and app.yaml second, so app-level keys win
        on conflict. Missing files are skipped.

        Raises:
            ValueError: If a file exists but is not a YAML mapping
            OSError: If a file exists but cannot be read
        """
        merged: Dict[str, Any] = {}
        config_dir = Path(root_dir) / CONFIG_DIR
        for name in (NODE_CONFIG_FILENAME, APP_CONFIG_FILENAME):
            path = config_dir / name
            if not path.exists():
                continue
            with open(path, "r") as f:
                data = yaml.safe_load(f)
            if data is None:
                continue
            if not isinstance(data, dict):
                raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
            merged.update(data)
            logger.debug(f"Loaded {len(data)} option(s) from {path}")
        return cls(merged)

    def get(self, path: str, default: Any = None, separator: str = ".") -> Any:
        # Exact key first: option names such as "app-db-backend" are flat
        if path in self._options:
            return self._options[path]

        value: Any = self._options
        for key in path.split(separator):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_str(self, path: str) -> str:
        """Returns the option as a string, "" when unset."""
        value = self.get(path)
        if value is None:
            return ""
        return str(value)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._options)


def default_home() -> str:
    return os.path.expanduser(os.environ.get(HOME_ENV_VAR, DEFAULT_HOME))


def split_csv(values: Iterable[str]) -> Tuple[str, ...]:
    """
    Flattens comma-separated values, dropping blanks and repeats while
    keeping first-seen order.
    """
    seen = []
    for value in values:
        for item in value.split(","):
            item = item.strip()
            if item and item not in seen:
                seen.append(item)
    return tuple(seen)


class ExportConfig(BaseModel):
    """
    Everything one export run needs, resolved once at the command boundary.
    """
    model_config = ConfigDict(frozen=True)

    root_dir: str
    height: int = Field(default=LATEST_HEIGHT, description="Height to export (-1 = latest)")
    for_zero_height: bool = False
    jail_allowed_addrs: Tuple[str, ...] = ()
    modules_to_export: Tuple[str, ...] = ()
    output_document: Optional[str] = Field(default=None, description="None writes to stdout")
    app_db_backend: str = ""
    db_backend: str = ""
    app_options: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("height")
    @classmethod
    def _check_height(cls, value: int) -> int:
        if value < LATEST_HEIGHT:
            raise ValueError(f"height must be >= {LATEST_HEIGHT}, got {value}")
        return value

    @field_validator("jail_allowed_addrs", "modules_to_export", mode="before")
    @classmethod
    def _normalize_list(cls, value: Any) -> Tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return split_csv([value])
        return split_csv(value)

    @field_validator("output_document")
    @classmethod
    def _empty_means_stdout(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @property
    def writes_to_stdout(self) -> bool:
        return self.output_document is None

    @classmethod
    def from_options(cls, root_dir: str, options: AppOptions, **overrides: Any) -> "ExportConfig":
        """
        Build a config from loaded options, letting explicit (non-empty)
        overrides take precedence over option values.
        """
        fields: Dict[str, Any] = {
            "root_dir": root_dir,
            "app_db_backend": options.get_str(OPT_APP_DB_BACKEND),
            "db_backend": options.get_str(OPT_DB_BACKEND),
            "app_options": options.as_dict(),
        }
        for key, value in overrides.items():
            if value is None or value == "":
                continue
            fields[key] = value
        return cls(**fields)
