# src/alchemist/dataloader/config_loader.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from alchemist.errors import ConfigError
from alchemist.schemas.models import Config

logger = logging.getLogger(__name__)

SUFFIXES = (".yaml", ".yml")
TOP_LEVEL_KEYS = tuple(Config.model_fields)


def _config_error(message: str, stage: str, action: str) -> ConfigError:
    return ConfigError(message=message, source=f"ConfigLoader.{stage}", suggested_action=action)


def _describe(e: ValidationError) -> str:
    """`location: reason` per pydantic error, e.g. `max_phase: Input should be ...`."""
    lines = []
    for err in e.errors():
        where = ".".join(str(part) for part in err["loc"]) or "<root>"
        lines.append(f"{where}: {err['msg']}")
    return "; ".join(lines)


class ConfigLoader:
    """
    @brief
    Reads the validation engine settings from YAML.

    @details
    Every key is optional: an empty document, or no file at all through
    load_or_default(), yields the built-in defaults. Priority bounds, the
    phase horizon, capacity switches and report settings are validated by
    the pydantic `Config` model. Failures surface as ConfigError.
    """

    def load(self, path: Path) -> Config:
        """
        @brief
        Load engine settings from a YAML file.

        @raises
            ConfigError
                Bad path, YAML syntax error, non-mapping document or a
                setting the engine does not accept.
        """
        cfg = self._validate(self._read_yaml(path), path)
        logger.info(
            "Configuration loaded from %s (priority %d..%d, max_phase %d)",
            path,
            cfg.priority_min,
            cfg.priority_max,
            cfg.max_phase,
        )
        return cfg

    def load_or_default(self, path: Path | None) -> Config:
        """Load `path` when given, otherwise return the built-in defaults."""
        if path is None:
            logger.debug("No configuration file given; using defaults")
            return Config()
        return self.load(path)

    def _check_path(self, path: Any) -> None:
        if not isinstance(path, Path):
            raise _config_error(
                f"Config path must be a pathlib.Path, got {type(path).__name__}",
                "_check_path",
                "Wrap the location in pathlib.Path.",
            )
        if not path.is_file():
            raise _config_error(
                f"Configuration file not found: {path}",
                "_check_path",
                "Pass an existing YAML file with --config, or omit it to use defaults.",
            )
        if path.suffix.lower() not in SUFFIXES:
            raise _config_error(
                f"Config file {path.name} is not YAML (expected {' or '.join(SUFFIXES)})",
                "_check_path",
                "Save the settings as config.yaml.",
            )

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        self._check_path(path)

        try:
            with path.open("r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise _config_error(
                f"Cannot read {path}: {e}", "_read_yaml", "Check file permissions."
            ) from e

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise _config_error(
                f"YAML parsing failed in {path.name}: {e}",
                "_read_yaml",
                "Fix the YAML syntax; every setting is a plain 'key: value' line.",
            ) from e

        # Empty document: all defaults
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise _config_error(
                f"Configuration root must be a mapping, got {type(data).__name__}",
                "_read_yaml",
                f"Use top-level keys from: {', '.join(TOP_LEVEL_KEYS)}.",
            )
        return dict(data)

    def _validate(self, data: dict[str, Any], path: Path) -> Config:
        try:
            return Config.model_validate(data)
        except ValidationError as e:
            raise _config_error(
                f"Invalid settings in {path.name}: {_describe(e)}",
                "_validate",
                f"Known top-level keys: {', '.join(TOP_LEVEL_KEYS)}.",
            ) from e


__all__ = ["ConfigLoader"]
