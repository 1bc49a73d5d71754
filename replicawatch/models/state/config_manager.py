"""Configuration loading for replicawatch.

Settings are resolved once at startup, in increasing precedence:
model defaults, an optional YAML file, then command-line overrides.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from replicawatch.models.state.app_settings import (
    ConfigError,
    ConfigLoadError,
    WatchSettings,
)

logger = logging.getLogger(__name__)


class ConfigManager:
    """Builds the immutable WatchSettings value."""

    @staticmethod
    def load(path: str | Path) -> dict[str, Any]:
        """Read a YAML settings file.

        Args:
            path: Path to the YAML file

        Returns:
            Mapping of raw setting values (empty for an empty file).

        Raises:
            ConfigLoadError: If the file is missing, unreadable or not a mapping.
        """
        config_path = Path(path).expanduser()
        try:
            with config_path.open(encoding="utf-8") as handle:
                content = yaml.safe_load(handle)
        except OSError as exc:
            raise ConfigLoadError(f"cannot read config file {config_path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigLoadError(f"invalid YAML in {config_path}: {exc}") from exc

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigLoadError(f"config file {config_path} must contain a mapping")
        logger.debug("Loaded settings file %s", config_path)
        return content

    @staticmethod
    def merge(
        file_values: Mapping[str, Any],
        overrides: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Merge CLI overrides over file values; ``None`` overrides are ignored."""
        merged: dict[str, Any] = dict(file_values)

        resource: dict[str, Any] = {}
        file_resource = merged.pop("resource", None)
        if isinstance(file_resource, Mapping):
            resource.update(file_resource)
        elif file_resource is not None:
            raise ConfigLoadError("'resource' must be a mapping with 'kind' and 'name'")

        for key, value in overrides.items():
            if value is None:
                continue
            if key in ("resource_kind", "resource_name"):
                resource[key.removeprefix("resource_")] = value
            else:
                merged[key] = value

        if resource:
            merged["resource"] = resource
        return merged

    @classmethod
    def build(
        cls,
        overrides: Mapping[str, Any] | None = None,
        config_path: str | Path | None = None,
    ) -> WatchSettings:
        """Resolve and validate settings.

        Raises:
            ConfigLoadError: If the merged values do not validate.
        """
        file_values = cls.load(config_path) if config_path else {}
        merged = cls.merge(file_values, overrides or {})

        resource = merged.get("resource")
        if not isinstance(resource, Mapping) or not resource.get("name"):
            raise ConfigLoadError(
                "a resource name is required (use --deployment or 'resource.name')"
            )

        try:
            return WatchSettings.model_validate(merged)
        except ValidationError as exc:
            raise ConfigLoadError(_format_validation_error(exc)) from exc


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "settings"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


__all__ = [
    "ConfigError",
    "ConfigLoadError",
    "ConfigManager",
    "WatchSettings",
]
