"""Process-wide settings.

Settings come from, in increasing precedence: built-in defaults, an
optional YAML file, and environment variables.

Settings file format (either flat or under a ``dataknobs_schema`` key):
    ```yaml
    dataknobs_schema:
      locale: en
      color: true
    ```

Environment variables:
    - ``DATAKNOBS_SCHEMA_LOCALE``: active message locale
    - ``DATAKNOBS_SCHEMA_COLOR``: colored ``prettify`` output (1/true/yes/on)
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError
from .messages import set_locale

logger = logging.getLogger(__name__)

ENV_PREFIX = "DATAKNOBS_SCHEMA_"
SETTINGS_KEY = "dataknobs_schema"
TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class SchemaSettings:
    """Settings for message locale and error rendering.

    Attributes:
        locale: Name of the active message locale
        color: Whether ``prettify`` colors its output by default
    """

    locale: str = "en"
    color: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SchemaSettings:
        """Create settings from a dictionary, ignoring unknown keys."""
        data = data.get(SETTINGS_KEY, data)
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"'{SETTINGS_KEY}' settings must be a mapping",
                context={"type": type(data).__name__},
            )
        settings = cls()
        if "locale" in data:
            settings = replace(settings, locale=str(data["locale"]))
        if "color" in data:
            settings = replace(settings, color=_to_bool(data["color"]))
        return settings

    @classmethod
    def from_file(cls, path: str | Path) -> SchemaSettings:
        """Load settings from a YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse settings file {path}: {e}", context={"path": str(path)}
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read settings file {path}: {e}", context={"path": str(path)}
            ) from e
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Settings file {path} must contain a mapping", context={"path": str(path)}
            )
        return cls.from_dict(data)

    def with_environment(self, environ: Mapping[str, str] | None = None) -> SchemaSettings:
        """Copy with ``DATAKNOBS_SCHEMA_*`` environment overrides applied."""
        environ = os.environ if environ is None else environ
        settings = self
        if locale := environ.get(f"{ENV_PREFIX}LOCALE"):
            settings = replace(settings, locale=locale)
        if (color := environ.get(f"{ENV_PREFIX}COLOR")) is not None:
            settings = replace(settings, color=_to_bool(color))
        return settings

    @classmethod
    def load(cls, path: str | Path | None = None, environ: Mapping[str, str] | None = None) -> SchemaSettings:
        """Defaults, then ``path`` (if given), then the environment."""
        settings = cls.from_file(path) if path is not None else cls()
        return settings.with_environment(environ)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_VALUES
    return bool(value)


_lock = threading.Lock()
_current = SchemaSettings()


def get_settings() -> SchemaSettings:
    return _current


def configure(settings: SchemaSettings | None = None, **overrides: Any) -> SchemaSettings:
    """Apply settings process-wide.

    Args:
        settings: Settings to apply; defaults to ``SchemaSettings.load()``
        **overrides: Individual fields replacing those of ``settings``

    Returns:
        The settings now in effect

    Raises:
        LocaleNotFoundError: If the locale is not registered
    """
    global _current
    if settings is None:
        settings = SchemaSettings.load()
    if overrides:
        settings = replace(settings, **overrides)
    with _lock:
        set_locale(settings.locale)
        _current = settings
    logger.debug("Configured dataknobs_schema: %s", settings.to_dict())
    return settings
