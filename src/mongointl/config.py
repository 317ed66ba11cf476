"""Loading of language settings from files and environment variables.

Sources, later ones overriding earlier ones:
    1. Optional YAML or JSON file, settings at the top level or under ``intl``
    2. Environment variables ``MONGOINTL_LANGUAGES`` (comma separated) and
       ``MONGOINTL_DEFAULT_LANGUAGE``

Example:
    # intl.yaml
    intl:
      languages: [en, de, fr]
      default_language: en

    >>> settings = load_settings("intl.yaml")
    >>> @intl(settings=settings)
    ... class Article(IntlDocument):
    ...     title = StringField(intl=True)
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from mongointl.base import ConfigurationError, LanguageSettings

ENV_PREFIX = "MONGOINTL_"
SECTION = "intl"


class FileSettingsSource:
    """Language settings stored in a YAML or JSON file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load(self) -> dict[str, Any]:
        if not self._path.exists():
            raise ConfigurationError(f"Configuration file not found: {self._path}")

        content = self._path.read_text(encoding="utf-8")
        suffix = self._path.suffix.lower()
        try:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            elif suffix == ".json":
                data = json.loads(content)
            else:
                raise ConfigurationError(f"Unsupported file format: {suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load {self._path}: {e}") from e

        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Expected a mapping in {self._path}")
        section = data.get(SECTION, data)
        if not isinstance(section, Mapping):
            raise ConfigurationError(f"Expected a mapping under '{SECTION}' in {self._path}")
        return dict(section)


class EnvSettingsSource:
    """Language settings taken from environment variables."""

    def __init__(
        self,
        prefix: str = ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._prefix = prefix
        self._environ = os.environ if environ is None else environ

    def load(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        languages = self._environ.get(f"{self._prefix}LANGUAGES", "")
        codes = [code.strip() for code in languages.split(",") if code.strip()]
        if codes:
            result["languages"] = codes
        default = self._environ.get(f"{self._prefix}DEFAULT_LANGUAGE", "").strip()
        if default:
            result["default_language"] = default
        return result


def load_settings(
    path: str | Path | None = None,
    *,
    env_prefix: str = ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> LanguageSettings:
    """Build language settings from a file and the environment.

    Args:
        path: Optional YAML/JSON file.
        env_prefix: Prefix of the environment variables.
        environ: Environment to read, defaults to ``os.environ``.

    Raises:
        ConfigurationError: If the file cannot be read or no valid languages
            are configured.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data.update(FileSettingsSource(path).load())
    data.update(EnvSettingsSource(env_prefix, environ).load())
    return LanguageSettings.from_dict(data)
