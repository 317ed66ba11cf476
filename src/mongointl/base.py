"""Base types for the mongointl plugin.

This module defines the core abstractions shared by every other module:
- IntlError: Base exception and its specialisations
- LanguageSettings: Per-schema language configuration
- resolve_language: Document override / schema default resolution
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


# =============================================================================
# Exceptions
# =============================================================================


class IntlError(Exception):
    """Base exception for mongointl errors."""

    def __init__(self, message: str, field_name: str | None = None):
        self.field_name = field_name
        super().__init__(message)


class ConfigurationError(IntlError):
    """Raised when the plugin is attached with an invalid configuration."""

    pass


class UnsupportedTypeError(IntlError):
    """Raised when a non-string field is marked as translatable."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        field_type: str | None = None,
    ):
        self.field_type = field_type
        super().__init__(message, field_name)


# =============================================================================
# Language Settings
# =============================================================================


@dataclass
class LanguageSettings:
    """Language configuration owned by a schema.

    One instance is created when the plugin is attached and is shared by
    reference with every document of that schema and with its embedded
    schemas. Only ``default_language`` changes after creation.

    Attributes:
        languages: Configured language codes, in declaration order.
        default_language: Fallback language, always one of ``languages``.
    """

    languages: tuple[str, ...]
    default_language: str

    @classmethod
    def create(
        cls,
        languages: Sequence[str] | None,
        default_language: str | None = None,
    ) -> LanguageSettings:
        """Validate and normalise plugin options.

        Args:
            languages: Non-empty sequence of language codes. It is copied.
            default_language: Preferred default. Falls back to the first
                language when missing or not configured.

        Raises:
            ConfigurationError: If ``languages`` is missing, not a sequence,
                empty, or contains an unusable code.
        """
        if (
            languages is None
            or isinstance(languages, (str, bytes))
            or not isinstance(languages, Sequence)
            or not languages
        ):
            raise ConfigurationError("Required languages list is missing")

        codes = tuple(languages)
        for code in codes:
            if not isinstance(code, str) or not code or "." in code:
                raise ConfigurationError(f"Invalid language code: {code!r}")

        if not default_language or default_language not in codes:
            default_language = codes[0]

        return cls(languages=codes, default_language=default_language)

    def supports(self, code: Any) -> bool:
        """Check whether ``code`` is a configured language."""
        return bool(code) and isinstance(code, str) and code in self.languages

    def copy(self) -> LanguageSettings:
        return LanguageSettings(self.languages, self.default_language)

    def to_dict(self) -> dict[str, Any]:
        return {
            "languages": list(self.languages),
            "default_language": self.default_language,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LanguageSettings:
        return cls.create(data.get("languages"), data.get("default_language"))


def resolve_language(override: str | None, settings: LanguageSettings) -> str:
    """Return the document override if set, else the schema default."""
    if override:
        return override
    return settings.default_language
