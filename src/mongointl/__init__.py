"""mongointl - Translatable string fields for mongoengine documents.

Fields declared with ``intl=True`` are stored as one string per configured
language and read/written in the current language, resolved per document,
per schema, or per connection.

Example:
    >>> from mongoengine import StringField
    >>> from mongointl import IntlDocument, intl
    >>>
    >>> @intl(languages=["en", "de"])
    ... class Article(IntlDocument):
    ...     title = StringField(intl=True)
    ...
    >>> article = Article(title="Hello")
    >>> article.set_language("de")
    >>> article.title = "Hallo"
    >>> article.get_value("title.all")
    {'en': 'Hello', 'de': 'Hallo'}
"""

from mongointl.aware import LanguageAware, SchemaLanguageAware, find_language_owner
from mongointl.base import (
    ConfigurationError,
    IntlError,
    LanguageSettings,
    UnsupportedTypeError,
    resolve_language,
)
from mongointl.config import load_settings
from mongointl.connection import (
    ConnectionLanguageSetter,
    get_language_setter,
    install_language_setter,
    reset_language_setters,
    set_default_language,
)
from mongointl.document import IntlDocument
from mongointl.fields import TranslatableField
from mongointl.plugin import apply_intl, intl
from mongointl.rewrite import TranslatableFieldSpec, derive_language_options, plan_rewrite

# Version: Single source of truth from pyproject.toml
try:
    from importlib.metadata import version, PackageNotFoundError

    __version__ = version("mongoengine-intl")
except PackageNotFoundError:
    # Package not installed (development mode)
    __version__ = "0.0.0.dev"

__all__ = [
    # Plugin
    "intl",
    "apply_intl",
    "IntlDocument",
    # Settings
    "LanguageSettings",
    "load_settings",
    "resolve_language",
    # Interfaces
    "LanguageAware",
    "SchemaLanguageAware",
    "find_language_owner",
    # Fields
    "TranslatableField",
    "TranslatableFieldSpec",
    "derive_language_options",
    "plan_rewrite",
    # Connection
    "ConnectionLanguageSetter",
    "get_language_setter",
    "install_language_setter",
    "set_default_language",
    "reset_language_setters",
    # Exceptions
    "IntlError",
    "ConfigurationError",
    "UnsupportedTypeError",
]
