"""Attachment of the intl plugin to document classes.

Example:
    >>> from mongoengine import StringField
    >>> from mongointl import IntlDocument, intl
    >>>
    >>> @intl(languages=["en", "de", "fr"], default_language="en")
    ... class Article(IntlDocument):
    ...     title = StringField(intl=True, max_length=120, required=True)
    ...
    >>> article = Article(title="Hello")
    >>> article.set_value("title.de", "Hallo")
    >>> article.get_value("title.all")
    {'en': 'Hello', 'de': 'Hallo'}
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Callable, TypeVar

from mongoengine import Document

from mongointl.aware import LanguageAware
from mongointl.base import ConfigurationError, LanguageSettings
from mongointl.connection import register_model
from mongointl.rewrite import apply_plan, plan_rewrite

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)


def apply_intl(
    document_cls: type,
    languages: Sequence[str] | None = None,
    default_language: str | None = None,
    *,
    settings: LanguageSettings | None = None,
) -> LanguageSettings:
    """Apply the plugin to a document class.

    Translatable fields of the class and of its embedded document types are
    rewritten into per-language storage. All of them share one
    ``LanguageSettings`` instance.

    Args:
        document_cls: ``IntlDocument`` subclass, or an ``EmbeddedDocument``.
        languages: Language codes, first one is the fallback default.
        default_language: Default language for reads and writes.
        settings: Settings to copy instead of ``languages``/``default_language``.

    Returns:
        The settings bound to ``document_cls``.

    Raises:
        ConfigurationError: If the languages are invalid or the class cannot
            carry document-level language methods.
        UnsupportedTypeError: If a non-string field is marked translatable.
    """
    if settings is not None:
        if languages is None:
            languages = settings.languages
        if default_language is None:
            default_language = settings.default_language
    config = LanguageSettings.create(languages, default_language)

    if not isinstance(document_cls, type) or not hasattr(document_cls, "_fields"):
        raise ConfigurationError(f"{document_cls!r} is not a document class")
    if issubclass(document_cls, Document) and not issubclass(document_cls, LanguageAware):
        raise ConfigurationError(
            f"{document_cls.__name__} must derive from IntlDocument to use translatable fields"
        )

    existing = vars(document_cls).get("_intl")
    if existing is not None:
        logger.warning("intl plugin is already applied to %s", document_cls.__name__)
        return existing

    plan = plan_rewrite(document_cls, config)
    apply_plan(plan)
    logger.info(
        "Applied intl plugin to %s (languages: %s, default: %s, fields: %s)",
        document_cls.__name__,
        ", ".join(config.languages),
        config.default_language,
        ", ".join(plan.paths) or "-",
    )

    if issubclass(document_cls, Document):
        register_model(document_cls)
    return config


def intl(
    languages: Sequence[str] | None = None,
    default_language: str | None = None,
    *,
    settings: LanguageSettings | None = None,
) -> Callable[[T], T]:
    """Class decorator form of :func:`apply_intl`."""

    def decorator(document_cls: T) -> T:
        apply_intl(document_cls, languages, default_language, settings=settings)
        return document_cls

    return decorator
