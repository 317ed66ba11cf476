"""Language-aware interfaces for documents and schemas.

``SchemaLanguageAware`` exposes the schema default language as classmethods,
``LanguageAware`` adds the per-document override on top of it.

Concurrency contract:
    The schema default language is process-wide mutable state. It is changed
    in place by ``set_default_language`` (here or through a connection
    setter) without any locking, and the change is immediately visible to
    every document of the schema, including documents being read by other
    logical operations. Set the language immediately before reading or
    serializing the affected documents, with no suspension point in between.
    Prefer ``LanguageAware.set_language`` / ``language_override`` when the
    choice only concerns one document.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from mongointl.base import ConfigurationError, LanguageSettings, resolve_language

logger = logging.getLogger(__name__)


class SchemaLanguageAware:
    """Schema-level language methods.

    The plugin binds a ``LanguageSettings`` instance to ``_intl`` when it is
    applied to the class.
    """

    _intl: LanguageSettings | None = None

    @classmethod
    def _language_settings(cls) -> LanguageSettings:
        if cls._intl is None:
            raise ConfigurationError(
                f"{cls.__name__} has no language settings, apply the intl plugin first"
            )
        return cls._intl

    @classmethod
    def has_language_settings(cls) -> bool:
        return cls._intl is not None

    @classmethod
    def get_languages(cls) -> tuple[str, ...]:
        return cls._language_settings().languages

    @classmethod
    def get_default_language(cls) -> str:
        return cls._language_settings().default_language

    @classmethod
    def set_default_language(cls, code: str | None) -> None:
        """Change the default language for every document of this schema.

        Embedded schemas rewritten together with this one share the same
        settings object and follow the change. Unknown codes are ignored.
        See the module docstring for the concurrency contract.
        """
        settings = cls._language_settings()
        if not settings.supports(code):
            logger.debug("Ignoring unknown default language %r for %s", code, cls.__name__)
            return
        settings.default_language = code
        logger.debug("Default language of %s set to %s", cls.__name__, code)


class LanguageAware(SchemaLanguageAware):
    """Document-level language methods."""

    _doc_language: str | None = None

    def get_language(self) -> str:
        return resolve_language(self._doc_language, self._language_settings())

    def set_language(self, code: str | None) -> None:
        """Override the language for this document only.

        Unknown codes are ignored and the previous language is kept.
        """
        if not self._language_settings().supports(code):
            logger.debug("Ignoring unknown language %r for %s", code, type(self).__name__)
            return
        self._doc_language = code

    def unset_language(self) -> None:
        self._doc_language = None

    @contextmanager
    def language_override(self, code: str | None) -> Iterator[Any]:
        """Temporarily override the document language.

        Example:
            >>> with article.language_override("de"):
            ...     print(article.title)
        """
        previous = self._doc_language
        self.set_language(code)
        try:
            yield self
        finally:
            self._doc_language = previous


def find_language_owner(document: Any) -> LanguageAware | None:
    """Find the language-aware document that encloses ``document``.

    Embedded documents keep a weak reference to the document they are
    assigned to in ``_instance``. The chain is followed until a
    ``LanguageAware`` object is reached.
    """
    current = document
    try:
        while current is not None:
            if isinstance(current, LanguageAware):
                return current
            current = getattr(current, "_instance", None)
    except ReferenceError:
        # enclosing document was garbage collected
        logger.debug("Enclosing document of %r is gone", type(document).__name__)
    return None
