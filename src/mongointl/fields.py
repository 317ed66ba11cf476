"""Translatable field descriptor and translation storage types.

A translatable field is stored as an embedded document holding one string
field per configured language::

    title: {"en": "Hello", "de": "Hallo"}

On the owning document the field behaves like a single string that is read
and written in the current language.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from mongoengine import EmbeddedDocument
from mongoengine.base import BaseField
from mongoengine.fields import EmbeddedDocumentField

from mongointl.aware import find_language_owner
from mongointl.base import LanguageSettings, resolve_language

logger = logging.getLogger(__name__)

ALL_LANGUAGES = "all"


def build_translations_type(
    name: str,
    slots: Mapping[str, BaseField],
    module: str | None = None,
) -> type[EmbeddedDocument]:
    """Create the embedded document type holding one field per language."""
    attrs: dict[str, Any] = dict(slots)
    attrs["meta"] = {"allow_inheritance": False}
    attrs["__module__"] = module or __name__
    return type(EmbeddedDocument)(name, (EmbeddedDocument,), attrs)


class TranslatableField(EmbeddedDocumentField):
    """Field exposing a per-language mapping as a single string.

    Reads and writes go to the slot of the current language, which is the
    language of the enclosing ``LanguageAware`` document, or the schema
    default when the document is not attached to one.

    Args:
        translations_type: Embedded document type with one field per language.
        settings: Language settings of the schema declaring the field.
    """

    def __init__(
        self,
        translations_type: type[EmbeddedDocument],
        settings: LanguageSettings,
        **kwargs: Any,
    ):
        self.settings = settings
        kwargs.setdefault("default", translations_type)
        super().__init__(translations_type, **kwargs)

    # -------------------------------------------------------------------------
    # Language resolution
    # -------------------------------------------------------------------------

    def current_language(self, instance: Any) -> str:
        owner = find_language_owner(instance)
        if owner is None:
            return resolve_language(None, self.settings)
        return owner.get_language()

    def _translations(self, instance: Any) -> EmbeddedDocument:
        translations = instance._data.get(self.name)
        if translations is None:
            translations = self.document_type()
            super().__set__(instance, translations)
        return translations

    # -------------------------------------------------------------------------
    # Descriptor
    # -------------------------------------------------------------------------

    def __get__(self, instance: Any, owner: Any) -> Any:
        if instance is None:
            return self
        return self.get_translation(instance, self.current_language(instance))

    def __set__(self, instance: Any, value: Any) -> None:
        if isinstance(value, self.document_type):
            super().__set__(instance, value)
        elif value is None and instance._data.get(self.name) is None:
            # document construction assigns the default translations
            super().__set__(instance, value)
        elif isinstance(value, Mapping):
            self.set_all(instance, value)
        else:
            self.set_translation(instance, self.current_language(instance), value)

    def to_python(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return self.document_type(
                **{lang: value[lang] for lang in self.settings.languages if lang in value}
            )
        # plain strings are written through __set__
        return value

    # -------------------------------------------------------------------------
    # Slot access
    # -------------------------------------------------------------------------

    def get_translation(self, instance: Any, language: str) -> str | None:
        translations = instance._data.get(self.name)
        if translations is None:
            return None
        return getattr(translations, language, None)

    def set_translation(self, instance: Any, language: str, value: Any) -> None:
        self._write_slot(instance, self._translations(instance), language, value)

    def _write_slot(
        self,
        instance: Any,
        translations: EmbeddedDocument,
        language: str,
        value: Any,
    ) -> None:
        setattr(translations, language, value)
        # tracked on the owner as the whole field, not as "<field>.<lang>"
        translations._changed_fields = []
        if getattr(instance, "_initialised", False):
            instance._mark_as_changed(self.name)

    def get_all(self, instance: Any) -> dict[str, str]:
        """Return every stored translation, keyed by language."""
        translations = instance._data.get(self.name)
        if translations is None:
            return {}
        result = {}
        for language in self.settings.languages:
            value = getattr(translations, language, None)
            if value is not None:
                result[language] = value
        return result

    def set_all(self, instance: Any, values: Mapping[str, Any] | None) -> None:
        """Write several translations at once.

        Keys that are not configured languages are ignored, as are empty
        values, which never overwrite a stored translation.
        """
        if not isinstance(values, Mapping):
            logger.debug("Ignoring non-mapping translations for %s: %r", self.name, values)
            return
        translations = self._translations(instance)
        for language in self.settings.languages:
            value = values.get(language)
            if not value:
                continue
            self._write_slot(instance, translations, language, value)


# =============================================================================
# Path Access
# =============================================================================


def _locate(document: Any, path: str) -> tuple[Any, str, list[str]]:
    """Walk ``path`` down to the document declaring its last real field.

    Returns the declaring document, the field name and the remaining path
    parts, which are only non-empty below a translatable field.
    """
    parts = path.split(".")
    current = document
    index = 0
    while index < len(parts):
        part = parts[index]
        if isinstance(current, (list, tuple)):
            try:
                current = current[int(part)]
            except (ValueError, IndexError) as exc:
                raise KeyError(path) from exc
            index += 1
            continue

        fields = getattr(current, "_fields", None)
        if fields is None or part not in fields:
            raise KeyError(path)
        rest = parts[index + 1 :]
        if not rest or isinstance(fields[part], TranslatableField):
            return current, part, rest
        current = getattr(current, part)
        if current is None:
            raise KeyError(path)
        index += 1
    raise KeyError(path)


def _translatable_target(
    field: TranslatableField, rest: list[str], path: str
) -> str | None:
    if not rest:
        return None
    if len(rest) == 1 and (rest[0] == ALL_LANGUAGES or rest[0] in field.settings.languages):
        return rest[0]
    raise KeyError(path)


def get_path_value(document: Any, path: str) -> Any:
    """Read a dotted path, understanding ``<field>.all`` and ``<field>.<lang>``."""
    owner, name, rest = _locate(document, path)
    field = owner._fields[name]
    if not isinstance(field, TranslatableField):
        return getattr(owner, name)

    target = _translatable_target(field, rest, path)
    if target is None:
        return getattr(owner, name)
    if target == ALL_LANGUAGES:
        return field.get_all(owner)
    return field.get_translation(owner, target)


def set_path_value(document: Any, path: str, value: Any) -> None:
    """Write a dotted path, understanding ``<field>.all`` and ``<field>.<lang>``."""
    owner, name, rest = _locate(document, path)
    field = owner._fields[name]
    if not isinstance(field, TranslatableField):
        setattr(owner, name, value)
        return

    target = _translatable_target(field, rest, path)
    if target is None:
        setattr(owner, name, value)
    elif target == ALL_LANGUAGES:
        field.set_all(owner, value)
    else:
        field.set_translation(owner, target, value)
