"""Base document class for models with translatable fields."""

from __future__ import annotations

from typing import Any

from mongoengine import Document

from mongointl.aware import LanguageAware
from mongointl.fields import TranslatableField, get_path_value, set_path_value
from mongointl.rewrite import translatable_paths


class IntlDocument(Document, LanguageAware):
    """Abstract ``Document`` with document- and schema-level language methods.

    Besides plain attribute access (``article.title``), translatable fields
    can be reached by dotted path:

    - ``"title"``: value in the current language
    - ``"title.all"``: every stored translation as a dict
    - ``"title.de"``: the German translation, whatever the current language

    Embedded documents follow the language of the document they belong to.
    An embedded document appended to a list only learns its owner once it
    is read back through the list (``menu.dishes[-1]``) or the document is
    reloaded, so write through the list rather than through the reference
    held before ``append``.
    """

    meta = {"abstract": True}

    def __getitem__(self, name: str) -> Any:
        # reload() and modify() copy fields through item access, they need
        # the whole translation set rather than the current-language string
        if isinstance(self._fields.get(name), TranslatableField):
            return self._data.get(name)
        return super().__getitem__(name)

    def get_value(self, path: str) -> Any:
        return get_path_value(self, path)

    def set_value(self, path: str, value: Any) -> None:
        set_path_value(self, path, value)

    @classmethod
    def get_translatable_paths(cls) -> list[str]:
        return translatable_paths(cls)
