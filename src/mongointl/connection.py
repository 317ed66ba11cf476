"""Connection-wide default language changes.

A ``ConnectionLanguageSetter`` is installed once per mongoengine connection
alias, the first time the plugin is applied to a document class using that
alias. Calling it forwards the new default language to every language-aware
model bound to the connection, subclasses of configured models included.

Example:
    >>> from mongointl import set_default_language
    >>> set_default_language("de")  # every model on the default connection
    >>> get_language_setter("archive")("fr")  # models using db_alias="archive"
"""

from __future__ import annotations

import logging
from typing import Iterator

from mongoengine.connection import DEFAULT_CONNECTION_NAME

from mongointl.aware import SchemaLanguageAware

logger = logging.getLogger(__name__)


def model_alias(model: type) -> str:
    return getattr(model, "_meta", {}).get("db_alias") or DEFAULT_CONNECTION_NAME


def _with_subclasses(model: type) -> Iterator[type]:
    yield model
    for subclass in model.__subclasses__():
        yield from _with_subclasses(subclass)


class ConnectionLanguageSetter:
    """Fan-out of ``set_default_language`` to the models of one connection."""

    def __init__(self, alias: str = DEFAULT_CONNECTION_NAME) -> None:
        self.alias = alias

    def models(self) -> list[type[SchemaLanguageAware]]:
        """Language-aware models currently bound to this connection."""
        found: list[type[SchemaLanguageAware]] = []
        for registered in _models:
            for model in _with_subclasses(registered):
                if model in found or not issubclass(model, SchemaLanguageAware):
                    continue
                if getattr(model, "_meta", {}).get("abstract"):
                    continue
                if not model.has_language_settings() or model_alias(model) != self.alias:
                    continue
                found.append(model)
        return found

    def __call__(self, code: str | None) -> None:
        models = self.models()
        logger.debug(
            "Setting default language %r on %d model(s) of connection '%s'",
            code,
            len(models),
            self.alias,
        )
        for model in models:
            model.set_default_language(code)

    def __repr__(self) -> str:
        return f"ConnectionLanguageSetter(alias={self.alias!r})"


# =============================================================================
# Global Registry
# =============================================================================


_models: list[type] = []
_setters: dict[str, ConnectionLanguageSetter] = {}


def register_model(model: type) -> ConnectionLanguageSetter:
    """Track a configured model and install the setter of its connection."""
    if model not in _models:
        _models.append(model)
    return install_language_setter(model_alias(model))


def install_language_setter(alias: str = DEFAULT_CONNECTION_NAME) -> ConnectionLanguageSetter:
    """Install the setter for ``alias`` unless it already exists."""
    setter = _setters.get(alias)
    if setter is not None:
        logger.debug("Language setter already installed for connection '%s'", alias)
        return setter
    setter = ConnectionLanguageSetter(alias)
    _setters[alias] = setter
    logger.info("Installed language setter for connection '%s'", alias)
    return setter


def get_language_setter(alias: str = DEFAULT_CONNECTION_NAME) -> ConnectionLanguageSetter | None:
    return _setters.get(alias)


def set_default_language(code: str | None, alias: str = DEFAULT_CONNECTION_NAME) -> None:
    """Change the default language of every model on a connection.

    Does nothing until a translatable model was declared for ``alias``.
    Unknown codes are ignored per model.
    """
    setter = _setters.get(alias)
    if setter is None:
        logger.debug("No language setter installed for connection '%s'", alias)
        return
    setter(code)


def reset_language_setters() -> None:
    """Forget installed setters and tracked models (mainly for testing)."""
    _setters.clear()
    _models.clear()
