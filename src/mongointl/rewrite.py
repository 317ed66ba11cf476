"""Rewriting of translatable field declarations.

The rewrite runs in two phases:

1. ``plan_rewrite`` walks the declared fields (recursing into embedded
   document types) and produces a ``TranslatableFieldSpec`` for every field
   declared with ``intl=True``. Nothing is modified, so configuration and
   type errors leave the schema untouched.
2. ``apply_plan`` replaces each planned field with a ``TranslatableField``
   backed by one string field per language and binds the visited schemas to
   the settings.

Field options understood by the plugin::

    title = StringField(intl=True, max_length=120, required=True)
    slug = StringField(intl=True, default_all="untitled", required_all=True)

``required`` and ``default`` only apply to the default language unless the
``*_all`` variants are used. All other options apply to every language.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mongoengine.base import BaseField
from mongoengine.fields import EmbeddedDocumentField, StringField

from mongointl.base import ConfigurationError, LanguageSettings, UnsupportedTypeError
from mongointl.fields import TranslatableField, build_translations_type

logger = logging.getLogger(__name__)

INTL = "intl"
DEFAULT_ALL = "default_all"
REQUIRED_ALL = "required_all"
PLUGIN_OPTIONS = (INTL, DEFAULT_ALL, REQUIRED_ALL)


# =============================================================================
# Option Derivation
# =============================================================================


def derive_language_options(
    options: Mapping[str, Any],
    settings: LanguageSettings,
) -> dict[str, dict[str, Any]]:
    """Derive the options of every language slot from the declared options.

    Args:
        options: Options of the declared field, plugin options included.
        settings: Language settings of the schema.

    Returns:
        Mapping from language code to the options of its slot.

    Example:
        >>> settings = LanguageSettings.create(["en", "de"])
        >>> derive_language_options({"required": True, "max_length": 5}, settings)
        {'en': {'required': True, 'max_length': 5}, 'de': {'max_length': 5}}
    """
    base = {key: value for key, value in options.items() if key not in PLUGIN_OPTIONS}
    result: dict[str, dict[str, Any]] = {}
    for language in settings.languages:
        language_options = dict(base)
        if language != settings.default_language:
            language_options.pop("default", None)
            language_options.pop("required", None)
        if options.get(DEFAULT_ALL) is not None:
            language_options["default"] = options[DEFAULT_ALL]
        if options.get(REQUIRED_ALL) is not None:
            language_options["required"] = options[REQUIRED_ALL]
        result[language] = language_options
    return result


def field_options(declared: BaseField) -> dict[str, Any]:
    """Collect the options of a declared field relevant to the rewrite."""
    options: dict[str, Any] = {"required": declared.required, "default": declared.default}
    for name in PLUGIN_OPTIONS:
        if name in vars(declared):
            options[name] = vars(declared)[name]
    return options


def is_translatable(declared: BaseField) -> bool:
    return bool(vars(declared).get(INTL))


def embedded_schema(declared: BaseField) -> type | None:
    """Return the embedded document type behind a field, if any."""
    if isinstance(declared, TranslatableField):
        return None
    if isinstance(declared, EmbeddedDocumentField):
        return declared.document_type
    # ListField / MapField of embedded documents
    inner = getattr(declared, "field", None)
    if isinstance(inner, EmbeddedDocumentField) and not isinstance(inner, TranslatableField):
        return inner.document_type
    return None


def _translatable_item(declared: BaseField) -> BaseField | None:
    """Return the item field of a list/map field if it is marked ``intl``."""
    inner = getattr(declared, "field", None)
    while isinstance(inner, BaseField):
        if is_translatable(inner):
            return inner
        inner = getattr(inner, "field", None)
    return None


# =============================================================================
# Planning
# =============================================================================


@dataclass(frozen=True)
class TranslatableFieldSpec:
    """A declared field that will be stored per language.

    Attributes:
        path: Dotted path from the schema the plugin was applied to.
        schema: Document class declaring the field.
        name: Field name within ``schema``.
        declared: The original field declaration.
        language_options: Slot options per language.
    """

    path: str
    schema: type
    name: str
    declared: BaseField
    language_options: Mapping[str, Mapping[str, Any]]


@dataclass
class RewritePlan:
    """Fields to rewrite and schemas to bind for one plugin application."""

    settings: LanguageSettings
    specs: list[TranslatableFieldSpec] = field(default_factory=list)
    schemas: list[type] = field(default_factory=list)

    @property
    def paths(self) -> list[str]:
        return [spec.path for spec in self.specs]


def plan_rewrite(schema: type, settings: LanguageSettings) -> RewritePlan:
    """Collect translatable fields of ``schema`` and its embedded schemas.

    Raises:
        UnsupportedTypeError: If a non-string field is marked translatable.
        ConfigurationError: If an already rewritten schema uses other languages.
    """
    plan = RewritePlan(settings=settings)
    _collect(schema, settings, "", plan, set())
    return plan


def _check_languages(bound: LanguageSettings, settings: LanguageSettings, where: str) -> None:
    if bound.languages != settings.languages:
        raise ConfigurationError(
            f"{where} is already configured for languages {list(bound.languages)}, "
            f"cannot use {list(settings.languages)}"
        )


def _collect(
    schema: type,
    settings: LanguageSettings,
    prefix: str,
    plan: RewritePlan,
    seen: set[type],
) -> None:
    if schema in seen:
        return
    seen.add(schema)
    plan.schemas.append(schema)

    for name, declared in schema._fields.items():
        path = f"{prefix}{name}"

        if isinstance(declared, TranslatableField):
            _check_languages(declared.settings, settings, f"Field '{path}'")
            continue

        nested = embedded_schema(declared)
        if nested is not None:
            bound = vars(nested).get("_intl")
            if bound is not None:
                if translatable_paths(nested):
                    _check_languages(bound, settings, f"Embedded schema {nested.__name__}")
                continue
            _collect(nested, settings, f"{path}.", plan, seen)
            continue

        inner = _translatable_item(declared)
        if inner is not None:
            raise UnsupportedTypeError(
                f"Field '{path}' of type {type(declared).__name__} cannot hold translatable "
                f"{type(inner).__name__} items, declare the translatable string on the "
                "field itself or inside an embedded document",
                field_name=path,
                field_type=type(declared).__name__,
            )

        if not is_translatable(declared):
            continue

        if not isinstance(declared, StringField):
            raise UnsupportedTypeError(
                f"Field '{path}' of type {type(declared).__name__} cannot be translatable, "
                "only string fields are supported",
                field_name=path,
                field_type=type(declared).__name__,
            )

        plan.specs.append(
            TranslatableFieldSpec(
                path=path,
                schema=schema,
                name=name,
                declared=declared,
                language_options=derive_language_options(field_options(declared), settings),
            )
        )


# =============================================================================
# Expansion
# =============================================================================


def build_slot(declared: BaseField, language: str, options: Mapping[str, Any]) -> BaseField:
    """Copy the declared field into the storage slot of one language."""
    slot = copy.copy(declared)
    for name in PLUGIN_OPTIONS:
        slot.__dict__.pop(name, None)
    slot.name = language
    slot.db_field = language
    slot._owner_document = None
    # keep the declared language order in storage
    slot.creation_counter = BaseField.creation_counter
    BaseField.creation_counter += 1
    slot.required = options.get("required", False)
    slot.default = options.get("default")
    return slot


def _type_name(schema: type, name: str) -> str:
    return schema.__name__ + "".join(part.title() for part in name.split("_")) + "Translations"


def build_translatable_field(spec: TranslatableFieldSpec, settings: LanguageSettings) -> TranslatableField:
    """Turn a spec into the field replacing the declared one."""
    slots = {
        language: build_slot(spec.declared, language, options)
        for language, options in spec.language_options.items()
    }
    translations_type = build_translations_type(
        _type_name(spec.schema, spec.name),
        slots,
        module=spec.schema.__module__,
    )
    return TranslatableField(translations_type, settings=settings)


def replace_field(schema: type, name: str, replacement: BaseField) -> None:
    declared = schema._fields[name]
    replacement.name = name
    replacement.db_field = declared.db_field
    replacement.creation_counter = declared.creation_counter
    replacement.owner_document = schema
    schema._fields[name] = replacement
    setattr(schema, name, replacement)


def apply_plan(plan: RewritePlan) -> None:
    for spec in plan.specs:
        replace_field(spec.schema, spec.name, build_translatable_field(spec, plan.settings))
        logger.debug(
            "Rewrote %s.%s into languages %s",
            spec.schema.__name__,
            spec.name,
            ", ".join(plan.settings.languages),
        )
    for schema in plan.schemas:
        schema._intl = plan.settings


def translatable_paths(schema: type, prefix: str = "", seen: set[type] | None = None) -> list[str]:
    """List dotted paths of the rewritten fields of ``schema``."""
    seen = set() if seen is None else seen
    if schema in seen:
        return []
    seen.add(schema)

    paths: list[str] = []
    for name, declared in schema._fields.items():
        if isinstance(declared, TranslatableField):
            paths.append(f"{prefix}{name}")
            continue
        nested = embedded_schema(declared)
        if nested is not None:
            paths.extend(translatable_paths(nested, f"{prefix}{name}.", seen))
    return paths
