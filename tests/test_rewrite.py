"""Tests for translatable field rewriting."""

from __future__ import annotations

import pytest
from mongoengine import (
    Document,
    EmbeddedDocument,
    EmbeddedDocumentField,
    IntField,
    ListField,
    MapField,
    StringField,
    ValidationError,
)

from mongointl import (
    ConfigurationError,
    IntlDocument,
    LanguageSettings,
    TranslatableField,
    UnsupportedTypeError,
    apply_intl,
    derive_language_options,
    intl,
    plan_rewrite,
)


# =============================================================================
# Option Derivation Tests
# =============================================================================


class TestDeriveLanguageOptions:
    """Tests for derive_language_options."""

    @pytest.fixture
    def settings(self):
        return LanguageSettings.create(["en", "de", "fr"], "de")

    def test_default_and_required_only_for_default_language(self, settings):
        options = derive_language_options(
            {"intl": True, "required": True, "default": "x", "max_length": 5},
            settings,
        )

        assert options["de"] == {"required": True, "default": "x", "max_length": 5}
        assert options["en"] == {"max_length": 5}
        assert options["fr"] == {"max_length": 5}

    def test_default_all_applies_to_every_language(self, settings):
        options = derive_language_options(
            {"intl": True, "default": "x", "default_all": "n/a"},
            settings,
        )

        assert {lang: opts["default"] for lang, opts in options.items()} == {
            "en": "n/a",
            "de": "n/a",
            "fr": "n/a",
        }

    def test_required_all_applies_to_every_language(self, settings):
        options = derive_language_options({"intl": True, "required_all": True}, settings)

        assert all(opts["required"] is True for opts in options.values())

    def test_plugin_options_are_dropped(self, settings):
        options = derive_language_options(
            {"intl": True, "default_all": "a", "required_all": True},
            settings,
        )

        for opts in options.values():
            assert "intl" not in opts
            assert "default_all" not in opts
            assert "required_all" not in opts

    def test_one_entry_per_language(self, settings):
        options = derive_language_options({"intl": True}, settings)

        assert list(options) == ["en", "de", "fr"]


# =============================================================================
# Planning Tests
# =============================================================================


class TestPlanRewrite:
    """Tests for plan_rewrite."""

    def test_collects_translatable_fields(self):
        class Address(EmbeddedDocument):
            street = StringField(intl=True)

        class Place(IntlDocument):
            name = StringField(intl=True)
            code = StringField()
            address = EmbeddedDocumentField(Address)

        settings = LanguageSettings.create(["en", "de"])
        plan = plan_rewrite(Place, settings)

        assert plan.paths == ["name", "address.street"]
        assert plan.schemas == [Place, Address]

    def test_planning_does_not_modify_schema(self):
        class Place(IntlDocument):
            name = StringField(intl=True)

        plan_rewrite(Place, LanguageSettings.create(["en", "de"]))

        assert type(Place._fields["name"]) is StringField
        assert not Place.has_language_settings()

    def test_self_reference_is_visited_once(self):
        class Node(EmbeddedDocument):
            label = StringField(intl=True)
            child = EmbeddedDocumentField("self")

        class Tree(IntlDocument):
            root = EmbeddedDocumentField(Node)

        plan = plan_rewrite(Tree, LanguageSettings.create(["en"]))

        assert plan.paths == ["root.label"]


# =============================================================================
# Rewrite Tests
# =============================================================================


class TestRewrite:
    """Tests for the rewritten schema."""

    def test_field_is_replaced(self, article_cls):
        field = article_cls._fields["title"]

        assert isinstance(field, TranslatableField)
        assert article_cls.title is field
        assert field.name == "title"
        assert field.db_field == "title"

    def test_one_slot_per_language(self, article_cls):
        translations_type = article_cls._fields["title"].document_type

        assert list(translations_type._fields_ordered) == ["en", "de", "fr"]
        assert all(isinstance(f, StringField) for f in translations_type._fields.values())

    def test_slot_options(self, article_cls):
        slots = article_cls._fields["title"].document_type._fields

        assert slots["en"].required is True
        assert slots["de"].required is False
        assert slots["fr"].required is False
        assert {slot.max_length for slot in slots.values()} == {20}

    def test_plain_fields_are_untouched(self, article_cls):
        assert type(article_cls._fields["slug"]) is StringField

    def test_translatable_paths(self, article_cls, person_cls, menu_cls):
        assert article_cls.get_translatable_paths() == ["title", "summary"]
        assert person_cls.get_translatable_paths() == ["address.street"]
        assert menu_cls.get_translatable_paths() == ["dishes.label"]

    def test_custom_db_field_is_kept(self):
        @intl(languages=["en", "de"])
        class Page(IntlDocument):
            heading = StringField(intl=True, db_field="h")

        page = Page(heading="Welcome")

        assert page.to_mongo()["h"] == {"en": "Welcome"}

    def test_validators_apply_to_every_language(self, article_cls):
        article = article_cls(title="Hello")
        article.set_value("title.fr", "x" * 30)

        with pytest.raises(ValidationError) as exc_info:
            article.validate()

        assert "fr" in exc_info.value.errors["title"]

    def test_required_only_for_default_language(self, article_cls):
        article = article_cls()
        article.set_value("title.de", "Hallo")

        with pytest.raises(ValidationError) as exc_info:
            article.validate()
        assert "en" in exc_info.value.errors["title"]

        article.title = "Hello"
        article.validate()

    def test_required_all(self):
        @intl(languages=["en", "de"])
        class Label(IntlDocument):
            text = StringField(intl=True, required_all=True)

        label = Label(text="Yes")

        with pytest.raises(ValidationError) as exc_info:
            label.validate()
        assert "de" in exc_info.value.errors["text"]

    def test_default_only_for_default_language(self):
        @intl(languages=["en", "de"], default_language="de")
        class Label(IntlDocument):
            text = StringField(intl=True, default="Neu")

        assert Label().get_value("text.all") == {"de": "Neu"}

    def test_default_all(self):
        @intl(languages=["en", "de"])
        class Label(IntlDocument):
            text = StringField(intl=True, default_all="n/a")

        assert Label().get_value("text.all") == {"en": "n/a", "de": "n/a"}

    def test_regex_applies_to_every_language(self):
        @intl(languages=["en", "de"])
        class Code(IntlDocument):
            value = StringField(intl=True, regex=r"^[a-z]+$")

        code = Code(value="abc")
        code.set_value("value.de", "ABC")

        with pytest.raises(ValidationError):
            code.validate()


# =============================================================================
# Error Tests
# =============================================================================


class TestRewriteErrors:
    """Tests for attach-time failures."""

    def test_non_string_field_raises(self):
        class Counter(IntlDocument):
            title = StringField(intl=True)
            count = IntField(intl=True)

        with pytest.raises(UnsupportedTypeError) as exc_info:
            apply_intl(Counter, ["en", "de"])

        assert exc_info.value.field_name == "count"
        assert exc_info.value.field_type == "IntField"

    def test_failed_attach_leaves_schema_unmodified(self):
        class Counter(IntlDocument):
            title = StringField(intl=True)
            count = IntField(intl=True)

        with pytest.raises(UnsupportedTypeError):
            apply_intl(Counter, ["en", "de"])

        assert type(Counter._fields["title"]) is StringField
        assert not Counter.has_language_settings()

    def test_non_string_field_in_embedded_schema_raises(self):
        class Stats(EmbeddedDocument):
            total = IntField(intl=True)

        class Report(IntlDocument):
            stats = EmbeddedDocumentField(Stats)

        with pytest.raises(UnsupportedTypeError):
            apply_intl(Report, ["en"])

    @pytest.mark.parametrize("container", [ListField, MapField])
    def test_translatable_container_items_raise(self, container):
        class Tagged(IntlDocument):
            title = StringField(intl=True)
            tags = container(StringField(intl=True))

        with pytest.raises(UnsupportedTypeError) as exc_info:
            apply_intl(Tagged, ["en", "de"])

        assert exc_info.value.field_name == "tags"
        assert exc_info.value.field_type == container.__name__
        assert type(Tagged._fields["title"]) is StringField

    def test_nested_list_items_raise(self):
        class Grid(IntlDocument):
            cells = ListField(ListField(StringField(intl=True)))

        with pytest.raises(UnsupportedTypeError):
            apply_intl(Grid, ["en"])

    @pytest.mark.parametrize("languages", [None, [], "en"])
    def test_missing_languages_raise(self, languages):
        class Page(IntlDocument):
            heading = StringField(intl=True)

        with pytest.raises(ConfigurationError):
            apply_intl(Page, languages)

        assert type(Page._fields["heading"]) is StringField

    def test_plain_document_is_rejected(self):
        class Page(Document):
            heading = StringField(intl=True)

        with pytest.raises(ConfigurationError, match="IntlDocument"):
            apply_intl(Page, ["en"])

    def test_embedded_schema_with_other_languages_raises(self, person_cls):
        address_cls = person_cls._fields["address"].document_type

        class Company(IntlDocument):
            address = EmbeddedDocumentField(address_cls)

        with pytest.raises(ConfigurationError, match="already configured"):
            apply_intl(Company, ["en", "fr"])


# =============================================================================
# Idempotence Tests
# =============================================================================


class TestIdempotence:
    """Tests for applying the plugin more than once."""

    def test_second_application_is_ignored(self, article_cls, caplog):
        settings = article_cls._intl
        field = article_cls._fields["title"]

        with caplog.at_level("WARNING", logger="mongointl.plugin"):
            result = apply_intl(article_cls, ["it"])

        assert result is settings
        assert article_cls.get_languages() == ("en", "de", "fr")
        assert article_cls._fields["title"] is field
        assert "already applied" in caplog.text

    def test_shared_embedded_schema_keeps_first_binding(self, person_cls):
        address_cls = person_cls._fields["address"].document_type
        street = address_cls._fields["street"]

        @intl(languages=["en", "de"], default_language="de")
        class Company(IntlDocument):
            address = EmbeddedDocumentField(address_cls)

        assert address_cls._intl is person_cls._intl
        assert address_cls._fields["street"] is street

        company = Company(address=address_cls())
        company.address.street = "Hauptstrasse"

        assert company.get_value("address.street.all") == {"de": "Hauptstrasse"}
