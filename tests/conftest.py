"""Shared fixtures for mongointl tests."""

from __future__ import annotations

import mongomock
import pytest
from mongoengine import (
    EmbeddedDocument,
    EmbeddedDocumentField,
    ListField,
    StringField,
    connect,
    disconnect,
)

from mongointl import IntlDocument, intl, reset_language_setters


@pytest.fixture(autouse=True)
def reset_setters():
    """Forget connection setters and tracked models between tests."""
    reset_language_setters()
    yield
    reset_language_setters()


@pytest.fixture
def mongo_db():
    """In-memory database on the default connection alias."""
    disconnect()
    connection = connect("mongointl-test", mongo_client_class=mongomock.MongoClient)
    yield connection
    disconnect()


@pytest.fixture
def article_cls():
    """Article model translated into en/de/fr with en as default."""

    @intl(languages=["en", "de", "fr"], default_language="en")
    class Article(IntlDocument):
        title = StringField(intl=True, max_length=20, required=True)
        summary = StringField(intl=True)
        slug = StringField()

    return Article


@pytest.fixture
def person_cls():
    """Person model with a translatable field inside an embedded document."""

    class Address(EmbeddedDocument):
        street = StringField(intl=True)
        zip_code = StringField()

    @intl(languages=["en", "de"])
    class Person(IntlDocument):
        name = StringField()
        address = EmbeddedDocumentField(Address)

    return Person


@pytest.fixture
def menu_cls():
    """Menu model with translatable fields inside a list of embedded documents."""

    class Dish(EmbeddedDocument):
        label = StringField(intl=True)

    @intl(languages=["en", "de"])
    class Menu(IntlDocument):
        dishes = ListField(EmbeddedDocumentField(Dish))

    return Menu
