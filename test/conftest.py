#  -*- coding: utf-8 -*-
"""
Shared fixtures.

Every test gets its own deserializer registry and resolver, so registrations
made by one test never leak into another.
"""

from __future__ import annotations

import pytest

from lxml import etree

from beanxml import (BeanXmlReader, BeanXmlWriter, DeserializerRegistry, SerSettings, TypeResolver,
                     CONVERTER)


@pytest.fixture
def registry() -> DeserializerRegistry:
    return DeserializerRegistry()


@pytest.fixture
def resolver() -> TypeResolver:
    return TypeResolver(CONVERTER)


@pytest.fixture
def settings(registry: DeserializerRegistry, resolver: TypeResolver) -> SerSettings:
    return SerSettings().using(deserializers=registry, resolver=resolver)


@pytest.fixture
def writer(settings: SerSettings) -> BeanXmlWriter:
    return BeanXmlWriter(settings)


@pytest.fixture
def reader(settings: SerSettings) -> BeanXmlReader:
    return BeanXmlReader(settings)


@pytest.fixture
def roundtrip(writer: BeanXmlWriter, reader: BeanXmlReader):
    """Write a bean and read the document back."""

    def _roundtrip(bean):
        return reader.read(writer.write(bean))

    return _roundtrip


@pytest.fixture
def parse():
    """Parse a written document into an lxml element tree."""

    def _parse(text: str) -> etree._Element:
        return etree.fromstring(text.encode('utf-8'))

    return _parse
