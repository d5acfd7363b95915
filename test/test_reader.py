#  -*- coding: utf-8 -*-
"""
Tests for the XML reader: structure checks, error reporting and streaming.
"""

from __future__ import annotations

import asyncio
import io
import sys

import pytest

from beanxml import (BeanXmlReader, BeanBuildError, ConversionError, DocumentFormatError, TypeResolutionError,
                     UnknownPropertyError)

from sample_beans import Address, Circle, Collections, Person, Range


PERSON = """<?xml version='1.0' encoding='UTF-8'?>
<bean type="sample_beans.Person">
  <name>Ada</name>
  <age>36</age>
  <addresses metatype="List">
    <item>
      <street>1 Main St</street>
      <city>Springfield</city>
    </item>
  </addresses>
  <favourite type=".Circle">
    <radius>2.0</radius>
  </favourite>
  <nickname null="true"/>
</bean>
"""


# ========== ========== ========== ========== Basic reading
class TestRead:

    def test_read_document(self, reader: BeanXmlReader) -> None:
        person = reader.read(PERSON)

        assert person.name == 'Ada'
        assert person.age == 36
        assert person.addresses == [Address(street='1 Main St', city='Springfield')]
        assert person.favourite == Circle(radius=2.0)
        assert person.nickname is None

    def test_missing_properties_take_defaults(self, reader: BeanXmlReader) -> None:
        circle = reader.read('<bean type="sample_beans.Circle"><name>c</name></bean>')
        assert circle.radius == 1.0

    def test_bytes_and_streams(self, reader: BeanXmlReader) -> None:
        assert reader.read(PERSON.encode('utf-8')) == reader.read(PERSON)
        assert reader.read(io.BytesIO(PERSON.encode('utf-8'))).name == 'Ada'

    def test_declared_collection_without_metatype(self, reader: BeanXmlReader) -> None:
        person = reader.read('<bean type="sample_beans.Person"><tags><item>a</item><item>b</item></tags></bean>')
        assert person.tags == {'a', 'b'}

    def test_counts_expand(self, reader: BeanXmlReader) -> None:
        collections = reader.read('<bean type="sample_beans.Collections">'
                                  '<numbers metatype="List"><item count="3">1</item><item>2</item></numbers>'
                                  '</bean>')

        assert collections.numbers == [1, 1, 1, 2]

    def test_typed_keys(self, reader: BeanXmlReader) -> None:
        collections = reader.read('<bean type="sample_beans.Collections">'
                                  '<anything metatype="Map" keytype="int" type="float">'
                                  '<item key="1">0.5</item>'
                                  '</anything>'
                                  '</bean>')

        assert collections.anything == {1: 0.5}

    def test_comments_are_ignored(self, reader: BeanXmlReader) -> None:
        address = reader.read('<bean type="sample_beans.Address"><!-- old -->'
                              '<street>1 Main St</street></bean>')

        assert address.street == '1 Main St'

    def test_unknown_attributes_are_ignored(self, reader: BeanXmlReader) -> None:
        address = reader.read('<bean type="sample_beans.Address"><street note="x">1 Main St</street></bean>')
        assert address.street == '1 Main St'

    def test_reader_is_reusable(self, reader: BeanXmlReader) -> None:
        assert reader.read(PERSON) == reader.read(PERSON)

    def test_read_file(self, reader: BeanXmlReader, tmp_path) -> None:
        path = tmp_path / 'person.xml'
        path.write_text(PERSON, encoding='utf-8')

        assert reader.read_file(path).name == 'Ada'

    def test_read_missing_file(self, reader: BeanXmlReader, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            reader.read_file(tmp_path / 'missing.xml')


# ========== ========== ========== ========== Asynchronous reading
class TestReadAsync:

    def test_chunks(self, reader: BeanXmlReader) -> None:

        async def chunks(size: int):
            for start in range(0, len(PERSON), size):
                await asyncio.sleep(0)
                yield PERSON[start:start + size]

        person = asyncio.run(reader.read_async(chunks(7)))

        assert person == reader.read(PERSON)

    def test_truncated_stream(self, reader: BeanXmlReader) -> None:

        async def chunks():
            yield PERSON[:len(PERSON) // 2].encode('utf-8')

        with pytest.raises(DocumentFormatError):
            asyncio.run(reader.read_async(chunks()))


# ========== ========== ========== ========== Structure errors
class TestDocumentFormat:

    @pytest.mark.parametrize('document, message', [
        ('<root type="sample_beans.Address"/>', "Root element must be <bean>"),
        ('<bean/>', "must have a 'type' attribute"),
        ('<bean type="sample_beans.Address" version="2"/>', "Unexpected attributes"),
        ('<bean type="sample_beans.Address">loose text</bean>', "Unexpected text"),
        ('<bean type="sample_beans.Address"><street>a<b/></street></bean>', "Unexpected element"),
        ('<bean type="sample_beans.Address"><street null="true">x</street></bean>', "must be empty"),
        ('<bean type="sample_beans.Address"><street null="yes"/></bean>', "Invalid null marker"),
        ('<bean type="sample_beans.Person"><tags metatype="Bag"/></bean>', "Unknown metatype"),
        ('<bean type="sample_beans.Person"><tags><value>a</value></tags></bean>', "Expected <item>"),
        ('<bean type="sample_beans.Person"><tags><item count="x">a</item></tags></bean>', "must be an integer"),
        ('<bean type="sample_beans.Person"><tags><item count="0">a</item></tags></bean>', "must be positive"),
        ('<bean type="sample_beans.Collections"><lookup><item>1.0</item></lookup></bean>', "require a key"),
        ('<bean type="sample_beans.Address"><street>1 Main St</bean>', "Malformed document"),
        ('', "Malformed document|Unterminated document"),
    ])
    def test_rejected(self, reader: BeanXmlReader, document: str, message: str) -> None:
        with pytest.raises(DocumentFormatError, match=message):
            reader.read(document)

    def test_error_carries_path(self, reader: BeanXmlReader) -> None:
        with pytest.raises(DocumentFormatError) as info:
            reader.read('<bean type="sample_beans.Person"><tags><item count="0">a</item></tags></bean>')

        assert info.value.property_path == 'Person.tags[0]'
        assert info.value.bean_type == 'sample_beans.Person'

    def test_invalid_collection_content(self, reader: BeanXmlReader) -> None:
        document = ('<bean type="sample_beans.Collections"><samples metatype="Array" type="numpy.int64">'
                    '<item>1</item><item null="true"/></samples></bean>')

        with pytest.raises(DocumentFormatError, match="Invalid Array content") as info:
            reader.read(document)

        assert info.value.property_path == 'Collections.samples'
        assert info.value.bean_type == 'sample_beans.Collections'


# ========== ========== ========== ========== Type errors
class TestTypeResolution:

    def test_unknown_root_type(self, reader: BeanXmlReader) -> None:
        with pytest.raises(TypeResolutionError) as info:
            reader.read('<bean type="nowhere.Missing"/>')

        assert info.value.type_name == 'nowhere.Missing'

    def test_document_never_imports_modules(self, reader: BeanXmlReader, monkeypatch, capsys) -> None:
        monkeypatch.delitem(sys.modules, 'this', raising=False)

        with pytest.raises(TypeResolutionError):
            reader.read('<bean type="this.Nothing"/>')

        assert 'this' not in sys.modules
        assert capsys.readouterr().out == ''

    def test_root_must_be_a_bean(self, reader: BeanXmlReader) -> None:
        with pytest.raises(TypeResolutionError, match="not a bean type"):
            reader.read('<bean type="int"/>')

    def test_unknown_property_type(self, reader: BeanXmlReader) -> None:
        with pytest.raises(TypeResolutionError) as info:
            reader.read('<bean type="sample_beans.Person"><favourite type=".Triangle"/></bean>')

        assert info.value.type_name == '.Triangle'
        assert info.value.property_path == 'Person.favourite'

    def test_renamed_type(self, reader: BeanXmlReader) -> None:
        reader.settings.resolver.rename('old.module.Location', Address)

        address = reader.read('<bean type="old.module.Location"><city>Springfield</city></bean>')

        assert address == Address(city='Springfield')


# ========== ========== ========== ========== Property errors
class TestErrors:

    def test_unknown_property(self, reader: BeanXmlReader) -> None:
        document = ('<bean type="sample_beans.Person"><addresses metatype="List">'
                    '<item><street>1 Main St</street><planet>Mars</planet></item>'
                    '</addresses></bean>')

        with pytest.raises(UnknownPropertyError) as info:
            reader.read(document)

        assert info.value.property_name == 'planet'
        assert info.value.bean_type == 'sample_beans.Address'
        assert info.value.property_path == 'Person.addresses[0].planet'

    def test_readonly_property_is_unknown(self, reader: BeanXmlReader) -> None:
        with pytest.raises(UnknownPropertyError, match="area"):
            reader.read('<bean type="sample_beans.Circle"><area>3.14</area></bean>')

    def test_unparsable_leaf(self, reader: BeanXmlReader) -> None:
        with pytest.raises(ConversionError) as info:
            reader.read('<bean type="sample_beans.Person"><age>old</age></bean>')

        assert info.value.bean_type == 'sample_beans.Person'
        assert info.value.property_path == 'Person.age'
        assert isinstance(info.value.__cause__, ValueError)

    def test_validation_failure(self, reader: BeanXmlReader) -> None:
        with pytest.raises(BeanBuildError, match="low must not exceed high") as info:
            reader.read('<bean type="sample_beans.Range"><low>9</low><high>1</high></bean>')

        assert isinstance(info.value.__cause__, ValueError)
        assert info.value.bean_type == 'sample_beans.Range'

    def test_pre_build_hook(self, reader: BeanXmlReader) -> None:
        assert reader.read('<bean type="sample_beans.Range"><low>4</low></bean>') == Range(low=4, high=4)

    def test_reader_recovers_after_error(self, reader: BeanXmlReader) -> None:
        with pytest.raises(ConversionError):
            reader.read('<bean type="sample_beans.Person"><age>old</age></bean>')

        assert reader.read('<bean type="sample_beans.Collections"/>') == Collections()

