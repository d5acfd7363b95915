#  -*- coding: utf-8 -*-
"""
XML writer for bean graphs.

Document layout
---------------
::

    <bean type="package.module.Person">
      <name>Ada</name>
      <address type=".UkAddress">          nested bean, subtype of the declared type
        <street>1 Main St</street>
      </address>
      <scores metatype="List" type="int">  collection, element type inferred
        <item count="3">10</item>          run of three equal elements
        <item null="true"/>
      </scores>
      <nickname null="true"/>
    </bean>

The root tag always carries the fully qualified type. Below it, ``type`` is
written only where the runtime type differs from the type the reader will
expect at that point: the declared property type, or the element type of the
enclosing collection.
"""

from __future__ import annotations

import logging
import os

from lxml import etree

from .beans import Bean, values_equal
from .errors import BeanSerError, ConversionError
from .iterables import SerEntry, SerIterable
from .properties import kind_class
from .settings import SerSettings

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, BinaryIO


logger = logging.getLogger(__name__)


class BeanXmlWriter:
    """
    Writes a bean graph as an XML document.

    A writer keeps no state between calls to ``write``, except the base module
    used for relative type names while a document is being produced, so an
    instance must not be shared by threads.

    Parameters
    ----------
    settings : SerSettings, optional
        Output options and collaborators. Defaults to ``SerSettings()``.

    Examples
    --------
    >>> writer = BeanXmlWriter(SerSettings(pretty_print=False, xml_declaration=False))
    >>> writer.write(Point(x=1.0, y=2.0))
    '<bean type="geometry.Point"><x>1.0</x><y>2.0</y></bean>'
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, settings: SerSettings | None = None) -> None:
        self._settings: SerSettings = settings if settings is not None else SerSettings()
        self._base_module: str | None = None

    # ========== ========== ========== ========== ========== protected methods
    def _type_name(self, kind: type) -> str:
        return self._settings.resolver.type_name(kind, self._base_module, self._settings.short_types)

    @staticmethod
    def _set_text(element: etree._Element, text: str) -> None:
        try:
            element.text = text

        except ValueError as error:
            raise ConversionError(f"Text {text!r} cannot be represented in XML: {error}") from error

    @staticmethod
    def _set_attribute(element: etree._Element, name: str, value: str) -> None:
        try:
            element.set(name, value)

        except ValueError as error:
            raise ConversionError(f"Attribute value {value!r} cannot be represented in XML: {error}") from error

    def _key_text(self, key: Any, key_type: Any) -> str:

        if key is None:
            raise ConversionError("Collection keys cannot be null")

        if key_type is object:

            if type(key) is not str:
                raise ConversionError(f"Key {key!r} of type {type(key).__name__} needs a declared key type: "
                                      f"keys of mixed types cannot be written")
            return key

        key_class = kind_class(key_type)

        if not isinstance(key, key_class):
            raise ConversionError(f"Key {key!r} is not an instance of the key type {key_type!r}")

        # keys carry no type attribute, so subclass keys are written as the key type
        if type(key) is not key_class:

            try:
                key = key_class(key)

            except (TypeError, ValueError) as error:
                raise ConversionError(f"Key {key!r} cannot be written as its key type {key_type!r}: {error}") \
                    from error

        return self._settings.converter.to_text(key)

    def _build_tree(self, bean: Bean) -> etree._Element:

        bean_type = type(bean)

        if not self._settings.meta_model.is_bean(bean_type):
            raise TypeError(f"Expected a bean, given {bean_type!r}")

        self._base_module = bean_type.__module__

        root = etree.Element('bean')
        root.set('type', self._settings.resolver.type_name(bean_type, short=False))

        logger.debug("Writing %s", root.get('type'))

        try:
            self._write_bean(root, bean, bean_type.__name__)

        finally:
            self._base_module = None

        if self._settings.pretty_print:
            etree.indent(root, space=self._settings.indent)

        return root

    def _write_bean(self, element: etree._Element, bean: Bean, path: str) -> None:

        meta_bean = self._settings.meta_model.meta_bean(type(bean))

        for meta_property in meta_bean:

            property_path = f"{path}.{meta_property.name}"
            child = etree.SubElement(element, meta_property.name)

            try:
                self._write_value(child, meta_property.get(bean), meta_property.kind, property_path)

            except BeanSerError as error:
                raise error.with_context(meta_bean.bean_name, property_path)

    def _write_value(self, element: etree._Element, value: Any, declared: Any, path: str) -> None:

        if value is None:
            element.set('null', 'true')
            return

        kind = type(value)

        # ---------- ---------- nested bean
        if self._settings.meta_model.is_bean(kind):

            if kind is not kind_class(declared):
                element.set('type', self._type_name(kind))

            self._write_bean(element, value, path)
            return

        # ---------- ---------- collection
        iterable = self._settings.iterators.describe(value, declared)

        if iterable is not None:
            self._write_iterable(element, iterable, path)
            return

        # ---------- ---------- leaf
        if kind is not kind_class(declared) and not (declared is object and kind is str):
            element.set('type', self._type_name(kind))

        self._set_text(element, self._settings.converter.to_text(value))

    def _write_iterable(self, element: etree._Element, iterable: SerIterable, path: str) -> None:

        element.set('metatype', iterable.metatype)

        for attribute, kind in (('type', iterable.value_type),
                                ('keytype', iterable.key_type),
                                ('coltype', iterable.column_type)):

            if attribute in iterable.inferred and kind not in (None, object, str):
                element.set(attribute, self._type_name(kind))

        entries = list(iterable)

        if iterable.compressible:
            entries = compress(entries)

        for index, entry in enumerate(entries):

            item_path = f"{path}[{index}]"
            item = etree.SubElement(element, 'item')

            try:
                if iterable.keyed:
                    self._set_attribute(item, 'key', self._key_text(entry.key, iterable.key_type))

                if iterable.columned:
                    self._set_attribute(item, 'col', self._key_text(entry.column, iterable.column_type))

                if entry.count != 1:
                    item.set('count', str(entry.count))

                self._write_value(item, entry.value, iterable.value_type, item_path)

            except BeanSerError as error:
                raise error.with_context(None, item_path)

    # ========== ========== ========== ========== ========== public methods
    def write(self, bean: Bean) -> str:
        """
        Write ``bean`` to a string.

        The XML declaration, if enabled, names UTF-8 regardless of
        ``settings.encoding``, which only applies to ``write_to``.

        Raises
        ------
        ConversionError
            If a leaf value cannot be rendered, with the property path.
        """
        root = self._build_tree(bean)

        data = etree.tostring(root,
                              encoding='UTF-8',
                              xml_declaration=self._settings.xml_declaration,
                              pretty_print=self._settings.pretty_print)

        return data.decode('utf-8')

    def write_to(self, bean: Bean, target: str | os.PathLike | BinaryIO) -> None:
        """
        Write ``bean`` to a file path or a binary file object, encoded with
        ``settings.encoding``.
        """
        root = self._build_tree(bean)

        if isinstance(target, os.PathLike):
            target = os.fspath(target)

        etree.ElementTree(root).write(target,
                                      encoding=self._settings.encoding,
                                      xml_declaration=self._settings.xml_declaration,
                                      pretty_print=self._settings.pretty_print)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def settings(self) -> SerSettings:
        return self._settings


def compress(entries: list[SerEntry]) -> list[SerEntry]:
    """
    Merge runs of consecutive equal entries into one entry with a count.

    Entries are equal when they have the same key, the same column and values
    of the same type comparing equal; runs of None merge as well.

    Examples
    --------
    >>> compress([SerEntry(None, 'a'), SerEntry(None, 'a'), SerEntry(None, 'b')])
    [SerEntry(key=None, value='a', count=2, column=None), SerEntry(key=None, value='b', count=1, column=None)]
    """
    result: list[SerEntry] = []

    for entry in entries:

        if result:
            last = result[-1]

            if type(last.value) is type(entry.value) and values_equal(last.value, entry.value) \
                    and values_equal(last.key, entry.key) and values_equal(last.column, entry.column):
                result[-1] = last._replace(count=last.count + entry.count)
                continue

        result.append(entry)

    return result


__all__ = [
    'BeanXmlWriter',
    'compress',
]
