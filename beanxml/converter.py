#  -*- coding: utf-8 -*-
"""
Conversion of leaf values to and from text.

Leaf values are everything that is neither a bean nor a collection: numbers,
strings, dates, enums, paths, and so on. ``StringConverter`` keeps a registry
of ``(to_text, from_text)`` function pairs keyed by type:

- ``to_text(value) -> str``
- ``from_text(text, kind) -> value``, where ``kind`` is the concrete type
  requested by the reader, so one pair can serve a whole class hierarchy
  (e.g. every ``Enum`` subclass).

Lookup is by exact type first, then ``Enum`` for enumerations, then along the
MRO of the type. Registered types are also known by their fully qualified
name, which lets the type resolver turn a ``type="..."`` attribute back into
a leaf type.
"""

from __future__ import annotations

import base64
import datetime
import enum
import logging
import uuid

from decimal import Decimal
from fractions import Fraction
from pathlib import PurePath

import numpy
import pandas

from .beans import get_full_qualified_name
from .errors import ConversionError

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, TypeAlias


ToText: TypeAlias = Callable[[Any], str]
FromText: TypeAlias = Callable[[str, type], Any]

logger = logging.getLogger(__name__)


class StringConverter:
    """
    Registry-backed leaf value converter.

    Parameters
    ----------
    register_defaults : bool, default True
        If True, the converter starts with the built-in conversions for the
        standard library scalar types, NumPy scalars and pandas time types.

    Examples
    --------
    >>> converter = StringConverter()
    >>> converter.to_text(1.5)
    '1.5'
    >>> converter.from_text('1.5', float)
    1.5
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, register_defaults: bool = True) -> None:

        self._converters: dict[type, tuple[ToText, FromText]] = {}
        self._names: dict[str, type] = {}

        if register_defaults:
            _register_defaults(self)

    def __contains__(self, kind: type) -> bool:
        return self.is_convertible(kind)

    # ========== ========== ========== ========== ========== public methods
    def register(self, kind: type, to_text: ToText, from_text: FromText) -> None:
        """
        Register the conversion of a leaf type.

        Parameters
        ----------
        kind : type
            Type to register. Subclasses are covered unless registered too.
        to_text : callable
            ``to_text(value) -> str``.
        from_text : callable
            ``from_text(text, kind) -> value``.
        """
        if not isinstance(kind, type):
            raise TypeError(f"Expected a type, given {kind!r}")

        self._converters[kind] = (to_text, from_text)
        self._names[get_full_qualified_name(kind)] = kind

        logger.debug("Registered leaf converter for %s", get_full_qualified_name(kind))

    def remove(self, kind: type) -> None:
        """Remove a registration. Idempotent."""
        self._converters.pop(kind, None)
        self._names.pop(get_full_qualified_name(kind), None)

    def find(self, kind: type) -> tuple[ToText, FromText] | None:
        """Return the conversion pair handling ``kind``, or None."""
        if not isinstance(kind, type):
            return None

        pair = self._converters.get(kind)

        if pair is not None:
            return pair

        if issubclass(kind, enum.Enum) and enum.Enum in self._converters:
            return self._converters[enum.Enum]

        for base in kind.__mro__[1:]:

            if base is object:
                break

            pair = self._converters.get(base)

            if pair is not None:
                return pair

        return None

    def is_convertible(self, kind: Any) -> bool:
        return kind is object or self.find(kind) is not None

    def type_for_name(self, name: str) -> type | None:
        """Resolve the qualified name of a registered type."""
        return self._names.get(name)

    def to_text(self, value: Any) -> str:
        """
        Render a leaf value as text, using the converter of its runtime type.

        Raises
        ------
        ConversionError
            If no converter handles the value's type or the conversion fails.
        """
        kind = type(value)
        pair = self.find(kind)

        if pair is None:
            raise ConversionError(f"No text conversion registered for type {get_full_qualified_name(kind)}")

        try:
            return pair[0](value)

        except Exception as error:
            raise ConversionError(f"Unable to convert {value!r} to text: {error}") from error

    def from_text(self, text: str, kind: Any) -> Any:
        """
        Parse a leaf value of type ``kind`` from text.

        ``object`` returns the text unchanged.

        Raises
        ------
        ConversionError
            If no converter handles ``kind`` or the text is malformed.
        """
        if kind is object:
            return text

        pair = self.find(kind)

        if pair is None:
            raise ConversionError(f"No text conversion registered for type {kind!r}")

        try:
            return pair[1](text, kind)

        except Exception as error:
            raise ConversionError(f"Unable to convert {text!r} to {get_full_qualified_name(kind)}: {error}") from error

    def copy(self) -> StringConverter:
        """Independent copy, to customise without affecting this converter."""
        other = StringConverter(register_defaults=False)
        other._converters = {**self._converters}
        other._names = {**self._names}
        return other

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def registered_types(self) -> list[type]:
        return list(self._converters)


# ========== ========== ========== ========== ========== default conversions
def _bool_to_text(value: Any) -> str:
    return 'true' if value else 'false'


def _bool_from_text(text: str, kind: type) -> Any:
    text = text.strip()

    if text not in ('true', 'false'):
        raise ValueError(f"expected 'true' or 'false', given {text!r}")

    return kind(text == 'true')


def _construct(text: str, kind: type) -> Any:
    return kind(text)


def _from_isoformat(text: str, kind: type) -> Any:
    return kind.fromisoformat(text.strip())


def _timedelta_to_text(value: datetime.timedelta) -> str:
    return pandas.Timedelta(value).isoformat()


def _timedelta_from_text(text: str, kind: type) -> datetime.timedelta:
    return pandas.Timedelta(text.strip()).to_pytimedelta()


def _register_defaults(converter: StringConverter) -> None:

    converter.register(str, str, _construct)
    converter.register(bool, _bool_to_text, _bool_from_text)
    converter.register(int, str, _construct)
    converter.register(float, repr, _construct)
    converter.register(complex, repr, _construct)
    converter.register(Decimal, str, _construct)
    converter.register(Fraction, str, _construct)
    converter.register(bytes,
                       lambda value: base64.b64encode(value).decode('ascii'),
                       lambda text, kind: kind(base64.b64decode(text.strip(), validate=True)))
    converter.register(uuid.UUID, str, _construct)
    converter.register(PurePath, str, _construct)

    # ---------- ---------- time
    converter.register(datetime.datetime, datetime.datetime.isoformat, _from_isoformat)
    converter.register(datetime.date, datetime.date.isoformat, _from_isoformat)
    converter.register(datetime.time, datetime.time.isoformat, _from_isoformat)
    converter.register(datetime.timedelta, _timedelta_to_text, _timedelta_from_text)

    # ---------- ---------- enumerations
    converter.register(enum.Enum, lambda value: value.name, lambda text, kind: kind[text.strip()])

    # ---------- ---------- numpy scalars (str gives the shortest round-trip form)
    converter.register(numpy.generic, str, _construct)
    converter.register(numpy.bool_, _bool_to_text, _bool_from_text)

    # ---------- ---------- pandas time types
    converter.register(pandas.Timestamp,
                       lambda value: value.isoformat(),
                       lambda text, kind: pandas.Timestamp(text.strip()))
    converter.register(pandas.Timedelta,
                       lambda value: value.isoformat(),
                       lambda text, kind: pandas.Timedelta(text.strip()))


CONVERTER = StringConverter()
"""Shared converter used by default settings."""


__all__ = [
    'StringConverter',
    'CONVERTER',
]
