#  -*- coding: utf-8 -*-
"""
Tests for leaf value conversion.
"""

from __future__ import annotations

import datetime
import uuid

from decimal import Decimal
from fractions import Fraction
from pathlib import PurePath, PurePosixPath

import numpy
import pandas
import pytest

from beanxml import StringConverter, ConversionError

from sample_beans import Color


@pytest.fixture
def converter() -> StringConverter:
    return StringConverter()


class Money:

    def __init__(self, cents: int) -> None:
        self.cents = cents

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Money) and other.cents == self.cents


# ========== ========== ========== ========== Defaults
class TestDefaults:

    @pytest.mark.parametrize('value', [
        'text',
        True,
        False,
        -12,
        0.1,
        1e300,
        complex(1, -2),
        Decimal('1.10'),
        Fraction(1, 3),
        b'\x00\xffbytes',
        uuid.UUID('12345678-1234-5678-1234-567812345678'),
        PurePosixPath('data/file.txt'),
        datetime.datetime(2024, 2, 29, 13, 45, 10, 250),
        datetime.date(2024, 2, 29),
        datetime.time(23, 59, 1),
        datetime.timedelta(days=2, hours=3, seconds=4),
        Color.GREEN,
        numpy.float32(2.5),
        numpy.int16(-7),
        numpy.bool_(True),
        pandas.Timestamp('2024-01-02 03:04:05', tz='UTC'),
        pandas.Timedelta(minutes=90),
    ], ids=lambda value: type(value).__name__)
    def test_text_round_trip(self, converter: StringConverter, value) -> None:
        text = converter.to_text(value)

        assert isinstance(text, str)
        assert converter.from_text(text, type(value)) == value

    def test_bool_text(self, converter: StringConverter) -> None:
        assert converter.to_text(True) == 'true'
        assert converter.from_text('false', bool) is False

    def test_bool_rejects_other_text(self, converter: StringConverter) -> None:
        with pytest.raises(ConversionError, match="bool"):
            converter.from_text('yes', bool)

    def test_float_keeps_precision(self, converter: StringConverter) -> None:
        assert converter.from_text(converter.to_text(0.1 + 0.2), float) == 0.1 + 0.2

    def test_enum_by_name(self, converter: StringConverter) -> None:
        assert converter.to_text(Color.BLUE) == 'BLUE'
        assert converter.from_text('RED', Color) is Color.RED

    def test_object_returns_text(self, converter: StringConverter) -> None:
        assert converter.from_text('anything', object) == 'anything'

    def test_known_by_name(self, converter: StringConverter) -> None:
        assert converter.type_for_name('int') is int
        assert converter.type_for_name('decimal.Decimal') is Decimal
        assert converter.type_for_name('sample_beans.Money') is None


# ========== ========== ========== ========== Errors
class TestErrors:

    def test_unsupported_type(self, converter: StringConverter) -> None:
        with pytest.raises(ConversionError, match="No text conversion"):
            converter.to_text(Money(5))

        with pytest.raises(ConversionError, match="No text conversion"):
            converter.from_text('5', Money)

    def test_malformed_text(self, converter: StringConverter) -> None:
        with pytest.raises(ConversionError, match="Unable to convert") as info:
            converter.from_text('twelve', int)

        assert isinstance(info.value.__cause__, ValueError)


# ========== ========== ========== ========== Registration
class TestRegistration:

    def test_register_custom_type(self, converter: StringConverter) -> None:
        converter.register(Money, lambda money: str(money.cents), lambda text, kind: kind(int(text)))

        assert converter.is_convertible(Money)
        assert converter.to_text(Money(250)) == '250'
        assert converter.from_text('250', Money) == Money(250)

    def test_subclasses_use_base_conversion(self, converter: StringConverter) -> None:
        assert converter.is_convertible(PurePosixPath)
        assert converter.find(PurePosixPath) is converter.find(PurePath)

    def test_remove(self, converter: StringConverter) -> None:
        converter.remove(Decimal)

        assert not converter.is_convertible(Decimal)
        assert converter.type_for_name('decimal.Decimal') is None

    def test_copy_is_independent(self, converter: StringConverter) -> None:
        copy = converter.copy()
        copy.register(Money, lambda money: str(money.cents), lambda text, kind: kind(int(text)))

        assert Money in copy
        assert Money not in converter

    def test_register_requires_a_type(self, converter: StringConverter) -> None:
        with pytest.raises(TypeError):
            converter.register('int', str, str)
