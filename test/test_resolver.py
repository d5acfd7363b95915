#  -*- coding: utf-8 -*-
"""
Tests for type name resolution.
"""

from __future__ import annotations

import collections
import sys

from decimal import Decimal
from pathlib import PurePosixPath

import pytest

from beanxml import TypeResolver, TypeResolutionError, StringConverter

from sample_beans import Circle, Color, Contact, Person


@pytest.fixture
def resolver() -> TypeResolver:
    return TypeResolver(StringConverter())


class TestResolve:

    def test_bean_by_qualified_name(self, resolver: TypeResolver) -> None:
        assert resolver.resolve('sample_beans.Person') is Person

    def test_relative_name(self, resolver: TypeResolver) -> None:
        assert resolver.resolve('.Circle', 'sample_beans') is Circle

    def test_relative_name_needs_base_module(self, resolver: TypeResolver) -> None:
        with pytest.raises(TypeResolutionError, match="Relative type name"):
            resolver.resolve('.Circle')

    def test_leaf_types_by_name(self, resolver: TypeResolver) -> None:
        assert resolver.resolve('int') is int
        assert resolver.resolve('decimal.Decimal') is Decimal

    def test_loaded_module_fallback(self, resolver: TypeResolver) -> None:
        assert resolver.resolve('pathlib.PurePosixPath') is PurePosixPath
        assert resolver.resolve('sample_beans.Color') is Color

    def test_import_disabled(self) -> None:
        resolver = TypeResolver(StringConverter(), allow_import=False)

        with pytest.raises(TypeResolutionError):
            resolver.resolve('pathlib.PurePosixPath')

    def test_modules_are_never_imported(self, resolver: TypeResolver, monkeypatch) -> None:
        monkeypatch.delitem(sys.modules, 'this', raising=False)

        with pytest.raises(TypeResolutionError):
            resolver.resolve('this.Nothing')

        assert 'this' not in sys.modules

    def test_imported_type_must_be_usable(self, resolver: TypeResolver) -> None:
        with pytest.raises(TypeResolutionError, match="neither a bean nor a convertible type"):
            resolver.resolve('collections.OrderedDict')

    def test_unknown_name(self, resolver: TypeResolver) -> None:
        with pytest.raises(TypeResolutionError) as info:
            resolver.resolve('nowhere.Missing')

        assert info.value.type_name == 'nowhere.Missing'
        assert 'nowhere.Missing' in str(info.value)

    def test_missing_attribute(self, resolver: TypeResolver) -> None:
        with pytest.raises(TypeResolutionError):
            resolver.resolve('sample_beans.Missing')

    def test_rename_wins(self, resolver: TypeResolver) -> None:
        resolver.rename('legacy.people.Contact', Contact)

        assert resolver.resolve('legacy.people.Contact') is Contact
        assert resolver.renames == {'legacy.people.Contact': Contact}


class TestTypeName:

    def test_relative_for_base_module(self, resolver: TypeResolver) -> None:
        assert resolver.type_name(Circle, 'sample_beans') == '.Circle'

    def test_full_when_short_disabled(self, resolver: TypeResolver) -> None:
        assert resolver.type_name(Circle, 'sample_beans', short=False) == 'sample_beans.Circle'

    def test_full_for_other_modules(self, resolver: TypeResolver) -> None:
        assert resolver.type_name(Circle, 'elsewhere') == 'sample_beans.Circle'
        assert resolver.type_name(collections.Counter) == 'collections.Counter'

    def test_leaf_types_are_never_relative(self, resolver: TypeResolver) -> None:
        assert resolver.type_name(Color, 'sample_beans') == 'sample_beans.Color'
        assert resolver.type_name(int, 'sample_beans') == 'int'
