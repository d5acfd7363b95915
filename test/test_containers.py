#  -*- coding: utf-8 -*-
"""
Tests for the multimap and table collection types.
"""

from __future__ import annotations

import pytest

from beanxml import ListMultimap, SetMultimap, Table
from beanxml.containers import _Multimap


def test_multimap_base_is_abstract() -> None:
    with pytest.raises(TypeError):
        _Multimap()


class TestListMultimap:

    def test_keeps_every_value_in_order(self) -> None:
        multimap = ListMultimap([('a', 1), ('b', 2), ('a', 1)])

        assert multimap.get('a') == [1, 1]
        assert len(multimap) == 3
        assert list(multimap.entries()) == [('a', 1), ('a', 1), ('b', 2)]

    def test_from_mapping(self) -> None:
        assert ListMultimap({'a': [1, 2]}) == ListMultimap([('a', 1), ('a', 2)])

    def test_get_returns_a_copy(self) -> None:
        multimap = ListMultimap([('a', 1)])
        multimap.get('a').append(5)

        assert multimap.get('a') == [1]
        assert multimap.get('missing') == []

    def test_remove_all(self) -> None:
        multimap = ListMultimap([('a', 1), ('a', 2)])

        assert multimap.remove_all('a') == [1, 2]
        assert 'a' not in multimap


class TestSetMultimap:

    def test_keeps_distinct_values(self) -> None:
        multimap = SetMultimap([('a', 1), ('a', 1), ('a', 2)])

        assert multimap.get('a') == {1, 2}
        assert len(multimap) == 2
        assert multimap.as_dict() == {'a': {1, 2}}

    def test_not_equal_to_list_multimap(self) -> None:
        assert SetMultimap([('a', 1)]) != ListMultimap([('a', 1)])


class TestTable:

    @pytest.fixture
    def table(self) -> Table:
        return Table([('alice', 'math', 9.5), ('alice', 'art', 7.0), ('bob', 'math', 6.0)])

    def test_cells(self, table: Table) -> None:
        assert table.get('alice', 'math') == 9.5
        assert table.get('bob', 'art') is None
        assert len(table) == 3

    def test_rows_and_columns(self, table: Table) -> None:
        assert table.row('alice') == {'math': 9.5, 'art': 7.0}
        assert table.column('math') == {'alice': 9.5, 'bob': 6.0}
        assert table.row_keys() == ['alice', 'bob']
        assert table.column_keys() == ['math', 'art']

    def test_put_overwrites(self, table: Table) -> None:
        table.put('bob', 'math', 8.0)

        assert table.get('bob', 'math') == 8.0
        assert len(table) == 3

    def test_remove(self, table: Table) -> None:
        assert table.remove('bob', 'math') == 6.0
        assert ('bob', 'math') not in table
