#  -*- coding: utf-8 -*-
"""
Collection types missing from the standard library.

``ListMultimap`` and ``SetMultimap`` map a key to several values, ``Table``
maps a (row, column) pair to a value. They are generic, so bean properties can
declare their element types, e.g. ``BeanProperty(kind=Table[str, int, float])``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Generic, Iterable, Iterator, Mapping, TypeVar


K = TypeVar('K')
R = TypeVar('R')
C = TypeVar('C')
V = TypeVar('V')


class _Multimap(ABC, Generic[K, V]):
    """Key to value-collection mapping; subclasses choose the collection."""

    _collection: type = list

    def __init__(self, entries: Iterable[tuple[K, V]] | Mapping[K, Iterable[V]] | None = None) -> None:

        self._data: dict[K, Any] = {}

        if isinstance(entries, Mapping):
            for key, values in entries.items():
                self.put_all(key, values)

        elif entries is not None:
            for key, value in entries:
                self.put(key, value)

    def __len__(self) -> int:
        """Number of key/value entries."""
        return sum(len(values) for values in self._data.values())

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[K]:
        return iter(self._data)

    def __eq__(self, other: object) -> bool:

        if type(other) is not type(self):
            return NotImplemented

        return self._data == other._data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    # ========== ========== ========== ========== ========== public methods
    @abstractmethod
    def put(self, key: K, value: V) -> None:
        """Store ``value`` under ``key``."""
        ...

    def put_all(self, key: K, values: Iterable[V]) -> None:
        for value in values:
            self.put(key, value)

    def get(self, key: K) -> Any:
        """Copy of the values stored under ``key`` (empty if none)."""
        return self._collection(self._data.get(key, ()))

    def remove_all(self, key: K) -> Any:
        return self._collection(self._data.pop(key, ()))

    def keys(self) -> list[K]:
        return list(self._data)

    def entries(self) -> Iterator[tuple[K, V]]:
        """Iterate ``(key, value)`` pairs, grouped by key in insertion order."""
        for key, values in self._data.items():
            for value in values:
                yield key, value

    def as_dict(self) -> dict[K, Any]:
        return {key: self._collection(values) for key, values in self._data.items()}


class ListMultimap(_Multimap[K, V]):
    """Multimap keeping every value of a key, in insertion order."""

    _collection = list

    def put(self, key: K, value: V) -> None:
        self._data.setdefault(key, []).append(value)


class SetMultimap(_Multimap[K, V]):
    """Multimap keeping the distinct values of a key."""

    _collection = set

    def put(self, key: K, value: V) -> None:
        self._data.setdefault(key, set()).add(value)


class Table(Generic[R, C, V]):
    """
    Two-dimensional mapping from a (row, column) pair to a value.

    Examples
    --------
    >>> table = Table()
    >>> table.put('alice', 'math', 9.5)
    >>> table.get('alice', 'math')
    9.5
    >>> table.row('alice')
    {'math': 9.5}
    """

    def __init__(self, cells: Iterable[tuple[R, C, V]] | None = None) -> None:

        self._cells: dict[tuple[R, C], V] = {}

        for row, column, value in cells or ():
            self.put(row, column, value)

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self._cells

    def __eq__(self, other: object) -> bool:

        if type(other) is not type(self):
            return NotImplemented

        return self._cells == other._cells

    def __repr__(self) -> str:
        return f"Table({list(self.cells())!r})"

    # ========== ========== ========== ========== ========== public methods
    def put(self, row: R, column: C, value: V) -> None:
        self._cells[row, column] = value

    def get(self, row: R, column: C, default: Any = None) -> V | Any:
        return self._cells.get((row, column), default)

    def remove(self, row: R, column: C) -> V:
        return self._cells.pop((row, column))

    def row(self, row: R) -> dict[C, V]:
        return {c: v for (r, c), v in self._cells.items() if r == row}

    def column(self, column: C) -> dict[R, V]:
        return {r: v for (r, c), v in self._cells.items() if c == column}

    def row_keys(self) -> list[R]:
        return list(dict.fromkeys(r for r, _ in self._cells))

    def column_keys(self) -> list[C]:
        return list(dict.fromkeys(c for _, c in self._cells))

    def cells(self) -> Iterator[tuple[R, C, V]]:
        """Iterate ``(row, column, value)`` triples in insertion order."""
        for (row, column), value in self._cells.items():
            yield row, column, value


__all__ = [
    'ListMultimap',
    'SetMultimap',
    'Table',
]
