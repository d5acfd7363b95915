#  -*- coding: utf-8 -*-
"""
Uniform handling of collection shapes during serialization.

A ``SerIterable`` describes one collection instance. On the writing side it
wraps an existing collection (its *source*) and iterates it as ``SerEntry``
tuples; on the reading side it accumulates entries with ``add`` and produces
the collection with ``build``. Both sides agree on a textual *metatype* naming
the collection's structural kind, which is written to the document so the
collection can be rebuilt without knowing the declared type.

Supported shapes
----------------
========== ================================ ======= ============
metatype    Python type                      keys    compressed
========== ================================ ======= ============
List        list                             no      yes
Tuple       tuple                            no      yes
Set         set                              no      no
FrozenSet   frozenset                        no      no
Multiset    collections.Counter              no      counts
Map         dict                             yes     no
ListMultimap containers.ListMultimap         yes     yes
SetMultimap containers.SetMultimap           yes     no
Table       containers.Table                 row/col no
Array       one-dimensional numpy.ndarray    no      yes
========== ================================ ======= ============

New shapes are added by subclassing ``SerIterable`` and registering the
subclass with ``SerIteratorFactory.register``.
"""

from __future__ import annotations

import collections
import collections.abc
import copy

import numpy

from abc import ABC, abstractmethod

from .containers import ListMultimap, SetMultimap, Table
from .errors import ConversionError, DocumentFormatError
from .properties import kind_class, normalize_kind

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, Iterable, Iterator, NamedTuple, get_args


class SerEntry(NamedTuple):
    """One logical element of a collection."""
    key: Any
    value: Any
    count: int = 1
    column: Any = None


class SerIterable(ABC):
    """
    Descriptor and accumulator for one collection instance.

    Parameters
    ----------
    value_type : type, default object
        Declared type of the values.
    key_type : type, optional
        Declared type of the keys (row keys for tables). Defaults to
        ``object`` for keyed shapes.
    column_type : type, optional
        Declared type of the column keys of tables.
    source : object, optional
        The collection being written.

    Attributes
    ----------
    inferred : set of str
        Which of ``'type'``, ``'keytype'``, ``'coltype'`` were deduced from the
        data rather than declared. The writer emits those on the wire.
    """

    # ========== ========== ========== ========== ========== class attributes
    metatype: str = ''
    arity: int = 1
    ordered: bool = True
    compressible: bool = False
    keyed: bool = False
    columned: bool = False

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 value_type: Any = object,
                 key_type: Any = None,
                 column_type: Any = None,
                 source: Any = None) -> None:

        self.value_type: Any = normalize_kind(value_type)
        self.key_type: Any = normalize_kind(key_type) if self.keyed else None
        self.column_type: Any = normalize_kind(column_type) if self.columned else None
        self.inferred: set[str] = set()

        self._source: Any = source
        self._built: bool = False

        self._setup()

    def __iter__(self) -> Iterator[SerEntry]:

        if self._source is None:
            raise TypeError(f"{type(self).__name__} has no source collection to iterate")

        return self._entries(self._source)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(value_type={self.value_type!r}, key_type={self.key_type!r})"

    # ========== ========== ========== ========== ========== protected methods
    def _setup(self) -> None:
        """Prepare the accumulator."""

    @staticmethod
    def _repeat(value: Any, count: int) -> list[Any]:
        # repeated elements must not share mutable state
        return [value] + [copy.deepcopy(value) for _ in range(count - 1)]

    @abstractmethod
    def _add(self, key: Any, value: Any, count: int, column: Any) -> None:
        ...

    @abstractmethod
    def _build(self) -> Any:
        ...

    @abstractmethod
    def _entries(self, source: Any) -> Iterator[SerEntry]:
        ...

    # ========== ========== ========== ========== ========== public methods
    @classmethod
    def element_types(cls, args: tuple) -> tuple[Any, Any, Any]:
        """
        Interpret the arguments of a parametrised declared type.

        Returns
        -------
        tuple
            ``(value_type, key_type, column_type)``; None for what the
            arguments do not tell.
        """
        if len(args) == cls.arity:
            return args[0], None, None

        return None, None, None

    def add(self, key: Any, value: Any, count: int = 1, column: Any = None) -> None:
        """
        Accumulate ``count`` occurrences of ``value``.

        Raises
        ------
        DocumentFormatError
            If ``count`` is not positive, or a key or column required by the
            shape is missing.
        """
        if count < 1:
            raise DocumentFormatError(f"Item count must be positive, given {count}")

        if self.keyed and key is None:
            raise DocumentFormatError(f"{self.metatype} items require a key")

        if self.columned and column is None:
            raise DocumentFormatError(f"{self.metatype} items require a column")

        self._add(key, value, count, column)

    def build(self) -> Any:
        """
        Produce the collection. May be called only once.

        Raises
        ------
        RuntimeError
            If called a second time.
        """
        if self._built:
            raise RuntimeError(f"{self.metatype} iterable has already been built")

        self._built = True

        return self._build()

    def infer_types(self, is_collection: Callable[[type], bool]) -> None:
        """
        Deduce undeclared element types from the source.

        A type is deduced only if every non-None element has exactly that
        type and ``is_collection`` does not accept it; otherwise it stays
        ``object``.
        """
        entries = list(self)

        if self.value_type is object:
            self.value_type = _common_type((entry.value for entry in entries), is_collection)
            self.inferred.add('type')

        if self.keyed and self.key_type is object:
            self.key_type = _common_type((entry.key for entry in entries), is_collection)
            self.inferred.add('keytype')

        if self.columned and self.column_type is object:
            self.column_type = _common_type((entry.column for entry in entries), is_collection)
            self.inferred.add('coltype')

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def source(self) -> Any:
        return self._source


def _common_type(values: Iterable[Any], is_collection: Callable[[type], bool]) -> Any:

    types = {type(value) for value in values if value is not None}

    if len(types) != 1:
        return object

    kind = types.pop()

    if is_collection(kind):
        return object

    return kind


# ========== ========== ========== ========== ========== sequences
class ListIterable(SerIterable):

    metatype = 'List'
    compressible = True

    def _setup(self) -> None:
        self._items: list[Any] = []

    def _add(self, key, value, count, column) -> None:
        self._items.extend(self._repeat(value, count))

    def _build(self) -> list:
        return self._items

    def _entries(self, source) -> Iterator[SerEntry]:
        for value in source:
            yield SerEntry(None, value)


class TupleIterable(ListIterable):

    metatype = 'Tuple'

    @classmethod
    def element_types(cls, args: tuple) -> tuple[Any, Any, Any]:

        if len(args) == 2 and args[1] is Ellipsis:
            return args[0], None, None

        if len(args) == 1:
            return args[0], None, None

        return None, None, None

    def _build(self) -> tuple:
        return tuple(self._items)


class ArrayIterable(ListIterable):
    """One-dimensional NumPy arrays; the value type is the dtype's scalar type."""

    metatype = 'Array'

    def _build(self) -> numpy.ndarray:

        if isinstance(self.value_type, type) and issubclass(self.value_type, numpy.generic):
            return numpy.array(self._items, dtype=self.value_type)

        return numpy.array(self._items, dtype=object if self.value_type is object else None)

    def _entries(self, source: numpy.ndarray) -> Iterator[SerEntry]:

        if source.ndim != 1:
            raise ConversionError(f"Only one-dimensional arrays can be serialized, given shape {source.shape}")

        for value in source:
            yield SerEntry(None, value)

    def infer_types(self, is_collection: Callable[[type], bool]) -> None:

        if self.value_type is object and self._source.dtype != object:
            self.value_type = self._source.dtype.type
            self.inferred.add('type')

        else:
            super().infer_types(is_collection)


# ========== ========== ========== ========== ========== sets
class SetIterable(SerIterable):

    metatype = 'Set'
    ordered = False

    def _setup(self) -> None:
        self._items: set[Any] = set()

    def _add(self, key, value, count, column) -> None:
        self._items.add(value)

    def _build(self) -> set:
        return self._items

    def _entries(self, source) -> Iterator[SerEntry]:
        for value in source:
            yield SerEntry(None, value)


class FrozenSetIterable(SetIterable):

    metatype = 'FrozenSet'

    def _build(self) -> frozenset:
        return frozenset(self._items)


class MultisetIterable(SerIterable):
    """``collections.Counter``; the item count is the multiplicity."""

    metatype = 'Multiset'
    ordered = False

    def _setup(self) -> None:
        self._items: collections.Counter = collections.Counter()

    def _add(self, key, value, count, column) -> None:
        self._items[value] += count

    def _build(self) -> collections.Counter:
        return self._items

    def _entries(self, source: collections.Counter) -> Iterator[SerEntry]:
        for value, count in source.items():
            if count > 0:
                yield SerEntry(None, value, count)


# ========== ========== ========== ========== ========== maps
class MapIterable(SerIterable):
    """Plain mapping; a repeated key overwrites the previous value."""

    metatype = 'Map'
    arity = 2
    keyed = True

    @classmethod
    def element_types(cls, args: tuple) -> tuple[Any, Any, Any]:

        if len(args) == cls.arity:
            return args[1], args[0], None

        return None, None, None

    def _setup(self) -> None:
        self._items: dict[Any, Any] = {}

    def _add(self, key, value, count, column) -> None:
        self._items[key] = value

    def _build(self) -> dict:
        return self._items

    def _entries(self, source) -> Iterator[SerEntry]:
        for key, value in source.items():
            yield SerEntry(key, value)


class ListMultimapIterable(MapIterable):

    metatype = 'ListMultimap'
    compressible = True

    def _setup(self) -> None:
        self._items: ListMultimap = ListMultimap()

    def _add(self, key, value, count, column) -> None:
        self._items.put_all(key, self._repeat(value, count))

    def _build(self) -> ListMultimap:
        return self._items

    def _entries(self, source: ListMultimap) -> Iterator[SerEntry]:
        for key, value in source.entries():
            yield SerEntry(key, value)


class SetMultimapIterable(ListMultimapIterable):

    metatype = 'SetMultimap'
    ordered = False
    compressible = False

    def _setup(self) -> None:
        self._items: SetMultimap = SetMultimap()

    def _add(self, key, value, count, column) -> None:
        self._items.put(key, value)


class TableIterable(SerIterable):
    """Two-dimensional table; items carry the row as key and a column."""

    metatype = 'Table'
    arity = 3
    keyed = True
    columned = True

    @classmethod
    def element_types(cls, args: tuple) -> tuple[Any, Any, Any]:

        if len(args) == cls.arity:
            return args[2], args[0], args[1]

        return None, None, None

    def _setup(self) -> None:
        self._items: Table = Table()

    def _add(self, key, value, count, column) -> None:
        self._items.put(key, column, value)

    def _build(self) -> Table:
        return self._items

    def _entries(self, source: Table) -> Iterator[SerEntry]:
        for row, column, value in source.cells():
            yield SerEntry(row, value, 1, column)


# ========== ========== ========== ========== ========== factory
class SerIteratorFactory:
    """
    Creates ``SerIterable`` instances from declared types, metatypes or values.

    Runtime collection types are matched along the value's MRO, so subclasses
    of registered types are handled (``Counter`` before ``dict``). Abstract
    declared types (``Sequence``, ``Mapping``, ...) only select a shape when
    reading, where they are built as the shape's concrete type.
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, register_defaults: bool = True) -> None:

        self._by_metatype: dict[str, type[SerIterable]] = {}
        self._by_type: dict[type, type[SerIterable]] = {}
        self._by_declared: dict[type, type[SerIterable]] = {}

        if register_defaults:
            self.register(ListIterable, list, declared=(collections.abc.Sequence,
                                                        collections.abc.MutableSequence,
                                                        collections.abc.Collection,
                                                        collections.abc.Iterable))
            self.register(TupleIterable, tuple)
            self.register(SetIterable, set, declared=(collections.abc.Set, collections.abc.MutableSet))
            self.register(FrozenSetIterable, frozenset)
            self.register(MultisetIterable, collections.Counter)
            self.register(MapIterable, dict, declared=(collections.abc.Mapping, collections.abc.MutableMapping))
            self.register(ListMultimapIterable, ListMultimap)
            self.register(SetMultimapIterable, SetMultimap)
            self.register(TableIterable, Table)
            self.register(ArrayIterable, numpy.ndarray)

    # ========== ========== ========== ========== ========== public methods
    def is_collection_type(self, kind: type) -> bool:
        """True if ``kind`` is (a subclass of) a collection type registered here."""
        return any(base in self._by_type for base in getattr(kind, '__mro__', ()))

    def register(self,
                 iterable_type: type[SerIterable],
                 *python_types: type,
                 declared: tuple[type, ...] = ()) -> None:
        """
        Register a collection shape.

        Parameters
        ----------
        iterable_type : type
            ``SerIterable`` subclass; its ``metatype`` is the wire name.
        *python_types : type
            Runtime collection types written with this shape.
        declared : tuple of type
            Additional declared-only types read with this shape.
        """
        self._by_metatype[iterable_type.metatype] = iterable_type

        for python_type in python_types:
            self._by_type[python_type] = iterable_type

        for declared_type in declared:
            self._by_declared[declared_type] = iterable_type

    def _declared_types(self, iterable_type: type[SerIterable], declared: Any) -> tuple[Any, Any, Any]:

        if self.iterable_type(declared) is None:
            return None, None, None

        return iterable_type.element_types(get_args(declared))

    def iterable_type(self, kind: Any) -> type[SerIterable] | None:
        """Shape handling the (declared or runtime) type ``kind``, or None."""
        cls = kind_class(kind)

        if not isinstance(cls, type):
            return None

        for base in cls.__mro__:

            if base in self._by_type:
                return self._by_type[base]

        return self._by_declared.get(cls)

    def element_types(self, declared: Any) -> tuple[Any, Any, Any]:
        """Element types a declared collection type gives, None where unknown."""
        iterable_type = self.iterable_type(declared)

        if iterable_type is None:
            return None, None, None

        return iterable_type.element_types(get_args(declared))

    def create(self, declared: Any) -> SerIterable | None:
        """Accumulator for a declared collection type, or None if not a collection."""
        iterable_type = self.iterable_type(declared)

        if iterable_type is None:
            return None

        value_type, key_type, column_type = iterable_type.element_types(get_args(declared))

        return iterable_type(value_type, key_type, column_type)

    def create_from_metatype(self,
                             metatype: str,
                             value_type: Any = None,
                             key_type: Any = None,
                             column_type: Any = None,
                             declared: Any = object) -> SerIterable | None:
        """
        Accumulator for a wire metatype, or None if the metatype is unknown.

        Element types not given explicitly are taken from ``declared``, read
        the same way ``describe`` reads it on the writing side.
        """
        iterable_type = self._by_metatype.get(metatype)

        if iterable_type is None:
            return None

        explicit = (value_type, key_type, column_type)
        implied = self._declared_types(iterable_type, declared)

        return iterable_type(*(e if e is not None else i for e, i in zip(explicit, implied)))

    def describe(self, value: Any, declared: Any = object) -> SerIterable | None:
        """
        Write-side descriptor of a collection value, or None if ``value`` is
        not a supported collection.

        Element types come from ``declared`` when it is a parametrised
        collection type of the same arity; the missing ones are inferred from
        the data.
        """
        iterable_type = None

        for base in type(value).__mro__:

            if base in self._by_type:
                iterable_type = self._by_type[base]
                break

        if iterable_type is None:
            return None

        iterable = iterable_type(*self._declared_types(iterable_type, declared), source=value)
        iterable.infer_types(self.is_collection_type)

        return iterable

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def metatypes(self) -> list[str]:
        return list(self._by_metatype)


ITERATORS = SerIteratorFactory()
"""Shared iterator factory used by default settings."""


__all__ = [
    'SerEntry',
    'SerIterable',
    'ListIterable',
    'TupleIterable',
    'ArrayIterable',
    'SetIterable',
    'FrozenSetIterable',
    'MultisetIterable',
    'MapIterable',
    'ListMultimapIterable',
    'SetMultimapIterable',
    'TableIterable',
    'SerIteratorFactory',
    'ITERATORS',
]
