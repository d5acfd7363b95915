#  -*- coding: utf-8 -*-
"""
Introspection descriptors for bean types.

The serializer never reflects over bean classes directly. It asks a
``MetaModel`` for a ``MetaBean`` describing the type (ordered properties with
their declared types) and for a ``BeanBuilder`` that accumulates property
values and constructs the bean in a single, final ``build`` call.
"""

from __future__ import annotations

import weakref

from .beans import Bean, get_full_qualified_name
from .errors import UnknownPropertyError

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Iterator


class MetaProperty:
    """
    Describes one property of a bean type.

    Parameters
    ----------
    name : str
        Property name, as used on the wire.
    kind : object, default object
        Declared type of the property value.
    bean_type : type, optional
        The bean type the property belongs to. Properties made up by a
        migration to parse legacy data have no owner.
    """

    __slots__ = ('name', 'kind', 'bean_type')

    def __init__(self, name: str, kind: Any = object, bean_type: type | None = None) -> None:
        self.name: str = name
        self.kind: Any = kind
        self.bean_type: type | None = bean_type

    def __repr__(self) -> str:
        return f"MetaProperty({self.name!r}, kind={self.kind!r})"

    def get(self, bean: Bean) -> Any:
        """Read the property value from a bean."""
        return getattr(bean, self.name)


class MetaBean:
    """
    Describes the shape of a bean type.

    Parameters
    ----------
    bean_type : type
        A ``Bean`` subclass.

    Raises
    ------
    TypeError
        If ``bean_type`` is not a bean type.
    """

    def __init__(self, bean_type: type[Bean]) -> None:

        if not (isinstance(bean_type, type) and issubclass(bean_type, Bean)):
            raise TypeError(f"{bean_type!r} is not a bean type")

        self._bean_type: type[Bean] = bean_type
        self._meta_properties: dict[str, MetaProperty] = {
            name: MetaProperty(name, prop.kind, bean_type)
            for name, prop in bean_type.bean_properties.items()
        }

    def __repr__(self) -> str:
        return f"MetaBean({self.bean_name})"

    def __iter__(self) -> Iterator[MetaProperty]:
        return iter(self._meta_properties.values())

    # ========== ========== ========== ========== ========== public methods
    def has_property(self, name: str) -> bool:
        return name in self._meta_properties

    def meta_property(self, name: str) -> MetaProperty:
        """
        Return the property called ``name``.

        Raises
        ------
        UnknownPropertyError
            If the type has no such property.
        """
        try:
            return self._meta_properties[name]

        except KeyError:
            raise UnknownPropertyError(name, self.bean_name) from None

    def builder(self) -> BeanBuilder:
        return BeanBuilder(self)

    def build(self, values: dict[str, Any]) -> Bean:
        """Construct a bean from a complete mapping of property values."""
        values = self._bean_type.pre_build(dict(values))
        return self._bean_type(**values)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def bean_type(self) -> type[Bean]:
        return self._bean_type

    @property
    def bean_name(self) -> str:
        """Fully qualified name of the bean type."""
        return get_full_qualified_name(self._bean_type)

    @property
    def meta_properties(self) -> dict[str, MetaProperty]:
        return {**self._meta_properties}

    @property
    def property_names(self) -> list[str]:
        return list(self._meta_properties)


class BeanBuilder:
    """
    Staged construction of a bean.

    Values are accumulated by name and the bean is only created by
    ``build``, which allows immutable beans to be reconstructed and lets the
    bean validate the complete set of values at once.
    """

    def __init__(self, meta_bean: MetaBean) -> None:
        self._meta_bean: MetaBean = meta_bean
        self._values: dict[str, Any] = {}
        self._built: bool = False

    def __repr__(self) -> str:
        return f"BeanBuilder({self._meta_bean.bean_name}, {self._values!r})"

    @staticmethod
    def _name(prop: str | MetaProperty) -> str:
        return prop.name if isinstance(prop, MetaProperty) else prop

    def set(self, prop: str | MetaProperty, value: Any) -> BeanBuilder:
        """
        Set a pending property value.

        Raises
        ------
        UnknownPropertyError
            If the bean type has no such property.
        """
        name = self._name(prop)

        if not self._meta_bean.has_property(name):
            raise UnknownPropertyError(name, self._meta_bean.bean_name)

        self._values[name] = value

        return self

    def set_all(self, values: dict[str, Any]) -> BeanBuilder:
        for name, value in values.items():
            self.set(name, value)

        return self

    def get(self, prop: str | MetaProperty, default: Any = None) -> Any:
        return self._values.get(self._name(prop), default)

    def build(self) -> Bean:
        """
        Construct the bean.

        Raises
        ------
        RuntimeError
            If the builder has already been used.
        """
        if self._built:
            raise RuntimeError(f"Builder for {self._meta_bean.bean_name} has already been built")

        self._built = True

        return self._meta_bean.build(self._values)

    @property
    def meta_bean(self) -> MetaBean:
        return self._meta_bean

    @property
    def values(self) -> dict[str, Any]:
        return {**self._values}


class MetaModel:
    """
    Type introspection service used by readers and writers.

    MetaBeans are computed on first use and cached per type. The cache holds
    weak references to the types, so locally defined bean classes can still
    be garbage collected.
    """

    def __init__(self) -> None:
        self._meta_beans: weakref.WeakKeyDictionary[type, MetaBean] = weakref.WeakKeyDictionary()

    def is_bean(self, kind: Any) -> bool:
        return isinstance(kind, type) and issubclass(kind, Bean)

    def meta_bean(self, bean_type: type[Bean]) -> MetaBean:

        meta_bean = self._meta_beans.get(bean_type)

        if meta_bean is None:
            meta_bean = self._meta_beans[bean_type] = MetaBean(bean_type)

        return meta_bean

    def properties_of(self, bean_type: type[Bean]) -> list[tuple[str, Any]]:
        """Ordered list of ``(name, declared type)`` pairs."""
        return [(prop.name, prop.kind) for prop in self.meta_bean(bean_type)]

    def builder_for(self, bean_type: type[Bean]) -> BeanBuilder:
        return self.meta_bean(bean_type).builder()


META_MODEL = MetaModel()
"""Shared meta-model used by default settings."""


__all__ = [
    'MetaProperty',
    'MetaBean',
    'BeanBuilder',
    'MetaModel',
    'META_MODEL',
]
