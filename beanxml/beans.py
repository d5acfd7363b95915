#  -*- coding: utf-8 -*-
"""
Bean base classes and the process-wide bean type registry.

A bean is an aggregate exposing a fixed, ordered set of named properties,
declared with ``BeanProperty`` descriptors. Every subclass of ``Bean`` is
registered by fully qualified name when the class is created, which is what
allows a reader to turn a type name found in a document back into a class.

Examples
--------
>>> class Point(Bean):
...     x = BeanProperty(kind=float, default=0.0)
...     y = BeanProperty(kind=float, default=0.0)
>>>
>>> p = Point(x=1.0, y=2.0)
>>> Bean[get_full_qualified_name(Point)] is Point
True
"""

from __future__ import annotations

import numpy

from abc import ABCMeta

from .properties import BeanProperty

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Type


# ========== ========== ========== ========== ========== ==========
def get_full_qualified_name(cls: type) -> str:
    """
    Return the fully qualified name of a class.

    Built-in types return only their qualified name (``'int'``), all other
    classes return ``'<module>.<qualname>'``.

    Examples
    --------
    >>> get_full_qualified_name(int)
    'int'
    >>> from pathlib import Path
    >>> get_full_qualified_name(Path)
    'pathlib.Path'
    """
    module = cls.__module__

    if module is None or module == 'builtins':
        return cls.__qualname__

    return f"{module}.{cls.__qualname__}"


def check_types(obj: Any,
                types: type | tuple[type, ...],
                can_be_none: bool = False,
                raise_error: bool = True) -> bool:
    """
    Check whether ``obj`` is an instance of ``types``.

    Parameters
    ----------
    obj : object
        Object whose type must be checked.
    types : type or tuple of type
        Expected types.
    can_be_none : bool, default False
        If True, None is accepted.
    raise_error : bool, default True
        If True, raises TypeError on mismatch instead of returning False.

    Raises
    ------
    TypeError
        If the check fails and ``raise_error`` is True.
    """
    if can_be_none:
        if isinstance(types, tuple):
            types = (*types, None.__class__)
        else:
            types = (types, None.__class__)

    result = isinstance(obj, types)

    if not result and raise_error:

        if isinstance(types, tuple):
            cls_names = ', '.join(get_full_qualified_name(cls) for cls in types)
        else:
            cls_names = get_full_qualified_name(types)

        error_msg = f"Expected instance of one of the following classes: {cls_names}. " \
                    f"Given {get_full_qualified_name(type(obj))} instead"
        raise TypeError(error_msg)

    return result


def values_equal(first: Any, second: Any) -> bool:
    """
    Compare two property values, treating NumPy arrays element-wise.

    Always returns a plain bool, which makes it safe for comparing values of
    unknown shape (arrays, nested containers, beans).
    """
    if isinstance(first, numpy.ndarray) or isinstance(second, numpy.ndarray):
        return bool(numpy.array_equal(first, second))

    if isinstance(first, (list, tuple)) and isinstance(second, (list, tuple)):
        return type(first) is type(second) and len(first) == len(second) and \
            all(values_equal(a, b) for a, b in zip(first, second))

    return bool(first == second)


# ========== ========== ========== ========== ========== ==========
class BeanMetatype(ABCMeta):
    """
    Metaclass implementing the bean type registry.

    Every class created with this metaclass, except the root ``Bean`` class,
    is registered under its fully qualified name. The metaclass also collects
    the writable ``BeanProperty`` descriptors of the whole MRO into the
    ordered per-class mapping ``bean_properties``: base class properties come
    first, each class in declaration order, and a redefinition keeps the
    position of the property it overrides.

    The registry supports:

    - lookup: ``Bean[qualname]``
    - membership: ``qualname in Bean`` or ``cls in Bean``
    """

    # ========== ========== ========== ========== ========== special methods
    def __new__(mcs,
                name: str,
                bases: tuple[type, ...],
                namespace: dict[str, Any],
                **kwargs: Any) -> Type[Bean]:

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        # ---------- ---------- ---------- ---------- ---------- ----------
        if not any(isinstance(base, BeanMetatype) for base in bases):
            cls._subclasses: dict[str, Type[Bean]] = {}

        else:
            qualname: str = get_full_qualified_name(cls)
            Bean._subclasses[qualname] = cls

        cls._bean_properties: dict[str, BeanProperty] = {}

        for base in reversed(cls.__mro__):

            if base is object:
                continue  # just for not wasting time

            for attr_name, attr_value in base.__dict__.items():

                if isinstance(attr_value, BeanProperty) and not attr_value.readonly:
                    cls._bean_properties[attr_name] = attr_value

                elif attr_name in cls._bean_properties:
                    # overridden by something that is not a serializable property
                    del cls._bean_properties[attr_name]

        # ---------- ---------- ---------- ---------- ---------- ----------
        return cls

    def __getitem__(cls, qualname: str) -> Type[Bean]:

        if cls is Bean:
            return Bean._subclasses[qualname]

        raise KeyError(f'Class {cls.__name__} is not subscriptable')

    def __contains__(cls, subclass: str | type) -> bool:

        if cls is Bean:
            if isinstance(subclass, str):
                return subclass in cls._subclasses

            if isinstance(subclass, type):
                return subclass in cls._subclasses.values()

            raise TypeError('Expected the class full qualified name or the class itself')

        raise NotImplementedError()

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def bean_types(cls) -> list[Type[Bean]]:
        """list of bean types currently registered."""
        return list(Bean._subclasses.values())

    @property
    def bean_properties(cls) -> dict[str, BeanProperty]:
        """Copy of the ordered serialization schema of this class."""
        return {**cls._bean_properties}


class Bean(metaclass=BeanMetatype):
    """
    Base class of mutable beans.

    Construction
    ------------
    Bean(**values)
        Set the bean properties by name. Unknown names raise ValueError.
        Missing names take the property default.

    Bean(other)
        Copy construction from an instance of the same type.

    Hooks
    -----
    pre_build(values)
        Class method receiving the value map before construction; may
        return a modified map. Used by builders.
    validate()
        Called once construction is complete; raise to reject the
        combination of property values.

    Equality
    --------
    Two beans are equal if they have the same concrete type and all their
    properties are equal. NumPy arrays compare element-wise.
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, *args, **kwargs) -> None:

        if not args:
            self._initialize_from_data(kwargs)

        elif len(args) == 1 and not kwargs and isinstance(args[0], type(self)):
            self._initialize_from_data(args[0].property_values())

        else:
            error = "Given args do not match any available signature for initializing the Bean interface"
            raise ValueError(error)

        self.validate()

    def __eq__(self, other: object) -> bool:

        if type(other) is not type(self):
            return NotImplemented

        for key in type(self).bean_properties:

            if not values_equal(getattr(other, key), getattr(self, key)):
                return False

        return True

    __hash__ = None

    def __repr__(self) -> str:
        values = ', '.join(f"{key}={value!r}" for key, value in self.property_values().items())
        return f"{type(self).__name__}({values})"

    def __copy__(self) -> Bean:
        return self.copy()

    # ========== ========== ========== ========== ========== protected methods
    def _initialize_from_data(self, data: dict[str, Any]) -> None:
        """Set the bean properties from a mapping of values."""
        check_types(data, dict)

        data = dict(data)

        for key in type(self).bean_properties:
            setattr(self, key, data.pop(key, None))

        # at this point, the dictionary should be empty
        if data:
            error = f"There is no property with the keys {list(data.keys())} in {type(self).__name__}"
            raise ValueError(error)

    # ========== ========== ========== ========== ========== public methods
    @classmethod
    def pre_build(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Adjust the values gathered by a builder before construction."""
        return values

    def validate(self) -> None:
        """Reject invalid combinations of property values by raising."""

    def property_values(self) -> dict[str, Any]:
        """Ordered mapping of property name to current value."""
        return {key: getattr(self, key) for key in type(self).bean_properties}

    def copy(self) -> Bean:
        """Create a new instance of the same type with the same values."""
        return type(self)(self)


class ImmutableBean(Bean):
    """
    Bean frozen once constructed.

    Assigning any attribute after construction raises AttributeError. Since
    the values cannot change, immutable beans are hashable.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        object.__setattr__(self, '_frozen', True)

    def __setattr__(self, name: str, value: Any) -> None:

        if getattr(self, '_frozen', False):
            raise AttributeError(f"{type(self).__name__} is immutable: cannot set '{name}'")

        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:

        if getattr(self, '_frozen', False):
            raise AttributeError(f"{type(self).__name__} is immutable: cannot delete '{name}'")

        super().__delattr__(name)

    def __hash__(self) -> int:
        return hash((type(self), tuple(_hashable(value) for value in self.property_values().values())))


def _hashable(value: Any) -> Any:

    if isinstance(value, numpy.ndarray):
        return value.tobytes()

    if isinstance(value, (list, tuple)):
        return tuple(_hashable(item) for item in value)

    if isinstance(value, (set, frozenset)):
        return frozenset(_hashable(item) for item in value)

    if isinstance(value, dict):
        return tuple((_hashable(k), _hashable(v)) for k, v in value.items())

    return value


__all__ = [
    'Bean',
    'ImmutableBean',
    'BeanMetatype',
    'get_full_qualified_name',
    'check_types',
    'values_equal',
]
