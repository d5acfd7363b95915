#  -*- coding: utf-8 -*-
"""
Property descriptors declaring the schema of a bean.

A ``BeanProperty`` works like ``property`` but additionally records the
declared type of the value (``kind``), which drives serialization: the writer
omits type annotations that match it and the reader uses it to decide how a
tag must be parsed.
"""

from __future__ import annotations

import types

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import (TypeVar, Callable, Any, TypeAlias, Self, Union, Annotated, Literal,
                    get_origin, get_args)


T = TypeVar('T')
"""Represent the type of the property"""

Getter: TypeAlias = Callable[[object], T]
Setter: TypeAlias = Callable[[object, Any], None]
Deleter: TypeAlias = Callable[[object], None]
Parser: TypeAlias = Callable[[object, Any], T]


def normalize_kind(kind: Any) -> Any:
    """
    Reduce a type annotation to a form the serializer understands.

    Parameters
    ----------
    kind : object
        A class, a parametrised generic (``list[int]``), an optional type
        (``X | None``), or None.

    Returns
    -------
    object
        ``X`` for ``Optional[X]`` and ``Annotated[X, ...]``; ``object`` for
        None, ``Any``, type variables, literals and unions of several types;
        the annotation itself otherwise.

    Raises
    ------
    TypeError
        If ``kind`` is a string forward reference.

    Examples
    --------
    >>> normalize_kind(int | None)
    <class 'int'>
    >>> normalize_kind(int | str)
    <class 'object'>
    """
    if kind is None or kind is Any or isinstance(kind, TypeVar):
        return object

    if isinstance(kind, str):
        raise TypeError(f"Forward references are not supported as property kinds: {kind!r}")

    origin = get_origin(kind)

    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(kind) if arg is not type(None)]
        return normalize_kind(args[0]) if len(args) == 1 else object

    if origin is Annotated:
        return normalize_kind(get_args(kind)[0])

    if origin is Literal:
        return object

    if isinstance(kind, type) or origin is not None:
        return kind

    return object


def kind_class(kind: Any) -> type:
    """Return the runtime class of a (possibly parametrised) kind."""
    origin = get_origin(kind)
    return origin if isinstance(origin, type) else kind


class BeanProperty:
    """
    Descriptor representing one serializable property of a bean.

    Parameters
    ----------
    fget : callable, optional
        Getter with signature ``fget(instance) -> value``. If omitted, a default
        getter is generated that reads ``self.private_name``.
    fset : callable, optional
        Setter with signature ``fset(instance, value)``. If omitted and the
        property is not read-only, a default setter is generated.
    fdel : callable, optional
        Deleter with signature ``fdel(instance)``.
    kind : type, optional
        Declared type of the value. Parametrised generics such as
        ``dict[str, int]`` describe collection element types. Defaults to
        ``object``.
    default : object or callable, optional
        Default value returned when the stored value is missing or None. If a
        callable, must have signature ``default(instance) -> value``.
    parser : callable, optional
        Parser invoked before assignment,
        ``parser(instance, raw_value) -> parsed_value``.
    readonly : bool, default False
        If True, the property has no setter. Read-only properties are derived
        values: they are part of the class interface but not of its
        serialized form.
    doc : str, optional
        Explicit docstring. If omitted, uses the getter's docstring.

    Notes
    -----
    None means "unset": reading an unset property returns the default, and
    assigning None stores the default. A property whose default is None
    therefore holds a real None value.
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 fget: Getter | None = None,
                 fset: Setter | None = None,
                 fdel: Deleter | None = None,
                 *,
                 kind: Any = None,
                 default: T | Getter | None = None,
                 parser: Parser | None = None,
                 readonly: bool = False,
                 doc: str | None = None) -> None:

        self.fget: Getter | None = fget
        self.fset: Setter | None = fset
        self.fdel: Deleter | None = fdel

        self._kind: Any = normalize_kind(kind)
        self._default: T | Getter | None = default
        self._parser: Parser | None = parser
        self._readonly: bool = readonly

        if self._readonly:
            self.fset = None

        # Use getter docstring if not provided (which can also be None)
        self.__doc__: str | None = fget.__doc__ if doc is None and fget is not None else doc

    def __set_name__(self, owner: type, name: str) -> None:
        """Bind the descriptor to its owner class and attribute name."""
        self.name: str = name
        self.owner: type = owner
        self.private_name: str = f"_bean_property__{name}"

        if self.fget is None:
            self.fget = lambda obj: getattr(obj, self.private_name)

        if self.fset is None and not self._readonly:
            self.fset = lambda obj, value: object.__setattr__(obj, self.private_name, value)

    def __get__(self, instance: object | None, owner: type) -> T | Self:
        """Get the property value, applying the default when unset."""
        if instance is None:
            # Accessing from class, return descriptor for introspection
            return self

        if self.fget is None:
            raise AttributeError(f"unreadable attribute '{self.name}'")

        try:
            value = self.fget(instance)
        except AttributeError:
            value = None

        if value is None:
            value = self._default_value(instance)

        return value

    def __set__(self, instance: object, value: Any) -> None:
        """Set the property value through the parser."""
        if self.fset is None:
            raise AttributeError(
                f"can't set attribute '{self.name}' (read-only property)"
            )

        if value is None:
            value = self._default_value(instance)

        if self._parser is not None:
            value = self._parser(instance, value)

        self.fset(instance, value)

    def __delete__(self, instance: object) -> None:
        if self.fdel is None:
            raise AttributeError(f"can't delete attribute '{self.name}'")

        self.fdel(instance)

    # ========== ========== ========== ========== ========== protected methods
    def _default_value(self, instance: object) -> Any:

        if callable(self._default):
            return self._default(instance)

        return self._default

    def _replace(self, **changes: Any) -> Self:
        """Return a new descriptor with some of its configuration replaced."""
        config = dict(fget=self.fget,
                      fset=self.fset,
                      fdel=self.fdel,
                      kind=self._kind,
                      default=self._default,
                      parser=self._parser,
                      readonly=self._readonly,
                      doc=self.__doc__)
        config.update(changes)

        return type(self)(**config)

    # ========== ========== Descriptor protocol methods to work like @property
    def getter(self, fget: Getter) -> Self:
        """Return a copy with ``fget`` as getter."""
        return self._replace(fget=fget)

    def setter(self, fset: Setter) -> Self:
        """Return a copy with ``fset`` as setter."""
        return self._replace(fset=fset)

    def deleter(self, fdel: Deleter) -> Self:
        """Return a copy with ``fdel`` as deleter."""
        return self._replace(fdel=fdel)

    def default(self, func: Getter) -> Self:
        """Return a copy with ``func`` as default factory."""
        return self._replace(default=func)

    def parser(self, func: Parser) -> Self:
        """Return a copy with ``func`` as parser."""
        return self._replace(parser=func)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def kind(self) -> Any:
        """Declared type of the property value."""
        return self._kind

    @property
    def readonly(self) -> bool:
        """Check if property is read-only (derived, not serialized)."""
        return self._readonly


def bean_property(kind: Any = None,
                  default: T | Getter | None = None,
                  readonly: bool = False) -> Callable[[Getter], BeanProperty]:
    """
    Decorator factory creating a BeanProperty from a getter.

    Examples
    --------
    >>> class Circle(Bean):
    ...     radius = BeanProperty(kind=float, default=1.0)
    ...
    ...     @bean_property(kind=float, readonly=True)
    ...     def area(self):
    ...         return 3.14159 * self.radius ** 2
    """
    def decorator(getter: Getter) -> BeanProperty:
        return BeanProperty(
            fget=getter,
            kind=kind,
            default=default,
            readonly=readonly,
        )

    return decorator


__all__ = [
    'BeanProperty',
    'bean_property',
    'normalize_kind',
    'kind_class',
]
