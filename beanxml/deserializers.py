#  -*- coding: utf-8 -*-
"""
Migration hooks applied while reading, to evolve schemas without breaking old
documents.

When the reader meets a bean tag it asks a ``DeserializerRegistry`` for the
deserializer of the resolved type. Lookup order:

1. a deserializer registered for exactly that type;
2. the first non-None answer of the providers, in registration order;
3. the no-op ``DEFAULT_DESERIALIZER``.

Lookups never fail. The registry is read by every reader and can be modified
at any time from any thread: the exact-match map relies on atomic single-key
dict operations and the provider chain is an immutable tuple replaced
copy-on-write, so a lookup always sees either the old or the new state and
never takes a lock.
"""

from __future__ import annotations

import copy
import logging
import re
import threading

from abc import ABC, abstractmethod

from .beans import Bean, get_full_qualified_name
from .metamodel import MetaBean, MetaModel, MetaProperty

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, Iterable, Mapping


logger = logging.getLogger(__name__)


class Deserializer:
    """
    Hooks used by the reader to reconstruct one bean type.

    The base class performs no migration: the type is used as resolved,
    property names must exist in the current schema and the values are built
    as they are.
    """

    def find_meta_bean(self, bean_type: type[Bean], meta_model: MetaModel) -> MetaBean:
        """Descriptor of the type to build; may redirect to another type."""
        return meta_model.meta_bean(bean_type)

    def find_meta_property(self, meta_bean: MetaBean, name: str) -> MetaProperty | None:
        """
        Descriptor used to parse the document property ``name``.

        Returns
        -------
        MetaProperty or None
            None if the property is unknown, which the reader reports as an
            ``UnknownPropertyError``. The value is stored under the returned
            descriptor's name.
        """
        if meta_bean.has_property(name):
            return meta_bean.meta_property(name)

        return None

    def migrate(self, meta_bean: MetaBean, values: dict[str, Any]) -> dict[str, Any]:
        """Rewrite the map of parsed values before the builder is populated."""
        return values

    def build(self, meta_bean: MetaBean, values: dict[str, Any]) -> Bean:
        """Populate a builder with ``values`` and build the bean."""
        return meta_bean.builder().set_all(values).build()


DEFAULT_DESERIALIZER = Deserializer()
"""No-op deserializer returned when nothing else matches."""


class MigratingDeserializer(Deserializer):
    """
    Declarative deserializer covering the usual schema changes.

    Parameters
    ----------
    renames : mapping, optional
        ``{old_name: new_name}`` for renamed properties.
    defaults : mapping, optional
        ``{name: value}`` for properties missing from old documents. Values
        are deep-copied for every bean.
    discards : iterable of str or mapping, optional
        Removed properties, parsed and dropped. A mapping ``{name: kind}``
        gives the declared type needed to parse structured values.
    legacy : mapping, optional
        ``{name: kind}`` for removed properties whose value is still needed.
        They are parsed with the given type and passed to ``transform``; what
        ``transform`` leaves of them is dropped before building.
    target : type, optional
        Bean type built instead of the type named in the document.
    transform : callable, optional
        ``transform(values) -> values`` applied to the parsed value map,
        after renames and defaults.

    Examples
    --------
    An old ``Person`` stored ``name`` as one string, the new one has
    ``forename`` and ``surname``:

    >>> def split_name(values):
    ...     forename, _, surname = values.pop('name').partition(' ')
    ...     return {**values, 'forename': forename, 'surname': surname}
    >>>
    >>> registry.register(Person, MigratingDeserializer(legacy={'name': str},
    ...                                                 transform=split_name))
    """

    def __init__(self,
                 renames: Mapping[str, str] | None = None,
                 defaults: Mapping[str, Any] | None = None,
                 discards: Iterable[str] | Mapping[str, Any] | None = None,
                 legacy: Mapping[str, Any] | None = None,
                 target: type[Bean] | None = None,
                 transform: Callable[[dict[str, Any]], dict[str, Any]] | None = None) -> None:

        if not isinstance(discards, Mapping):
            discards = {name: object for name in discards or ()}

        self._renames: dict[str, str] = dict(renames or {})
        self._defaults: dict[str, Any] = dict(defaults or {})
        self._discards: dict[str, Any] = dict(discards)
        self._legacy: dict[str, Any] = dict(legacy or {})
        self._target: type[Bean] | None = target
        self._transform: Callable[[dict[str, Any]], dict[str, Any]] | None = transform

    def __repr__(self) -> str:
        target = get_full_qualified_name(self._target) if self._target is not None else None
        return f"MigratingDeserializer(renames={self._renames!r}, target={target})"

    # ========== ========== ========== ========== ========== public methods
    def find_meta_bean(self, bean_type: type[Bean], meta_model: MetaModel) -> MetaBean:

        if self._target is not None:
            logger.debug("Redirecting %s to %s",
                         get_full_qualified_name(bean_type), get_full_qualified_name(self._target))
            return meta_model.meta_bean(self._target)

        return super().find_meta_bean(bean_type, meta_model)

    def find_meta_property(self, meta_bean: MetaBean, name: str) -> MetaProperty | None:

        if name in self._legacy:
            return MetaProperty(name, self._legacy[name])

        if name in self._discards:
            return MetaProperty(name, self._discards[name])

        return super().find_meta_property(meta_bean, self._renames.get(name, name))

    def migrate(self, meta_bean: MetaBean, values: dict[str, Any]) -> dict[str, Any]:

        values = dict(values)

        for name, value in self._defaults.items():
            if name not in values:
                values[name] = copy.deepcopy(value)

        if self._transform is not None:
            values = self._transform(values)

        for name in (*self._legacy, *self._discards):
            values.pop(name, None)

        return values

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def target(self) -> type[Bean] | None:
        return self._target


class DeserializerProvider(ABC):
    """Supplies deserializers by rule instead of by exact type."""

    @abstractmethod
    def find_deserializer(self, bean_type: type[Bean]) -> Deserializer | None:
        """Deserializer for ``bean_type``, or None if the rule does not match."""


class PatternDeserializerProvider(DeserializerProvider):
    """
    Matches a regular expression against the fully qualified type name.

    Parameters
    ----------
    pattern : str or re.Pattern
        Expression that must match the whole qualified name.
    deserializer : Deserializer
        Returned for every matching type.
    """

    def __init__(self, pattern: str | re.Pattern, deserializer: Deserializer) -> None:
        self._pattern: re.Pattern = re.compile(pattern)
        self._deserializer: Deserializer = deserializer

    def __repr__(self) -> str:
        return f"PatternDeserializerProvider({self._pattern.pattern!r})"

    def find_deserializer(self, bean_type: type[Bean]) -> Deserializer | None:

        if self._pattern.fullmatch(get_full_qualified_name(bean_type)):
            return self._deserializer

        return None


class DeserializerRegistry:
    """
    Lookup of deserializers by bean type with provider fallback.

    Parameters
    ----------
    *providers : DeserializerProvider
        Initial provider chain.
    """

    def __init__(self, *providers: DeserializerProvider) -> None:
        self._deserializers: dict[type, Deserializer] = {}
        self._providers: tuple[DeserializerProvider, ...] = providers
        self._lock: threading.Lock = threading.Lock()

    # ========== ========== ========== ========== ========== public methods
    def register(self, bean_type: type[Bean], deserializer: Deserializer) -> None:
        """Install the deserializer of exactly ``bean_type``, replacing any previous one."""
        self._deserializers[bean_type] = deserializer
        logger.debug("Registered deserializer %r for %s", deserializer, get_full_qualified_name(bean_type))

    def unregister(self, bean_type: type[Bean]) -> None:
        """Remove the exact-match deserializer of ``bean_type``. Idempotent."""
        self._deserializers.pop(bean_type, None)

    def register_provider(self, provider: DeserializerProvider) -> None:
        """Append ``provider`` to the fallback chain."""
        with self._lock:
            self._providers = (*self._providers, provider)

        logger.debug("Registered deserializer provider %r", provider)

    def remove_provider(self, provider: DeserializerProvider) -> None:
        """Remove ``provider`` from the fallback chain. Idempotent."""
        with self._lock:
            self._providers = tuple(p for p in self._providers if p is not provider)

    def find(self, bean_type: type[Bean]) -> Deserializer:
        """Deserializer for ``bean_type``; never fails."""
        deserializer = self._deserializers.get(bean_type)

        if deserializer is not None:
            return deserializer

        for provider in self._providers:

            deserializer = provider.find_deserializer(bean_type)

            if deserializer is not None:
                return deserializer

        return DEFAULT_DESERIALIZER

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def deserializers(self) -> dict[type, Deserializer]:
        """Snapshot of the exact-match registrations."""
        return dict(self._deserializers)

    @property
    def providers(self) -> tuple[DeserializerProvider, ...]:
        return self._providers


DESERIALIZERS = DeserializerRegistry()
"""Process-wide registry used by default settings."""


__all__ = [
    'Deserializer',
    'DEFAULT_DESERIALIZER',
    'MigratingDeserializer',
    'DeserializerProvider',
    'PatternDeserializerProvider',
    'DeserializerRegistry',
    'DESERIALIZERS',
]
