#  -*- coding: utf-8 -*-
"""
Configuration of readers and writers.
"""

from __future__ import annotations

from .beans import Bean
from .converter import StringConverter, CONVERTER
from .deserializers import DeserializerRegistry, DESERIALIZERS
from .iterables import SerIteratorFactory, ITERATORS
from .metamodel import MetaModel, META_MODEL
from .properties import BeanProperty
from .resolver import TypeResolver, RESOLVER

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any


_COLLABORATORS = ('converter', 'resolver', 'meta_model', 'iterators', 'deserializers')


def _parse_indent(settings: SerSettings, value: Any) -> str:

    if not isinstance(value, str) or value.strip():
        raise ValueError(f"Indentation must be a whitespace string, given {value!r}")

    return value


class SerSettings(Bean):
    """
    Output options and collaborators of a reader or writer.

    The output options are bean properties, so settings can themselves be
    written and read like any other bean. The collaborators are not part of
    the serialized form; they default to the shared module instances and are
    replaced with ``using``.

    Attributes
    ----------
    pretty_print : bool
        Indent the output, one element per line. Default True.
    indent : str
        Indentation unit when pretty printing. Default two spaces.
    encoding : str
        Encoding of documents written to files. Default 'UTF-8'.
    xml_declaration : bool
        Start documents with an XML declaration. Default True.
    short_types : bool
        Write bean types of the root bean's module in the relative
        ``.QualName`` form. Default True.

    Examples
    --------
    Compact output through a custom converter::

        converter = CONVERTER.copy()
        converter.register(Money, str, lambda text, kind: Money.parse(text))

        settings = SerSettings(pretty_print=False).using(converter=converter)
        text = BeanXmlWriter(settings).write(invoice)
    """

    # ---------- ---------- ---------- ---------- output
    pretty_print: bool = BeanProperty(kind=bool, default=True)
    indent: str = BeanProperty(kind=str, default='  ', parser=_parse_indent)
    encoding: str = BeanProperty(kind=str, default='UTF-8')
    xml_declaration: bool = BeanProperty(kind=bool, default=True)

    # ---------- ---------- ---------- ---------- type names
    short_types: bool = BeanProperty(kind=bool, default=True)

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, *args, **kwargs) -> None:

        super().__init__(*args, **kwargs)

        self._converter: StringConverter = CONVERTER
        self._resolver: TypeResolver = RESOLVER
        self._meta_model: MetaModel = META_MODEL
        self._iterators: SerIteratorFactory = ITERATORS
        self._deserializers: DeserializerRegistry = DESERIALIZERS

        if args:
            for name in _COLLABORATORS:
                setattr(self, f"_{name}", getattr(args[0], name))

    # ========== ========== ========== ========== ========== public methods
    def using(self, **collaborators: Any) -> SerSettings:
        """
        Copy of these settings with some collaborators replaced.

        Parameters
        ----------
        converter : StringConverter, optional
        resolver : TypeResolver, optional
            If a converter is given without a resolver, a new resolver using
            that converter is created.
        meta_model : MetaModel, optional
        iterators : SerIteratorFactory, optional
        deserializers : DeserializerRegistry, optional

        Raises
        ------
        TypeError
            If an unknown collaborator is given.
        """
        unknown = set(collaborators) - set(_COLLABORATORS)

        if unknown:
            raise TypeError(f"Unknown collaborators: {sorted(unknown)}")

        if 'converter' in collaborators and 'resolver' not in collaborators:
            collaborators['resolver'] = TypeResolver(collaborators['converter'])

        settings = self.copy()

        for name, value in collaborators.items():
            setattr(settings, f"_{name}", value)

        return settings

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def converter(self) -> StringConverter:
        return self._converter

    @property
    def resolver(self) -> TypeResolver:
        return self._resolver

    @property
    def meta_model(self) -> MetaModel:
        return self._meta_model

    @property
    def iterators(self) -> SerIteratorFactory:
        return self._iterators

    @property
    def deserializers(self) -> DeserializerRegistry:
        return self._deserializers


__all__ = [
    'SerSettings',
]
