#  -*- coding: utf-8 -*-
"""
beanxml: type-preserving XML serialization of bean graphs.

A bean is an object with a fixed, ordered set of typed properties. beanxml
writes bean graphs to a self-describing XML format and reads them back,
preserving concrete types (polymorphic properties and elements), collection
shapes and explicit nulls, without a schema file. A migration layer lets
documents written by older versions of a bean be read into its current shape.

Key Features
------------
- **Descriptor-driven schemas**: ``BeanProperty`` declares name, type and default
- **Generic collections**: lists, tuples, sets, multisets, maps, multimaps,
  tables and NumPy arrays, nested to any depth
- **Compact output**: run-length compression and relative type names
- **Schema evolution**: deserializers rename, default, discard and transform
  properties, or redirect to another type
- **Streaming input**: synchronous and asynchronous readers over lxml

Modules
-------
beans, properties
    Bean base classes, the bean type registry and the property descriptor
metamodel
    MetaBean, MetaProperty and BeanBuilder introspection
converter, resolver
    Leaf value conversion and type name resolution
iterables
    Collection shapes used by readers and writers
deserializers
    Migration hooks and their registry
writer, reader
    The XML writer and reader
persistence
    Saving and loading beans to files
settings, log
    Reader and writer configuration, console logging

Examples
--------
>>> from beanxml import Bean, BeanProperty, BeanXmlWriter, BeanXmlReader
>>>
>>> class Person(Bean):
...     name = BeanProperty(kind=str)
...     scores = BeanProperty(kind=list[int])
>>>
>>> text = BeanXmlWriter().write(Person(name='Ada', scores=[10, 10, 7]))
>>> BeanXmlReader().read(text)
Person(name='Ada', scores=[10, 10, 7])
"""

import logging

from .errors import *
from .properties import BeanProperty, bean_property
from .beans import Bean, ImmutableBean, get_full_qualified_name
from .containers import ListMultimap, SetMultimap, Table
from .metamodel import *
from .converter import StringConverter, CONVERTER
from .resolver import TypeResolver, RESOLVER
from .iterables import SerEntry, SerIterable, SerIteratorFactory, ITERATORS
from .deserializers import *
from .settings import SerSettings
from .writer import BeanXmlWriter, compress
from .reader import BeanXmlReader
from .persistence import Persistable, save, load
from .log import configure_logging


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    "BeanSerError",
    "DocumentFormatError",
    "TypeResolutionError",
    "UnknownPropertyError",
    "ConversionError",
    "BeanBuildError",
    "BeanProperty",
    "bean_property",
    "Bean",
    "ImmutableBean",
    "get_full_qualified_name",
    "ListMultimap",
    "SetMultimap",
    "Table",
    "MetaProperty",
    "MetaBean",
    "BeanBuilder",
    "MetaModel",
    "META_MODEL",
    "StringConverter",
    "CONVERTER",
    "TypeResolver",
    "RESOLVER",
    "SerEntry",
    "SerIterable",
    "SerIteratorFactory",
    "ITERATORS",
    "Deserializer",
    "DEFAULT_DESERIALIZER",
    "MigratingDeserializer",
    "DeserializerProvider",
    "PatternDeserializerProvider",
    "DeserializerRegistry",
    "DESERIALIZERS",
    "SerSettings",
    "BeanXmlWriter",
    "compress",
    "BeanXmlReader",
    "Persistable",
    "save",
    "load",
    "configure_logging",
]


try:
    # this will run if beanxml is installed
    from importlib.metadata import metadata, PackageNotFoundError

    meta = metadata('beanxml')

    __author__ = meta['Author']
    __license__ = meta['License']
    __version__ = meta['Version']

except PackageNotFoundError:
    # this will run during development
    import toml
    from pathlib import Path

    pyproject_filepath = Path(__file__).parent.parent / "pyproject.toml"

    with pyproject_filepath.open() as file:
        pyproject = toml.load(file)

    __version__ = pyproject["project"]["version"]
    __author__ = pyproject["project"]["authors"][0]["name"]
    __license__ = pyproject["project"]["license"]["text"]
