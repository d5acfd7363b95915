#  -*- coding: utf-8 -*-
"""
XML reader for bean graphs.

The reader is a single-pass state machine fed one token at a time, so the same
machine serves a synchronous token source (``read``) and an asynchronous one
(``read_async``). Its state is the stack of open frames:

- ``_BeanFrame``: properties of a bean, built when the tag closes;
- ``_IterableFrame``: items of a collection;
- ``_LeafFrame``: text of a leaf value;
- ``_NullFrame``: an explicit null marker, which must stay empty.

Before the root tag the reader awaits ``<bean type="...">``; once the root
frame is closed the document is complete and any further token is an error.

Every frame knows the property path it is filling (``Person.addresses[1]``),
and errors raised while a frame is on top of the stack are annotated with that
path and the innermost bean type.
"""

from __future__ import annotations

import logging
import os

from .beans import Bean
from .deserializers import Deserializer
from .errors import BeanSerError, BeanBuildError, DocumentFormatError, TypeResolutionError, UnknownPropertyError
from .iterables import SerIterable
from .metamodel import MetaBean, MetaProperty
from .settings import SerSettings
from .tokens import Token, TokenKind, iter_tokens, aiter_tokens

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, AsyncIterable, BinaryIO


logger = logging.getLogger(__name__)


# ========== ========== ========== ========== ========== frames
class _Frame:
    """Open tag being parsed."""

    bean_name: str | None = None

    def __init__(self, name: str, path: str) -> None:
        self.name: str = name
        self.path: str = path

    def start(self, reader: BeanXmlReader, token: Token) -> _Frame:
        raise DocumentFormatError(f"Unexpected element <{token.name}> inside <{self.name}>")

    def text(self, reader: BeanXmlReader, text: str) -> None:
        if text.strip():
            raise DocumentFormatError(f"Unexpected text {text.strip()!r} inside <{self.name}>")

    def child(self, reader: BeanXmlReader, value: Any) -> None:
        ...

    def end(self, reader: BeanXmlReader) -> Any:
        raise NotImplementedError


class _NullFrame(_Frame):

    def text(self, reader: BeanXmlReader, text: str) -> None:
        if text:
            raise DocumentFormatError(f"Null marker <{self.name}> must be empty")

    def end(self, reader: BeanXmlReader) -> Any:
        return None


class _LeafFrame(_Frame):

    def __init__(self, name: str, path: str, kind: Any) -> None:
        super().__init__(name, path)
        self.kind: Any = kind
        self.chunks: list[str] = []

    def start(self, reader: BeanXmlReader, token: Token) -> _Frame:
        raise DocumentFormatError(f"Unexpected element <{token.name}> inside the value of <{self.name}>")

    def text(self, reader: BeanXmlReader, text: str) -> None:
        self.chunks.append(text)

    def end(self, reader: BeanXmlReader) -> Any:
        return reader.settings.converter.from_text(''.join(self.chunks), self.kind)


class _BeanFrame(_Frame):

    def __init__(self, name: str, path: str, bean_type: type[Bean], deserializer: Deserializer,
                 meta_bean: MetaBean) -> None:

        super().__init__(name, path)

        self.bean_type: type[Bean] = bean_type
        self.bean_name: str = meta_bean.bean_name
        self.deserializer: Deserializer = deserializer
        self.meta_bean: MetaBean = meta_bean
        self.values: dict[str, Any] = {}
        self.current: MetaProperty | None = None

    def start(self, reader: BeanXmlReader, token: Token) -> _Frame:

        meta_property = self.deserializer.find_meta_property(self.meta_bean, token.name)
        path = f"{self.path}.{token.name}"

        if meta_property is None:
            raise UnknownPropertyError(token.name, self.bean_name, property_path=path)

        self.current = meta_property

        try:
            return reader.value_frame(token, meta_property.kind, path)

        except BeanSerError as error:
            raise error.with_context(self.bean_name, path)

    def child(self, reader: BeanXmlReader, value: Any) -> None:
        self.values[self.current.name] = value

    def end(self, reader: BeanXmlReader) -> Bean:

        try:
            values = self.deserializer.migrate(self.meta_bean, self.values)
            return self.deserializer.build(self.meta_bean, values)

        except BeanSerError:
            raise

        except Exception as error:
            raise BeanBuildError(f"Unable to build {self.bean_name}: {error}") from error


class _IterableFrame(_Frame):

    def __init__(self, name: str, path: str, iterable: SerIterable) -> None:
        super().__init__(name, path)

        self.iterable: SerIterable = iterable
        self.index: int = 0
        self.entry: tuple[Any, int, Any] = (None, 1, None)

    def start(self, reader: BeanXmlReader, token: Token) -> _Frame:

        path = f"{self.path}[{self.index}]"
        self.index += 1

        if token.name != 'item':
            raise DocumentFormatError(f"Expected <item> inside <{self.name}>, found <{token.name}>",
                                      property_path=path)

        try:
            key = reader.key_value(token.attrs.get('key'), self.iterable.key_type)
            column = reader.key_value(token.attrs.get('col'), self.iterable.column_type)
            count = reader.count_value(token.attrs.get('count'))

            self.entry = (key, count, column)

            return reader.value_frame(token, self.iterable.value_type, path)

        except BeanSerError as error:
            raise error.with_context(None, path)

    def child(self, reader: BeanXmlReader, value: Any) -> None:

        key, count, column = self.entry

        try:
            self.iterable.add(key, value, count, column)

        except BeanSerError:
            raise

        except (TypeError, ValueError) as error:
            raise DocumentFormatError(f"Invalid {self.iterable.metatype} item: {error}") from error

    def end(self, reader: BeanXmlReader) -> Any:

        try:
            return self.iterable.build()

        except BeanSerError:
            raise

        except (TypeError, ValueError) as error:
            raise DocumentFormatError(f"Invalid {self.iterable.metatype} content: {error}") from error


# ========== ========== ========== ========== ========== reader
class BeanXmlReader:
    """
    Reads a bean graph from an XML document.

    One instance reads one document at a time; use separate instances for
    concurrent reads.

    Parameters
    ----------
    settings : SerSettings, optional
        Collaborators used to resolve types, convert leaf values, build
        collections and apply migrations. Defaults to ``SerSettings()``.

    Raises
    ------
    DocumentFormatError
        On malformed XML or a structure that is not a bean document.
    TypeResolutionError
        If a type named in the document cannot be resolved.
    UnknownPropertyError
        If a property is not part of the current schema of its bean.
    ConversionError
        If the text of a leaf value cannot be parsed.
    BeanBuildError
        If a bean rejects the values read for it.
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, settings: SerSettings | None = None) -> None:

        self._settings: SerSettings = settings if settings is not None else SerSettings()

        self._stack: list[_Frame] = []
        self._base_module: str | None = None
        self._result: Bean | None = None
        self._complete: bool = False

    # ========== ========== ========== ========== ========== protected methods
    def _reset(self) -> None:
        self._stack = []
        self._base_module = None
        self._result = None
        self._complete = False

    def _resolve(self, name: str) -> type:
        return self._settings.resolver.resolve(name, self._base_module)

    def _bean_frame(self, name: str, path: str, bean_type: type[Bean]) -> _BeanFrame:

        deserializer = self._settings.deserializers.find(bean_type)
        meta_bean = deserializer.find_meta_bean(bean_type, self._settings.meta_model)

        if meta_bean.bean_type is not bean_type:
            logger.debug("Reading %s as %s", bean_type.__qualname__, meta_bean.bean_name)

        return _BeanFrame(name, path, bean_type, deserializer, meta_bean)

    def _start_root(self, token: Token) -> None:

        if token.name != 'bean':
            raise DocumentFormatError(f"Root element must be <bean>, found <{token.name}>")

        if 'type' not in token.attrs:
            raise DocumentFormatError("Root element must have a 'type' attribute")

        unexpected = set(token.attrs) - {'type'}

        if unexpected:
            raise DocumentFormatError(f"Unexpected attributes on the root element: {sorted(unexpected)}")

        bean_type = self._resolve(token.attrs['type'])

        if not self._settings.meta_model.is_bean(bean_type):
            raise TypeResolutionError(token.attrs['type'], f"Root type '{token.attrs['type']}' is not a bean type")

        self._base_module = bean_type.__module__

        logger.debug("Reading %s", token.attrs['type'])

        self._stack.append(self._bean_frame(token.name, bean_type.__name__, bean_type))

    def _context(self) -> tuple[str | None, str | None]:

        bean_name = None

        for frame in reversed(self._stack):
            if frame.bean_name is not None:
                bean_name = frame.bean_name
                break

        path = self._stack[-1].path if self._stack else None

        return bean_name, path

    def _feed(self, token: Token) -> None:

        if self._complete:
            raise DocumentFormatError("Unexpected content after the root element")

        try:
            if not self._stack:

                if token.kind is TokenKind.START:
                    self._start_root(token)

                elif token.kind is TokenKind.TEXT and not token.text.strip():
                    pass

                else:
                    raise DocumentFormatError("Expected the root <bean> element")

                return

            frame = self._stack[-1]

            if token.kind is TokenKind.START:
                self._stack.append(frame.start(self, token))

            elif token.kind is TokenKind.TEXT:
                frame.text(self, token.text)

            else:
                value = frame.end(self)
                self._stack.pop()

                if self._stack:
                    self._stack[-1].child(self, value)

                else:
                    self._result = value
                    self._complete = True

        except BeanSerError as error:
            raise error.with_context(*self._context())

    def _finish(self) -> Bean:

        if not self._complete:
            raise DocumentFormatError("Unterminated document", *self._context())

        logger.debug("Finished reading %s", type(self._result).__qualname__)

        return self._result

    # ========== ========== ========== ========== ========== public methods
    def value_frame(self, token: Token, declared: Any, path: str) -> _Frame:
        """
        Frame parsing the content of a property or item tag.

        The tag's attributes win over the declared type: ``null`` first, then
        ``metatype`` (with ``type``, ``keytype``, ``coltype`` naming element
        types), then ``type`` naming the value type.
        """
        attrs = token.attrs
        settings = self._settings

        # ---------- ---------- null
        if 'null' in attrs:

            if attrs['null'] != 'true':
                raise DocumentFormatError(f"Invalid null marker {attrs['null']!r}", property_path=path)

            return _NullFrame(token.name, path)

        # ---------- ---------- collection named on the wire
        if 'metatype' in attrs:

            element_types = [self._resolve(attrs[name]) if name in attrs else None
                             for name in ('type', 'keytype', 'coltype')]

            iterable = settings.iterators.create_from_metatype(attrs['metatype'], *element_types,
                                                               declared=declared)

            if iterable is None:
                raise DocumentFormatError(f"Unknown metatype '{attrs['metatype']}'", property_path=path)

            return _IterableFrame(token.name, path, iterable)

        kind = self._resolve(attrs['type']) if 'type' in attrs else declared

        # ---------- ---------- nested bean
        if settings.meta_model.is_bean(kind):
            return self._bean_frame(token.name, path, kind)

        # ---------- ---------- collection known from the declaration
        iterable = settings.iterators.create(kind)

        if iterable is not None:
            return _IterableFrame(token.name, path, iterable)

        return _LeafFrame(token.name, path, kind)

    def key_value(self, text: str | None, key_type: Any) -> Any:
        """Parse an item key (or column); raw text when no key type is known."""
        if text is None or key_type is None or key_type is object:
            return text

        return self._settings.converter.from_text(text, key_type)

    @staticmethod
    def count_value(text: str | None) -> int:

        if text is None:
            return 1

        try:
            count = int(text)

        except ValueError:
            raise DocumentFormatError(f"Item count must be an integer, given {text!r}") from None

        if count < 1:
            raise DocumentFormatError(f"Item count must be positive, given {count}")

        return count

    def read(self, source: str | bytes | BinaryIO) -> Bean:
        """
        Read a document.

        Parameters
        ----------
        source : str, bytes or binary file
            XML text, XML bytes, or a file object opened in binary mode.
        """
        self._reset()

        for token in iter_tokens(source):
            self._feed(token)

        return self._finish()

    def read_file(self, path: str | os.PathLike) -> Bean:
        """
        Read a document from a file.

        Raises
        ------
        FileNotFoundError
            If ``path`` is not a file.
        """
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Path {path} does not exist")

        with open(path, 'rb') as file:
            return self.read(file)

    async def read_async(self, chunks: AsyncIterable[str | bytes]) -> Bean:
        """
        Read a document arriving as an asynchronous stream of chunks.

        Tokens are processed as soon as a chunk makes them available, by the
        same machine ``read`` uses.
        """
        self._reset()

        async for token in aiter_tokens(chunks):
            self._feed(token)

        return self._finish()

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def settings(self) -> SerSettings:
        return self._settings


__all__ = [
    'BeanXmlReader',
]
