#  -*- coding: utf-8 -*-
"""
Start/text/end token stream over lxml parse events.

The reader is a state machine fed one token at a time. Tokens are produced
from lxml's ``start``/``end`` events, either pulled from ``etree.iterparse``
(``iter_tokens``) or pushed through ``etree.XMLPullParser`` as chunks arrive
(``aiter_tokens``). Elements are cleared as soon as their content has been
turned into tokens, so memory stays bounded by the nesting depth.

Text is only reliable once lxml has moved past it: the text before an
element's first child is known when that child starts, a child's tail when the
next sibling starts or the parent ends. Text tokens are emitted at those
points, so the reader always receives them in document order.
"""

from __future__ import annotations

import io
import os

from dataclasses import dataclass, field
from enum import Enum

from lxml import etree

from .errors import DocumentFormatError

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import AsyncIterable, AsyncIterator, BinaryIO, Iterator


_PARSER_OPTIONS = dict(remove_comments=True,
                       remove_pis=True,
                       resolve_entities=False,
                       no_network=True,
                       huge_tree=True)


class TokenKind(Enum):
    START = 'start'
    TEXT = 'text'
    END = 'end'


@dataclass
class Token:
    """
    One step of the document.

    Attributes:
        kind: start tag, character data or end tag
        name: tag name (start and end tokens)
        attrs: tag attributes (start tokens)
        text: character data (text tokens)
        line: source line, when known
    """
    kind: TokenKind
    name: str = ''
    attrs: dict[str, str] = field(default_factory=dict)
    text: str = ''
    line: int | None = None


class TokenStream:
    """Turns lxml ``(event, element)`` pairs into tokens."""

    def __init__(self) -> None:
        # [element, last child seen] for every open element
        self._open: list[list] = []

    def _pending_text(self, entry: list) -> Iterator[Token]:

        element, last_child = entry

        if last_child is None:
            text = element.text

        else:
            text = last_child.tail
            last_child.clear()

            # drop processed siblings
            while last_child.getprevious() is not None:
                del element[0]

        if text:
            yield Token(TokenKind.TEXT, text=text)

    def feed(self, event: str, element: etree._Element) -> Iterator[Token]:

        if event == 'start':

            if self._open:
                parent = self._open[-1]
                yield from self._pending_text(parent)
                parent[1] = element

            self._open.append([element, None])

            yield Token(TokenKind.START, element.tag, dict(element.attrib), line=element.sourceline)

        else:
            entry = self._open.pop()

            yield from self._pending_text(entry)
            yield Token(TokenKind.END, element.tag, line=element.sourceline)

            if not self._open:
                element.clear()


def iter_tokens(source: str | bytes | BinaryIO | os.PathLike) -> Iterator[Token]:
    """
    Tokens of a complete document.

    Parameters
    ----------
    source : str, bytes, binary file or path
        ``str`` is XML text and is parsed as UTF-8; ``bytes`` and files are
        parsed according to their XML declaration.

    Raises
    ------
    DocumentFormatError
        If the document is not well-formed XML.
    """
    if isinstance(source, str):
        source = source.encode('utf-8')

    if isinstance(source, bytes):
        source = io.BytesIO(source)

    elif isinstance(source, os.PathLike):
        source = os.fspath(source)

    stream = TokenStream()

    try:
        for event, element in etree.iterparse(source, events=('start', 'end'), **_PARSER_OPTIONS):
            yield from stream.feed(event, element)

    except etree.XMLSyntaxError as error:
        raise DocumentFormatError(f"Malformed document: {error}") from error


async def aiter_tokens(chunks: AsyncIterable[str | bytes]) -> AsyncIterator[Token]:
    """
    Tokens of a document arriving in chunks.

    ``str`` chunks are encoded as UTF-8.

    Raises
    ------
    DocumentFormatError
        If the document is not well-formed XML or ends prematurely.
    """
    parser = etree.XMLPullParser(events=('start', 'end'), **_PARSER_OPTIONS)
    stream = TokenStream()

    try:
        async for chunk in chunks:

            if isinstance(chunk, str):
                chunk = chunk.encode('utf-8')

            parser.feed(chunk)

            for event, element in parser.read_events():
                for token in stream.feed(event, element):
                    yield token

        parser.close()

        for event, element in parser.read_events():
            for token in stream.feed(event, element):
                yield token

    except etree.XMLSyntaxError as error:
        raise DocumentFormatError(f"Malformed document: {error}") from error


__all__ = [
    'TokenKind',
    'Token',
    'TokenStream',
    'iter_tokens',
    'aiter_tokens',
]
