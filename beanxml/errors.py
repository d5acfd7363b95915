#  -*- coding: utf-8 -*-
"""
Exception taxonomy for bean serialization.

Every error raised while writing or reading a document derives from
``BeanSerError`` and carries, when known, the bean type and the property path
at the point of failure. Context is attached once by the innermost code that
knows it; outer layers never overwrite it.

Hierarchy
---------
BeanSerError
    DocumentFormatError
        Malformed or unexpected token structure.
    TypeResolutionError
        A type named in the document cannot be resolved.
    UnknownPropertyError
        A property name in the document does not exist in the current schema.
    ConversionError
        A leaf value cannot be rendered to text or parsed from text.
    BeanBuildError
        The builder or the bean's validation rejected the accumulated values.
"""

from __future__ import annotations


class BeanSerError(Exception):
    """
    Base class of all serialization errors.

    Parameters
    ----------
    message : str
        Description of the failure.
    bean_type : str, optional
        Qualified name of the enclosing bean type.
    property_path : str, optional
        Dotted path of the property being processed, e.g.
        ``Person.addresses[1].street``.
    """

    def __init__(self,
                 message: str,
                 bean_type: str | None = None,
                 property_path: str | None = None) -> None:

        super().__init__(message)

        self.message: str = message
        self.bean_type: str | None = bean_type
        self.property_path: str | None = property_path

    def __str__(self) -> str:

        context = []

        if self.bean_type is not None:
            context.append(f"bean: {self.bean_type}")

        if self.property_path is not None:
            context.append(f"property: {self.property_path}")

        if not context:
            return self.message

        return f"{self.message} ({', '.join(context)})"

    def with_context(self, bean_type: str | None, property_path: str | None) -> BeanSerError:
        """
        Attach the bean type and property path if not already set.

        Returns
        -------
        BeanSerError
            ``self``, to allow ``raise error.with_context(...)``.
        """
        if self.bean_type is None:
            self.bean_type = bean_type

        if self.property_path is None:
            self.property_path = property_path

        return self


class DocumentFormatError(BeanSerError):
    """The document structure does not match the expected format."""


class TypeResolutionError(BeanSerError):
    """A type name could not be resolved to a loadable type."""

    def __init__(self, type_name: str, message: str | None = None, **context) -> None:
        self.type_name: str = type_name
        super().__init__(message or f"Unable to resolve type '{type_name}'", **context)


class UnknownPropertyError(BeanSerError):
    """A property name is not part of the bean's schema."""

    def __init__(self, property_name: str, bean_type: str, **context) -> None:
        self.property_name: str = property_name
        super().__init__(f"Unknown property '{property_name}' in bean {bean_type}",
                         bean_type=bean_type, **context)


class ConversionError(BeanSerError):
    """A leaf value could not be converted to or from text."""


class BeanBuildError(BeanSerError):
    """The accumulated property values could not be built into a bean."""


__all__ = [
    'BeanSerError',
    'DocumentFormatError',
    'TypeResolutionError',
    'UnknownPropertyError',
    'ConversionError',
    'BeanBuildError',
]
