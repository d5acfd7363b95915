#  -*- coding: utf-8 -*-
"""
Resolution of type names found in documents.

Type names on the wire are fully qualified (``module.QualName``). Names of
bean types living in the same module as the root bean may be written in a
relative form, ``.QualName``, which is resolved against the root bean's
module.
"""

from __future__ import annotations

import logging
import sys

from .beans import Bean, get_full_qualified_name
from .converter import StringConverter, CONVERTER
from .errors import TypeResolutionError

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any


logger = logging.getLogger(__name__)


class TypeResolver:
    """
    Maps textual type names to types and back.

    Resolution order
    ----------------
    1. Renames registered with ``rename`` (types whose name changed).
    2. The bean registry.
    3. The converter's registered leaf types.
    4. If ``allow_import`` is set, the longest prefix of the name naming an
       already imported module, walking the remaining parts as attributes.
       The result must be a bean or a convertible type. Documents never cause
       a module to be imported.

    Parameters
    ----------
    converter : StringConverter, optional
        Converter whose registered types are known by name. Defaults to the
        shared converter.
    allow_import : bool, default True
        Whether unknown names may be looked up in already imported modules.
    """

    def __init__(self, converter: StringConverter | None = None, allow_import: bool = True) -> None:
        self._converter: StringConverter = converter if converter is not None else CONVERTER
        self._renames: dict[str, type] = {}
        self._allow_import: bool = allow_import

    # ========== ========== ========== ========== ========== protected methods
    def _find_loaded(self, name: str) -> type | None:

        parts = name.split('.')

        for index in range(len(parts) - 1, 0, -1):

            module_name = '.'.join(parts[:index])

            obj = sys.modules.get(module_name)

            if obj is None:
                continue

            try:
                for attr in parts[index:]:
                    obj = getattr(obj, attr)
            except AttributeError:
                return None

            return obj if isinstance(obj, type) else None

        return None

    # ========== ========== ========== ========== ========== public methods
    def rename(self, old_name: str, kind: type) -> None:
        """Resolve ``old_name`` to ``kind``, e.g. after a class was moved."""
        self._renames[old_name] = kind
        logger.debug("Registered type rename %s -> %s", old_name, get_full_qualified_name(kind))

    def resolve(self, name: str, base_module: str | None = None) -> type:
        """
        Resolve a type name.

        Parameters
        ----------
        name : str
            Fully qualified name, or relative name starting with ``.``.
        base_module : str, optional
            Module relative names are resolved against.

        Raises
        ------
        TypeResolutionError
            If the name cannot be resolved.
        """
        full_name = name

        if name.startswith('.'):

            if not base_module:
                raise TypeResolutionError(name, f"Relative type name '{name}' used without a root bean module")

            full_name = base_module + name

        kind = self._renames.get(full_name)

        if kind is None and full_name in Bean:
            kind = Bean[full_name]

        if kind is None:
            kind = self._converter.type_for_name(full_name)

        if kind is None and self._allow_import:
            kind = self._find_loaded(full_name)

            if kind is not None and not (issubclass(kind, Bean) or self._converter.is_convertible(kind)):
                raise TypeResolutionError(name, f"Type '{full_name}' is neither a bean nor a convertible type")

        if kind is None:
            raise TypeResolutionError(name)

        return kind

    def type_name(self, kind: Any, base_module: str | None = None, short: bool = True) -> str:
        """
        Wire name of a type.

        Bean types defined in ``base_module`` get the relative ``.QualName``
        form when ``short`` is set.
        """
        if short and base_module and isinstance(kind, type) and issubclass(kind, Bean) \
                and kind.__module__ == base_module:
            return f".{kind.__qualname__}"

        return get_full_qualified_name(kind)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def converter(self) -> StringConverter:
        return self._converter

    @property
    def renames(self) -> dict[str, type]:
        return {**self._renames}


RESOLVER = TypeResolver()
"""Shared resolver used by default settings."""


__all__ = [
    'TypeResolver',
    'RESOLVER',
]
