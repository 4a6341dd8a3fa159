from __future__ import annotations

from collections.abc import Mapping

from inlined.errors import InlinedNameResolutionError

from .entries import FunctionDecl

__all__ = ("NameResolver",)


class NameResolver:
    """
    Names subprograms. Since it's C++ and DWARF, it's not just a simple matter of reading DW_AT_name: an out-of-line
    definition usually only carries DW_AT_specification, pointing at the declaration inside the class, which may
    itself point further.

    :param declarations:    The declaration table built by the scanner, keyed by DIE offset.
    """

    def __init__(self, declarations: Mapping[int, FunctionDecl]):
        self._declarations = declarations
        self._cache: dict[int, str] = {}

    def resolve(self, offset: int) -> str:
        """
        Follow the specification chain starting at ``offset`` to a name.

        :raises InlinedNameResolutionError: if the chain reaches an offset with no named declaration, or loops.
        """
        seen = set()
        current = offset
        while True:
            if current in self._cache:
                name = self._cache[current]
                break
            if current in seen:
                raise InlinedNameResolutionError(
                    current, "specification chain of subprogram %#x loops at %#x" % (offset, current)
                )
            decl = self._declarations.get(current, None)
            if decl is None:
                if current == offset:
                    raise InlinedNameResolutionError(current)
                raise InlinedNameResolutionError(
                    current, "could not find name or specification for subprogram %#x (via %#x)" % (current, offset)
                )
            seen.add(current)
            if decl.name is not None:
                name = decl.name
                break
            current = decl.specification

        for link in seen:
            self._cache[link] = name
        return name
