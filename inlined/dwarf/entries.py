from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class FunctionDecl:
    """
    A DW_TAG_subprogram DIE, reduced to what is needed to name it. Exactly one of ``name`` and ``specification`` is
    set: either the DIE carries its own name, or it points at the DIE that does.
    """

    offset: int
    name: str | None = None
    specification: int | None = None


@dataclass(eq=False)
class InlineSite:
    """
    A DW_TAG_inlined_subroutine DIE: one place where the function at ``origin`` was inlined.

    The size of the inlined code comes from one of:

    - ``size``, derived from DW_AT_high_pc (and DW_AT_low_pc when high_pc is an address);
    - ``ranges``, an offset into .debug_ranges from DW_AT_ranges;
    - nothing, if ``rnglists`` is set, because DW_AT_ranges points into .debug_rnglists.
    """

    offset: int
    origin: int | None = None
    size: int | None = None
    ranges: int | None = None
    rnglists: bool = False
