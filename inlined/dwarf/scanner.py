from __future__ import annotations

import logging

from elftools.common.exceptions import DWARFError, ELFError
from elftools.dwarf.descriptions import describe_form_class

from inlined.errors import InlinedDebugInfoError
from inlined.utils import maybedecode

from .entries import FunctionDecl, InlineSite

log = logging.getLogger(name=__name__)

__all__ = ("DebugInfoScanner", "ScanResult")

PROGRESS_INTERVAL = 1000000

# reference forms whose value is relative to the start of the containing CU
CU_RELATIVE_REF_FORMS = frozenset(
    ("DW_FORM_ref1", "DW_FORM_ref2", "DW_FORM_ref4", "DW_FORM_ref8", "DW_FORM_ref_udata")
)

# in order of preference. DW_AT_MIPS_linkage_name is what GCC emitted before DWARF 4 standardized the attribute
LINKAGE_NAME_ATTRS = ("DW_AT_linkage_name", "DW_AT_MIPS_linkage_name")


class ScanResult:
    """
    Everything the scanner collected from one binary.

    :ivar declarations: DW_TAG_subprogram DIEs that can be named, keyed by DIE offset
    :ivar sites:        DW_TAG_inlined_subroutine DIEs in stream order
    :ivar die_count:    Number of DIEs visited
    """

    def __init__(self):
        self.declarations: dict[int, FunctionDecl] = {}
        self.sites: list[InlineSite] = []
        self.die_count = 0


class DebugInfoScanner:
    """
    Single linear pass over every DIE of every compilation unit.

    DIEs may refer to DIEs with a greater offset, so nothing is resolved here. The scanner only sorts subprograms into
    a declaration table and collects inlined subroutines for the aggregation pass.

    :param dwarf:   The DWARF info object from pyelftools, or anything with a compatible ``iter_CUs``.
    """

    def __init__(self, dwarf):
        self._dwarf = dwarf

    def scan(self) -> ScanResult:
        result = ScanResult()
        try:
            for cu in self._dwarf.iter_CUs():
                version = cu["version"]
                for die in cu.iter_DIEs():
                    if result.die_count % PROGRESS_INTERVAL == 0:
                        log.info("read %d DIEs...", result.die_count)
                    result.die_count += 1

                    if die.tag == "DW_TAG_subprogram":
                        decl = self._load_subprogram(die)
                        if decl is not None:
                            result.declarations[decl.offset] = decl
                    elif die.tag == "DW_TAG_inlined_subroutine":
                        result.sites.append(self._load_inlined_subroutine(die, version))
        except (ELFError, DWARFError, KeyError, ValueError, IndexError) as e:
            # pyelftools is not very resilient, and a broken DIE stream leaves nothing to trust after it
            raise InlinedDebugInfoError("Failed to decode DIE #%d: %s" % (result.die_count, e)) from e

        log.info(
            "read %d DIEs: %d named subprograms, %d inlined subroutines",
            result.die_count,
            len(result.declarations),
            len(result.sites),
        )
        return result

    @staticmethod
    def _load_subprogram(die) -> FunctionDecl | None:
        attrs = die.attributes
        for attr_name in LINKAGE_NAME_ATTRS:
            if attr_name in attrs:
                return FunctionDecl(die.offset, name=maybedecode(attrs[attr_name].value))

        spec = reference_offset(die, "DW_AT_specification")
        if spec is not None:
            return FunctionDecl(die.offset, specification=spec)

        if "DW_AT_name" in attrs:
            return FunctionDecl(die.offset, name=maybedecode(attrs["DW_AT_name"].value))
        return None

    @staticmethod
    def _load_inlined_subroutine(die, version: int) -> InlineSite:
        site = InlineSite(die.offset, origin=reference_offset(die, "DW_AT_abstract_origin"))
        attrs = die.attributes

        # A DIE with associated machine code may have:
        # - DW_AT_low_pc alone for a single address (not handled)
        # - DW_AT_low_pc and DW_AT_high_pc for a single contiguous range of addresses
        # - DW_AT_ranges for a non-contiguous range of addresses
        # DWARF v4 section 2.17 lets DW_AT_high_pc be of class address (an absolute address) or class constant (an
        # offset from DW_AT_low_pc, which is exactly the size).
        if "DW_AT_high_pc" in attrs:
            highpc_attr = attrs["DW_AT_high_pc"]
            highpc_attr_class = describe_form_class(highpc_attr.form)
            if highpc_attr_class == "constant":
                site.size = highpc_attr.value
                return site
            if highpc_attr_class == "address" and "DW_AT_low_pc" in attrs:
                site.size = highpc_attr.value - attrs["DW_AT_low_pc"].value
                return site

        if "DW_AT_ranges" in attrs:
            ranges_attr = attrs["DW_AT_ranges"]
            if version >= 5 or ranges_attr.form == "DW_FORM_rnglistx":
                site.rnglists = True
            else:
                site.ranges = ranges_attr.value
        return site


def reference_offset(die, attr_name: str) -> int | None:
    """
    Get the absolute .debug_info offset of the DIE that a reference attribute points at, or None if the attribute is
    absent or refers outside of this file's .debug_info.
    """
    attr = die.attributes.get(attr_name, None)
    if attr is None:
        return None
    if attr.form in CU_RELATIVE_REF_FORMS:
        return attr.value + die.cu.cu_offset
    if attr.form == "DW_FORM_ref_addr":
        return attr.value
    log.debug("DIE %#x: %s has unsupported form %s", die.offset, attr_name, attr.form)
    return None
