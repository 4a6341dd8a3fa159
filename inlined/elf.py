from __future__ import annotations

import logging
import os

from elftools.common.exceptions import DWARFError, ELFError
from elftools.dwarf.dwarfinfo import DWARFInfo
from elftools.elf import elffile

from .errors import InlinedDebugInfoError, InlinedInvalidBinaryError

log = logging.getLogger(name=__name__)

__all__ = ("ELFBinary",)


class ELFBinary:
    """
    An ELF object opened for reading its debug information. Uses pyelftools for everything but .debug_ranges.

    :param stream:  A readable, seekable binary stream holding the ELF file.
    :param binary:  The path the stream was opened from, for messages.
    """

    def __init__(self, stream, binary=None):
        self._binary_stream = stream
        self.binary = binary
        self.binary_basename = os.path.basename(binary) if binary else repr(stream)
        if not self.check_magic_compatibility(stream):
            raise InlinedInvalidBinaryError("%s is not an ELF file" % self.binary_basename)
        try:
            self._reader = elffile.ELFFile(stream)
            # pyelftools reads the section headers lazily, so a truncated file only fails here
            self.address_size = self._reader.elfclass // 8
            self.little_endian = self._reader.little_endian
            self.arch = self._reader.get_machine_arch()
            self.has_dwarf_info = bool(self._reader.has_dwarf_info())
        except (ELFError, DWARFError, ValueError) as e:
            raise InlinedInvalidBinaryError("pyelftools couldn't load %s: %s" % (self.binary_basename, e)) from e
        self._dwarf = None

    @classmethod
    def check_magic_compatibility(cls, stream):
        stream.seek(0)
        identstring = stream.read(0x10)
        stream.seek(0)
        return identstring.startswith(b"\x7fELF")

    @property
    def dwarf(self) -> DWARFInfo:
        """
        The DWARF info object from pyelftools, with the debug sections relocated if this is an object file.
        """
        if self._dwarf is None:
            if not self.has_dwarf_info:
                raise InlinedDebugInfoError("%s has no DWARF information" % self.binary_basename)
            try:
                self._dwarf = self._reader.get_dwarf_info()
            except (ELFError, DWARFError, KeyError, ValueError) as e:
                raise InlinedDebugInfoError(
                    "An exception occurred in pyelftools when loading the DWARF information for %s: %s"
                    % (self.binary_basename, e)
                ) from e
        return self._dwarf

    @property
    def debug_ranges(self):
        """
        A stream over the contents of .debug_ranges, or None if the binary doesn't have that section.
        """
        section = getattr(self.dwarf, "debug_ranges_sec", None)
        if section is None:
            return None
        try:
            section.stream.seek(0)
        except (ELFError, ValueError) as e:
            raise InlinedDebugInfoError("Failed to read .debug_ranges of %s: %s" % (self.binary_basename, e)) from e
        return section.stream

    def __repr__(self):
        return f"<ELFBinary {self.binary_basename} ({self.arch}, {self.address_size * 8}-bit)>"
