"""
Decoder for the DWARF 2-4 ``.debug_ranges`` section.

pyelftools only hands out the range list that a particular DIE points at. Here the whole section is needed up front,
reduced to the number of bytes each range list covers, so it is decoded by hand.

References:
    - DWARF v4, section 2.17.3 "Non-Contiguous Address Ranges"
"""

from __future__ import annotations

import io
import logging
import struct
from collections.abc import Mapping

from sortedcontainers import SortedDict

from inlined.errors import InlinedRangeDecodeError

log = logging.getLogger(name=__name__)

__all__ = ("RangeTable", "RangeTableDecoder", "decode_debug_ranges")


class RangeTable(Mapping):
    """
    A read-only mapping from the offset of a range list in .debug_ranges to the total number of bytes covered by the
    ranges of that list. Iteration is ordered by offset.
    """

    __slots__ = ("_spans",)

    def __init__(self, spans=None):
        self._spans = SortedDict(spans or {})

    def __getitem__(self, offset: int) -> int:
        return self._spans[offset]

    def __iter__(self):
        return iter(self._spans)

    def __len__(self):
        return len(self._spans)

    def __repr__(self):
        return f"<RangeTable with {len(self)} range lists>"

    @property
    def total_bytes(self) -> int:
        return sum(self._spans.values())


class RangeTableDecoder:
    """
    .debug_ranges is a flat sequence of (begin, end) pairs of target addresses. Each pair is one of:

    - a range list entry: the range [begin, end). begin may be 0, and the range may be empty if begin == end.
    - a base address selection entry: begin is the largest representable address (e.g. 0xffffffff for 32-bit
      targets) and end is the new base address for the entries that follow.
    - an end of list entry: begin == end == 0.

    A DIE with DW_AT_ranges refers to the offset of the first entry of its list.

    :param stream:          A readable binary stream positioned at the start of the section.
    :param address_size:    Size of a target address in bytes, either 4 or 8.
    :param little_endian:   Byte order of the target.
    """

    def __init__(self, stream, address_size: int, little_endian: bool = True):
        if address_size == 4:
            fmt = "I"
        elif address_size == 8:
            fmt = "Q"
        else:
            raise ValueError("Unsupported address size %d. Expect either 4 or 8." % address_size)

        self.stream = stream
        self.address_size = address_size
        self.little_endian = little_endian
        self._record = struct.Struct(("<" if little_endian else ">") + fmt * 2)
        self._base_address_selection = (1 << (8 * address_size)) - 1

    def decode(self) -> RangeTable:
        spans = {}
        current_offset = next_offset = 0

        while True:
            record = self.stream.read(self._record.size)
            if not record:
                break
            if len(record) != self._record.size:
                raise InlinedRangeDecodeError(
                    "Truncated range list entry at offset %#x: read %d bytes, expected %d"
                    % (next_offset, len(record), self._record.size)
                )
            record_offset = next_offset
            next_offset += len(record)

            begin, end = self._record.unpack(record)
            if begin == self._base_address_selection:
                # only the span of each range matters, so the new base address itself is not tracked
                continue
            if begin == 0 and end == 0:
                current_offset = next_offset
                continue
            if end < begin:
                raise InlinedRangeDecodeError(
                    "Invalid range [%#x, %#x) at offset %#x" % (begin, end, record_offset)
                )
            spans[current_offset] = spans.get(current_offset, 0) + (end - begin)

        table = RangeTable(spans)
        log.debug(
            "Decoded %d range lists covering %d bytes from %d bytes of .debug_ranges",
            len(table),
            table.total_bytes,
            next_offset,
        )
        return table


def decode_debug_ranges(data, address_size: int, little_endian: bool = True) -> RangeTable:
    """
    Decode a .debug_ranges section.

    :param data:            The section contents as bytes, a readable binary stream, or None if the binary has no
                            .debug_ranges section. In that case the table is empty.
    :param address_size:    Size of a target address in bytes, either 4 or 8.
    :param little_endian:   Byte order of the target.
    """
    if data is None:
        return RangeTable()
    if isinstance(data, (bytes, bytearray, memoryview)):
        data = io.BytesIO(data)
    return RangeTableDecoder(data, address_size, little_endian).decode()
