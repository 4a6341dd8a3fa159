# pylint:disable=missing-class-docstring
from __future__ import annotations

import io
import os
from unittest import TestCase, main

import inlined
from inlined.aggregate import UNKNOWN_NAME, Statistic
from inlined.analysis import Analysis, analyze_file, analyze_files
from inlined.errors import InlinedInvalidBinaryError, InlinedRangeDecodeError

from dwarf_stubs import StubCU, StubDWARF, StubELF, pack_ranges


def _cpp_binary():
    """
    A class method A::get() inlined three times, a free function inlined once, and one inlined subroutine whose origin
    is missing from .debug_info.
    """
    cu = StubCU(cu_offset=0)
    cu.inlined(0x30, origin=0x90, size=12)
    cu.inlined(0x40, origin=0x90, ranges=0x20)
    cu.inlined(0x50, origin=0xA0, ranges=0x0)
    cu.inlined(0x60, origin=0x80, size=4)
    cu.inlined(0x70, origin=0x400, size=2)
    cu.subprogram(0x80, linkage_name="_ZN1A3getEv")
    cu.subprogram(0x90, specification=0x80)
    cu.subprogram(0xA0, name="helper")
    ranges = pack_ranges([(0x10, 0x18), (0, 0), (0x100, 0x104), (0x200, 0x206), (0, 0)], address_size=8)
    return StubELF(StubDWARF(cu), debug_ranges=ranges, address_size=8)


class TestAnalysis(TestCase):
    def test_run(self):
        analysis = Analysis(_cpp_binary())
        stats = analysis.run()
        assert stats == {
            "_ZN1A3getEv": Statistic(3, 12 + 10 + 4),
            "helper": Statistic(1, 8),
            UNKNOWN_NAME: Statistic(1, 2),
        }
        assert dict(analysis.range_table) == {0: 8, 32: 10}
        assert [d.offset for d in analysis.diagnostics] == [0x400]

    def test_drop_unresolved(self):
        stats = Analysis(_cpp_binary(), unresolved="drop").run()
        assert UNKNOWN_NAME not in stats
        assert stats["helper"] == Statistic(1, 8)

    def test_missing_debug_ranges(self):
        cu = StubCU()
        cu.subprogram(0x10, name="f")
        cu.inlined(0x20, origin=0x10, size=3)
        cu.inlined(0x30, origin=0x10, ranges=0x0)
        analysis = Analysis(StubELF(StubDWARF(cu), debug_ranges=None))
        assert analysis.run() == {"f": Statistic(1, 3)}
        assert len(analysis.range_table) == 0
        assert [d.offset for d in analysis.diagnostics] == [0x30]

    def test_truncated_debug_ranges_is_fatal(self):
        cu = StubCU()
        elf = StubELF(StubDWARF(cu), debug_ranges=pack_ranges([(1, 2)], address_size=4)[:6], address_size=4)
        with self.assertRaises(InlinedRangeDecodeError):
            Analysis(elf).run()


class TestAnalyzeFile(TestCase):
    def test_not_an_elf(self):
        result = analyze_file(io.BytesIO(b"MZ\x90\x00" + b"\x00" * 60))
        assert not result.ok
        assert "not an ELF" in result.error
        assert result.stats == {}

    def test_missing_file(self):
        result = analyze_file(os.path.join(os.path.dirname(__file__), "does-not-exist"))
        assert not result.ok
        assert "not a valid path" in result.error

    def test_elf_binary_rejects_garbage(self):
        with self.assertRaises(InlinedInvalidBinaryError):
            inlined.ELFBinary(io.BytesIO(b"not an elf file at all"))

    def test_batch_in_parallel(self):
        base = os.path.dirname(__file__)
        paths = [os.path.join(base, "missing-%d" % i) for i in range(3)]
        results = analyze_files(paths, jobs=2)
        assert [result.binary for result in results] == paths
        assert not any(result.ok for result in results)


def test_batch_isolates_failures(monkeypatch):
    good = _cpp_binary()
    original = inlined.analysis.ELFBinary

    def fake_elf(stream, binary=None):
        if stream.read(4) == b"GOOD":
            return good
        return original(stream, binary)

    monkeypatch.setattr(inlined.analysis, "ELFBinary", fake_elf)
    results = analyze_files([io.BytesIO(b"BAD!"), io.BytesIO(b"GOOD"), io.BytesIO(b"BAD!")])

    assert [result.ok for result in results] == [False, True, False]
    assert results[1].stats["helper"] == Statistic(1, 8)
    assert [d.offset for d in results[1].diagnostics] == [0x400]


if __name__ == "__main__":
    main()
