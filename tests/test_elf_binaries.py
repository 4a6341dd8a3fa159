# pylint:disable=missing-class-docstring
from __future__ import annotations

import os
from unittest import TestCase, main

import pytest

import inlined
from inlined.aggregate import Statistic
from inlined.analysis import Analysis, analyze_file, analyze_files
from inlined.elf import ELFBinary
from inlined.errors import InlinedInvalidBinaryError

TESTS_BASE = os.path.join(os.path.dirname(os.path.realpath(__file__)), "binaries")

# g++ -O2 -gdwarf-4 build of binaries/inline_sample.cpp, x86_64
INLINE_SAMPLE = os.path.join(TESTS_BASE, "inline_sample")


def _truncated_copy(directory, length=3000):
    path = os.path.join(directory, "inline_sample.truncated")
    with open(INLINE_SAMPLE, "rb") as src, open(path, "wb") as dst:
        dst.write(src.read(length))
    return path


class TestInlineSample(TestCase):
    def test_elf_properties(self):
        with open(INLINE_SAMPLE, "rb") as f:
            elf = ELFBinary(f, INLINE_SAMPLE)
            assert elf.address_size == 8
            assert elf.little_endian
            assert elf.has_dwarf_info
            assert elf.debug_ranges is not None
            assert "inline_sample" in repr(elf)

    def test_range_table(self):
        with open(INLINE_SAMPLE, "rb") as f:
            analysis = Analysis(ELFBinary(f, INLINE_SAMPLE))
            analysis.run()
        assert dict(analysis.range_table) == {0x0: 137, 0x50: 18, 0x80: 10, 0xB0: 15, 0xF0: 5, 0x120: 172}

    def test_inlined_functions(self):
        result = analyze_file(INLINE_SAMPLE)
        assert result.ok, result.error
        # Counter::add is named through DW_AT_specification; clamp only has DW_AT_name
        assert result.stats == {
            "_ZN7Counter3addEi": Statistic(4, 18 + 5 + 15 + 5),
            "clamp": Statistic(2, 10 + 17),
        }
        assert result.diagnostics == []

    def test_report(self):
        result = analyze_file(INLINE_SAMPLE)
        text = inlined.format_report(result.stats, ordering="count")
        assert text.splitlines()[2:] == [
            "         4         43   _ZN7Counter3addEi",
            "         2         27   clamp",
        ]


def test_truncated_binary(tmp_path):
    truncated = _truncated_copy(str(tmp_path))
    with open(truncated, "rb") as f, pytest.raises(InlinedInvalidBinaryError):
        ELFBinary(f, truncated)


def test_truncated_binary_does_not_stop_batch(tmp_path):
    truncated = _truncated_copy(str(tmp_path))
    results = analyze_files([truncated, INLINE_SAMPLE])
    assert [result.ok for result in results] == [False, True]
    assert "pyelftools couldn't load" in results[0].error
    assert results[1].stats["clamp"] == Statistic(2, 27)


if __name__ == "__main__":
    main()
