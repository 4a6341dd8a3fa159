"""
inlined measures what compiler inlining costs. It reads the DWARF information of an ELF binary, finds every inlined
subroutine, and adds up per inlined function how many times it was inlined and how many bytes of code that produced.

The primary interface is ``analyze_file``, or the ``inlined`` command.
"""

__version__ = "0.1.0"

from .aggregate import UNKNOWN_NAME, CostAggregator, Diagnostic, Statistic, StatisticTable
from .analysis import Analysis, AnalysisResult, analyze_file, analyze_files
from .dwarf import (
    DebugInfoScanner,
    FunctionDecl,
    InlineSite,
    NameResolver,
    RangeTable,
    RangeTableDecoder,
    ScanResult,
    decode_debug_ranges,
)
from .elf import ELFBinary
from .errors import (
    InlinedDebugInfoError,
    InlinedError,
    InlinedFileNotFoundError,
    InlinedInvalidBinaryError,
    InlinedNameResolutionError,
    InlinedRangeDecodeError,
)
from .report import format_report, sort_results

__all__ = [
    "UNKNOWN_NAME",
    "CostAggregator",
    "Diagnostic",
    "Statistic",
    "StatisticTable",
    "Analysis",
    "AnalysisResult",
    "analyze_file",
    "analyze_files",
    "DebugInfoScanner",
    "FunctionDecl",
    "InlineSite",
    "NameResolver",
    "RangeTable",
    "RangeTableDecoder",
    "ScanResult",
    "decode_debug_ranges",
    "ELFBinary",
    "InlinedDebugInfoError",
    "InlinedError",
    "InlinedFileNotFoundError",
    "InlinedInvalidBinaryError",
    "InlinedNameResolutionError",
    "InlinedRangeDecodeError",
    "format_report",
    "sort_results",
]
