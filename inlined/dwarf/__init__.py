from .entries import FunctionDecl, InlineSite
from .names import NameResolver
from .ranges import RangeTable, RangeTableDecoder, decode_debug_ranges
from .scanner import DebugInfoScanner, ScanResult

__all__ = (
    "FunctionDecl",
    "InlineSite",
    "NameResolver",
    "RangeTable",
    "RangeTableDecoder",
    "decode_debug_ranges",
    "DebugInfoScanner",
    "ScanResult",
)
