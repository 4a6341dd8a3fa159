from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass, field

from .aggregate import UNKNOWN_NAME, CostAggregator, Diagnostic, Statistic
from .dwarf.names import NameResolver
from .dwarf.ranges import RangeTable, decode_debug_ranges
from .dwarf.scanner import DebugInfoScanner
from .elf import ELFBinary
from .errors import InlinedError
from .utils import stream_or_path

log = logging.getLogger(name=__name__)

__all__ = ("Analysis", "AnalysisResult", "analyze_file", "analyze_files")


@dataclass
class AnalysisResult:
    """
    The outcome of analyzing one binary. If ``error`` is set, the analysis was aborted and ``stats`` is empty;
    otherwise ``stats`` holds the statistics of every inlined function that could be sized, keyed by name, and
    ``diagnostics`` lists the DIEs that were left out.
    """

    binary: str
    stats: dict[str, Statistic] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Analysis:
    """
    Inlining statistics for one ELF binary.

    .debug_ranges is decoded and every DIE is scanned before any name is resolved, since DIEs may refer to DIEs that
    come later in .debug_info.

    :param elf:             The binary to analyze.
    :param unresolved:      ``"bucket"`` to count inlined functions whose name cannot be resolved under
                            ``unknown_name``, or ``"drop"`` to leave them out.
    :param unknown_name:    Name for the bucket of unresolved functions.

    :ivar range_table:  The decoded .debug_ranges section
    :ivar stats:        Statistic per inlined function name
    :ivar diagnostics:  Per-DIE problems encountered
    """

    def __init__(self, elf: ELFBinary, unresolved: str = "bucket", unknown_name: str = UNKNOWN_NAME):
        self.elf = elf
        self.range_table: RangeTable | None = None
        self.stats: dict[str, Statistic] = {}
        self.diagnostics: list[Diagnostic] = []

        self._unresolved = unresolved
        self._unknown_name = unknown_name

    def run(self) -> dict[str, Statistic]:
        # fetch the DWARF info first: binaries without any have nothing to analyze, .debug_ranges or not
        dwarf = self.elf.dwarf

        log.info("parsing .debug_ranges...")
        self.range_table = decode_debug_ranges(self.elf.debug_ranges, self.elf.address_size, self.elf.little_endian)

        scan = DebugInfoScanner(dwarf).scan()

        aggregator = CostAggregator(
            self.range_table,
            NameResolver(scan.declarations),
            unresolved=self._unresolved,
            unknown_name=self._unknown_name,
        )
        self.stats = aggregator.aggregate(scan.sites).as_dict()
        self.diagnostics = aggregator.diagnostics
        return self.stats


def analyze_file(path, unresolved: str = "bucket", unknown_name: str = UNKNOWN_NAME) -> AnalysisResult:
    """
    Analyze one binary. Errors that stop the analysis are reported in the result instead of being raised, so that
    one broken file doesn't stop a batch.

    :param path:    Path to an ELF file, or a readable binary stream.
    """
    name = path if isinstance(path, str) else repr(path)
    log.info("analyzing %s...", name)
    try:
        with stream_or_path(path) as stream:
            analysis = Analysis(ELFBinary(stream, name), unresolved=unresolved, unknown_name=unknown_name)
            analysis.run()
    except InlinedError as e:
        log.error("couldn't analyze debug data for %s: %s", name, e)
        return AnalysisResult(name, error=str(e))
    except OSError as e:
        log.error("couldn't open %s: %s", name, e)
        return AnalysisResult(name, error=str(e))

    return AnalysisResult(name, stats=analysis.stats, diagnostics=analysis.diagnostics)


def analyze_files(paths, jobs: int = 1, **kwargs) -> list[AnalysisResult]:
    """
    Analyze several binaries, returning their results in the same order as ``paths``.

    :param jobs:    Number of worker processes. Binaries share nothing, so with more than one job each is analyzed in
                    a separate process.
    """
    paths = list(paths)
    if jobs <= 1 or len(paths) <= 1:
        return [analyze_file(path, **kwargs) for path in paths]

    with concurrent.futures.ProcessPoolExecutor(max_workers=jobs) as executor:
        futures = [executor.submit(analyze_file, path, **kwargs) for path in paths]
        return [future.result() for future in futures]
