from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .dwarf.entries import InlineSite
from .dwarf.names import NameResolver
from .errors import InlinedNameResolutionError

log = logging.getLogger(name=__name__)

__all__ = ("Statistic", "StatisticTable", "Diagnostic", "CostAggregator", "UNKNOWN_NAME")

UNKNOWN_NAME = "<unknown>"


@dataclass(frozen=True)
class Statistic:
    """
    How often a function was inlined, and how many bytes of code those inlined copies take up in total.
    """

    count: int = 0
    bytes: int = 0

    def __add__(self, other):
        if not isinstance(other, Statistic):
            return NotImplemented
        return Statistic(self.count + other.count, self.bytes + other.bytes)

    @property
    def instance_bytes(self) -> int:
        return self.bytes // self.count if self.count else 0


class StatisticTable:
    """
    An accumulator of Statistics keyed by DIE offset or by function name. Each analysis owns its tables; combining
    two tables never modifies either of them.
    """

    def __init__(self, stats: Mapping | None = None):
        self._stats = dict(stats or {})

    def add(self, key, nbytes: int, count: int = 1):
        self._stats[key] = self._stats.get(key, Statistic()) + Statistic(count, nbytes)

    def add_statistic(self, key, stat: Statistic):
        self._stats[key] = self._stats.get(key, Statistic()) + stat

    def merge(self, other: StatisticTable) -> StatisticTable:
        merged = StatisticTable(self._stats)
        for key, stat in other.items():
            merged.add_statistic(key, stat)
        return merged

    def items(self):
        return self._stats.items()

    def as_dict(self) -> dict:
        return dict(self._stats)

    def __getitem__(self, key) -> Statistic:
        return self._stats[key]

    def __contains__(self, key):
        return key in self._stats

    def __iter__(self):
        return iter(self._stats)

    def __len__(self):
        return len(self._stats)

    def __eq__(self, other):
        if not isinstance(other, StatisticTable):
            return NotImplemented
        return self._stats == other._stats

    def __repr__(self):
        return f"<StatisticTable with {len(self)} entries>"


@dataclass(frozen=True)
class Diagnostic:
    """
    A problem with a single DIE that caused it to be left out of the statistics.
    """

    offset: int | None
    message: str

    def __str__(self):
        if self.offset is None:
            return self.message
        return f"DIE {self.offset:#x}: {self.message}"


class CostAggregator:
    """
    Works out the size of every inlined subroutine and adds it up per inlined function.

    Statistics are first gathered per DW_AT_abstract_origin, and only then resolved to names, so that each origin is
    resolved once no matter how many times it was inlined.

    :param range_table:     The decoded .debug_ranges section.
    :param resolver:        Names the abstract origins.
    :param unresolved:      What to do with origins that cannot be named: ``"bucket"`` to count them under
                            ``unknown_name``, ``"drop"`` to leave them out.
    :param unknown_name:    The name to count unresolved origins under.
    """

    UNRESOLVED_POLICIES = ("bucket", "drop")

    def __init__(
        self,
        range_table: Mapping[int, int],
        resolver: NameResolver,
        unresolved: str = "bucket",
        unknown_name: str = UNKNOWN_NAME,
    ):
        if unresolved not in self.UNRESOLVED_POLICIES:
            raise ValueError("Unsupported unresolved policy %r. Expect one of %s." % (unresolved, self.UNRESOLVED_POLICIES))
        self._range_table = range_table
        self._resolver = resolver
        self._unresolved = unresolved
        self._unknown_name = unknown_name
        self.diagnostics: list[Diagnostic] = []

    def _report(self, offset, message):
        diagnostic = Diagnostic(offset, message)
        log.warning("%s", diagnostic)
        self.diagnostics.append(diagnostic)

    def bytes_for_site(self, site: InlineSite) -> int | None:
        """
        Get the size of the code for one inlined subroutine, or None (after recording a diagnostic) if it has none.
        """
        if site.size is not None:
            if site.size < 0:
                self._report(site.offset, "negative size %d" % site.size)
                return None
            return site.size

        if site.ranges is not None:
            nbytes = self._range_table.get(site.ranges, None)
            if nbytes is None:
                self._report(site.offset, "couldn't find range list at .debug_ranges offset %#x" % site.ranges)
            return nbytes

        if site.rnglists:
            self._report(site.offset, "range lists in .debug_rnglists are not supported")
        else:
            self._report(site.offset, "no valid high pc or ranges")
        return None

    def aggregate_origins(self, sites: Iterable[InlineSite]) -> StatisticTable:
        origin_stats = StatisticTable()
        for site in sites:
            if site.origin is None:
                self._report(site.offset, "missing abstract origin")
                continue
            nbytes = self.bytes_for_site(site)
            if nbytes is None:
                continue
            origin_stats.add(site.origin, nbytes)
        return origin_stats

    def resolve_names(self, origin_stats: StatisticTable) -> StatisticTable:
        log.info("resolving names for %d inlined functions", len(origin_stats))
        name_stats = StatisticTable()
        for origin, stat in origin_stats.items():
            try:
                name = self._resolver.resolve(origin)
            except InlinedNameResolutionError as e:
                self._report(origin, "couldn't extract name: %s" % e)
                if self._unresolved == "drop":
                    continue
                name = self._unknown_name
            name_stats.add_statistic(name, stat)
        return name_stats

    def aggregate(self, sites: Iterable[InlineSite]) -> StatisticTable:
        return self.resolve_names(self.aggregate_origins(sites))
