from __future__ import annotations

import json
from collections.abc import Mapping

from .aggregate import Statistic

__all__ = ("SORT_KEYS", "FORMATS", "sort_results", "format_report")

# all orderings are descending
SORT_KEYS = {
    "count": lambda stat: stat.count,
    "instance-bytes": lambda stat: stat.instance_bytes,
    "total-bytes": lambda stat: stat.bytes,
}

FORMATS = ("text", "json")

TEXT_HEADER = "     Count      Bytes   Name\n  --------  ---------   ---------------------------------\n"


def sort_results(stats: Mapping[str, Statistic], ordering: str = "total-bytes", limit: int = 0):
    """
    Order the statistics of a binary for display.

    :param stats:       Statistic per function name.
    :param ordering:    One of ``SORT_KEYS``. Ties are broken by name.
    :param limit:       Keep only that many entries. 0 keeps everything.
    :return:            A list of (name, Statistic) tuples.
    """
    try:
        sort_key = SORT_KEYS[ordering]
    except KeyError:
        raise ValueError("invalid sort order %r, expected one of %s" % (ordering, ", ".join(SORT_KEYS))) from None
    if limit < 0:
        raise ValueError("limit must be non-negative")

    results = sorted(stats.items(), key=lambda item: (-sort_key(item[1]), item[0]))
    if limit:
        results = results[:limit]
    return results


def format_report(
    stats: Mapping[str, Statistic], ordering: str = "total-bytes", fmt: str = "text", limit: int = 100
) -> str:
    if fmt not in FORMATS:
        raise ValueError("invalid format %r, expected one of %s" % (fmt, ", ".join(FORMATS)))

    results = sort_results(stats, ordering, limit)
    if fmt == "json":
        rows = [{"Name": name, "Count": stat.count, "Bytes": stat.bytes} for name, stat in results]
        return json.dumps(rows, separators=(",", ":")) + "\n"

    lines = ["%10d %10d   %s\n" % (stat.count, stat.bytes, name) for name, stat in results]
    return TEXT_HEADER + "".join(lines)
