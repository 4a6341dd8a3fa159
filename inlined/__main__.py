from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .aggregate import UNKNOWN_NAME
from .analysis import analyze_files
from .report import FORMATS, SORT_KEYS, format_report


def build_parser():
    parser = argparse.ArgumentParser(
        prog="inlined",
        description="Show how many call sites and how much code each function contributes through inlining, "
        "based on the DWARF information of ELF binaries.",
    )
    parser.add_argument("files", nargs="+", metavar="FILE", help="ELF binaries with DWARF debug information")
    parser.add_argument("--format", choices=FORMATS, default="text", help="Output format. (default: %(default)s)")
    parser.add_argument(
        "--limit", type=int, default=100, help="Number of entries to show. 0 = no limit. (default: %(default)s)"
    )
    parser.add_argument("--sort", choices=list(SORT_KEYS), default="total-bytes", help="Sorting order. (default: %(default)s)")
    parser.add_argument(
        "--drop-unresolved",
        action="store_true",
        help=f"Leave out inlined functions whose name cannot be resolved, instead of counting them as {UNKNOWN_NAME}.",
    )
    parser.add_argument("-j", "--jobs", type=int, default=1, help="Number of binaries to analyze in parallel.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug messages.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.limit < 0:
        parser.error("--limit must be non-negative")
    if args.jobs < 1:
        parser.error("--jobs must be at least 1")

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    results = analyze_files(
        args.files, jobs=args.jobs, unresolved="drop" if args.drop_unresolved else "bucket"
    )
    status = 0
    for result in results:
        if not result.ok:
            status = 1
            continue
        sys.stdout.write(format_report(result.stats, ordering=args.sort, fmt=args.format, limit=args.limit))
    return status


if __name__ == "__main__":
    sys.exit(main())
