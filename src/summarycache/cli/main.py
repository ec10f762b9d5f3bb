"""Main CLI dispatcher for summarycache.

Dispatches to the ``analyze`` and ``dump`` sub-commands.
"""

import argparse
import sys

from summarycache import __version__
from .analyze import add_analyze_parser
from .dump import add_dump_parser


def build_parser():
    parser = argparse.ArgumentParser(
        description="summarycache - Cross-run cache of whole-program analysis summaries",
        prog="summarycache",
    )
    parser.add_argument("--version", action="version", version="summarycache %s" % __version__)

    subparsers = parser.add_subparsers(
        dest="command", help="Available commands", required=True
    )
    add_analyze_parser(subparsers)
    add_dump_parser(subparsers)
    return parser


def main(argv=None):
    """Main entry point for the summarycache CLI.

    Returns:
        int: Exit code (0 for success, non-zero for error).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
