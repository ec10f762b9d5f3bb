"""
Options recognized by the summary cache.

- ``summaryFile``: path of the summary container. Empty disables persistence;
  both loading and persisting become no-ops.
- ``summaryFilter``: regular expression matched against the full qualified
  name of a unit (``module.Class.method`` or ``module.function``). Only
  matching units are persisted.
- ``workers``: number of analysis worker threads.
"""

import re

from .errors import OptionError

# The conventional entry point of a Python program: main() of a top-level module.
DEFAULT_SUMMARY_FILTER = r"\w+\.main"
DEFAULT_WORKERS = 4


class SummaryOptions(object):
    """
    Option values for one analysis run.

    Attributes:
        summaryFile: Path of the summary container, "" when persistence is off
        summaryFilter: Source text of the unit-name filter
        workers: Number of worker threads
    """
    __slots__ = "summaryFile", "summaryFilter", "workers", "_pattern"

    def __init__(self, summaryFile="", summaryFilter=DEFAULT_SUMMARY_FILTER,
                 workers=DEFAULT_WORKERS):
        """
        Args:
            summaryFile: Path of the summary container (None or "" disables it)
            summaryFilter: Regular expression for eligible unit names
            workers: Number of worker threads, at least 1

        Raises:
            OptionError: If summaryFilter does not compile or workers < 1
        """
        self.summaryFile = str(summaryFile) if summaryFile else ""
        self.summaryFilter = summaryFilter

        try:
            self._pattern = re.compile(summaryFilter)
        except re.error as e:
            raise OptionError("Invalid summary filter %r: %s" % (summaryFilter, e))

        if workers < 1:
            raise OptionError("workers must be at least 1, got %d" % workers)
        self.workers = workers

    @property
    def persistenceEnabled(self):
        return bool(self.summaryFile)

    @property
    def pattern(self):
        """Compiled summaryFilter."""
        return self._pattern

    @classmethod
    def fromArgs(cls, args):
        """
        Build options from parsed command line arguments.

        Missing attributes fall back to the defaults, so any argparse
        namespace may be passed.
        """
        summaryFilter = getattr(args, "summary_filter", None)
        workers = getattr(args, "workers", None)
        return cls(
            summaryFile=getattr(args, "summary_file", None) or "",
            summaryFilter=DEFAULT_SUMMARY_FILTER if summaryFilter is None else summaryFilter,
            workers=DEFAULT_WORKERS if workers is None else workers,
        )

    def __repr__(self):
        return "SummaryOptions(summaryFile=%r, summaryFilter=%r, workers=%d)" % (
            self.summaryFile,
            self.summaryFilter,
            self.workers,
        )


def addSummaryArguments(parser):
    """Add the summary cache options to an argparse parser."""
    parser.add_argument(
        "--summary-file",
        default="",
        help="Summary storage file (default: persistence disabled)",
    )
    parser.add_argument(
        "--summary-filter",
        default=DEFAULT_SUMMARY_FILTER,
        help="Regular expression selecting the units whose summaries are persisted "
        "(default: %(default)s)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help="Number of analysis worker threads (default: %(default)s)",
    )
