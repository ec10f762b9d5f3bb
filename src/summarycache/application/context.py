"""
Context for one analysis run.

The AnalysisContext is created at the start of a run and handed to the
driver and the CLI. It bundles the console, the option values, and the
statistics collected by the phases (load, reachability, persist).
"""

import collections

from summarycache.util.application.console import Console
from .options import SummaryOptions


class AnalysisContext(object):
    """
    Shared state of an analysis run.

    Attributes:
        console: Console object for structured output and phase timing
        options: SummaryOptions for this run
        stats: Statistics per phase (nested dict, phase name -> counters)
    """
    __slots__ = "console", "options", "stats"

    def __init__(self, console=None, options=None):
        """
        Args:
            console: Console for output. If None, a default console is created.
            options: SummaryOptions. If None, defaults are used (persistence off).
        """
        self.console = console if console is not None else Console()
        self.options = options if options is not None else SummaryOptions()
        self.stats = collections.defaultdict(dict)

    def record(self, phase, stats):
        """Store a phase's statistics object (anything with asDict())."""
        self.stats[phase].update(stats.asDict())
