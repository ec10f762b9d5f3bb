"""
Console output and timing for analysis phases.

Phases such as "load summaries", "reachability" and "persist summaries" are
opened as nested scopes; each scope reports its elapsed time when it ends.
"""

import sys
import threading
import time

from summarycache.util.io import formatting


class Scope(object):
    """A timed node in the tree of analysis phases.

    Attributes:
        parent: Parent scope, or None for the root scope.
        name: Name of this scope.
    """

    def __init__(self, parent, name):
        self.parent = parent
        self.name = name
        self._start = None
        self._end = None

    def begin(self):
        self._start = time.perf_counter()

    def end(self):
        self._end = time.perf_counter()

    @property
    def elapsed(self):
        """Seconds between begin() and end()."""
        return self._end - self._start

    def path(self):
        """Tuple of scope names from the root (excluded) to this scope."""
        if self.parent is None:
            return ()
        else:
            return self.parent.path() + (self.name,)

    def child(self, name):
        return Scope(self, name)


class ConsoleScopeManager(object):
    """Context manager returned by Console.scope().

    Example:
        with console.scope("load summaries"):
            storage.loadData()
    """

    __slots__ = "console", "name"

    def __init__(self, console, name):
        self.console = console
        self.name = name

    def __enter__(self):
        self.console.begin(self.name)

    def __exit__(self, type, value, tb):
        self.console.end()


class Console(object):
    """Hierarchical console output with timing and scoping.

    Output is serialized with a lock so worker threads may report through the
    same console as the driver.

    Attributes:
        out: Output stream (default: sys.stdout).
        root: Root scope of the hierarchy.
        current: Currently active scope.
        verbose: If True, verbose_output() is written as well.
    """

    def __init__(self, out=None, verbose=False):
        if out is None:
            out = sys.stdout
        self.out = out

        self.root = Scope(None, "root")
        self.current = self.root

        self.verbose = verbose
        self._lock = threading.Lock()

    def path(self):
        """Formatted path of the current scope, e.g. "[ analyze | persist ]"."""
        return "[ %s ]" % " | ".join(self.current.path())

    def begin(self, name):
        scope = self.current.child(name)
        scope.begin()
        self.current = scope

        self.output("begin %s" % self.path(), 0)

    def end(self):
        self.current.end()
        self.output(
            "end   %s %s" % (self.path(), formatting.elapsedTime(self.current.elapsed)),
            0,
        )
        self.current = self.current.parent

    def scope(self, name):
        return ConsoleScopeManager(self, name)

    def output(self, s, tabs=1):
        """Write one line, indented by the given number of tabs."""
        with self._lock:
            if tabs:
                self.out.write("\t" * tabs)
            self.out.write(s)
            self.out.write("\n")

    def verbose_output(self, s, tabs=1):
        if self.verbose:
            self.output(s, tabs)
