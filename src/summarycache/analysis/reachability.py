"""Summary-based reachability analysis.

Starting from entry points, every reachable unit's summary is requested from
the summary storage and the units it invokes, directly or through dispatch,
become reachable in turn. Units are processed as tasks on the storage's
executor, so summaries are requested from several threads at once.
"""

import logging
import threading

LOG = logging.getLogger(__name__)


def graphReconstructor(invalidator):
    """Reconstruction callable for SummaryStorage.

    Rebuilds a unit's parsed graph after its summary was reused. A unit whose
    graph can no longer be built is reported to the invalidator, so that its
    summary is not persisted again.
    """
    def reconstructGraph(unit):
        if unit.ensureGraphParsed() is None:
            LOG.warning("Cannot rebuild the graph of %s, its summary will not be persisted", unit)
            invalidator.invalidate(unit)
    return reconstructGraph


class ReachabilityAnalysis(object):
    """Worklist analysis over unit summaries.

    Attributes:
        summaries: SummaryStorage answering summary requests
        executor: TaskExecutor the units are processed on
        reachableUnits: Units found reachable
        instantiatedTypes: Types instantiated by reachable units
        accessedTypes: Types accessed by reachable units
        readFields: Fields read by reachable units
        writtenFields: Fields written by reachable units
        invocations: Dictionary mapping a reachable unit to the units it invokes
    """

    def __init__(self, summaries):
        self.summaries = summaries
        self.executor = summaries.executor

        self.reachableUnits = set()
        self.instantiatedTypes = set()
        self.accessedTypes = set()
        self.readFields = set()
        self.writtenFields = set()
        self.invocations = {}

        self._lock = threading.Lock()

    def run(self, entryPoints):
        """Analyze everything reachable from entryPoints and wait for it.

        Args:
            entryPoints: Iterable of AnalysisUnit

        Returns:
            set: The reachable units
        """
        for unit in entryPoints:
            self.markReachable(unit)
        self.executor.quiesce()

        if self.executor.failures:
            LOG.warning("%d analysis tasks failed", len(self.executor.failures))
        return self.reachableUnits

    def markReachable(self, unit):
        with self._lock:
            if unit in self.reachableUnits:
                return
            self.reachableUnits.add(unit)
        self.executor.postTask(self.processUnit, unit)

    def processUnit(self, unit):
        summary = self.summaries.getSummary(unit)

        callees = summary.invokedUnits + summary.implementationInvokedUnits
        with self._lock:
            self.instantiatedTypes.update(summary.instantiatedTypes)
            self.accessedTypes.update(summary.accessedTypes)
            self.readFields.update(summary.readFields)
            self.writtenFields.update(summary.writtenFields)
            self.invocations[unit] = frozenset(callees)

        for callee in callees:
            self.markReachable(callee)

    def statistics(self):
        return {
            "reachable units": len(self.reachableUnits),
            "instantiated types": len(self.instantiatedTypes),
            "accessed types": len(self.accessedTypes),
            "read fields": len(self.readFields),
            "written fields": len(self.writtenFields),
        }
