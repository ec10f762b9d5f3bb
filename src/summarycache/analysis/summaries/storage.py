"""Cross-run summary cache.

SummaryStorage sits between the analysis and the summary provider. Every
summary request goes through getSummary(), which reuses a valid cached
summary or computes and records a fresh one. loadData() fills the cache from
the summary file at the start of a run; persistData() writes the eligible
entries back at the end.

The cache is a pure optimization. Any failure - a missing or corrupt file, a
stale fingerprint, an identifier that no longer resolves - falls back to
computing the summary from scratch.
"""

import logging
import threading

from summarycache.application.errors import MalformedSummaryFile, UnresolvedReference
from summarycache.application.options import SummaryOptions
from summarycache.util.application.async_utils import TaskExecutor
from summarycache.util.io.formatting import ratio
from . import codec as codecmodule
from . import container
from .eligibility import SummaryFilter
from .hashing import BytecodeHashingStrategy
from .identifiers import isUnstable

LOG = logging.getLogger(__name__)


class LoadStats(object):
    """Outcome of SummaryStorage.loadData().

    Attributes:
        available: True if a summary file was read
        attempted: Entries found in the file
        loaded: Entries inserted into the cache
        malformed: Entries with an unexpected shape
        unresolved: Entries whose unit no longer exists
        stale: Entries whose fingerprint no longer matches
        dangling: Entries with a reference that no longer resolves
    """
    __slots__ = "available", "attempted", "loaded", "malformed", "unresolved", "stale", "dangling"

    def __init__(self):
        self.available = False
        self.attempted = 0
        self.loaded = 0
        self.malformed = 0
        self.unresolved = 0
        self.stale = 0
        self.dangling = 0

    def asDict(self):
        return {name: getattr(self, name) for name in self.__slots__}

    def __repr__(self):
        return "LoadStats(%s)" % ", ".join("%s=%r" % item for item in self.asDict().items())


class PersistStats(object):
    """Outcome of SummaryStorage.persistData().

    Attributes:
        written: True if the summary file was written
        entries: Entries in the cache
        skipped: Entries of units in the skip set
        filtered: Entries whose unit does not match the summary filter
        unstable: Entries referencing an unstable identifier
        unpersistable: Entries with parts that have no persisted form
        saved: Entries written to the file
    """
    __slots__ = "written", "entries", "skipped", "filtered", "unstable", "unpersistable", "saved"

    def __init__(self):
        self.written = False
        self.entries = 0
        self.skipped = 0
        self.filtered = 0
        self.unstable = 0
        self.unpersistable = 0
        self.saved = 0

    def asDict(self):
        return {name: getattr(self, name) for name in self.__slots__}

    def __repr__(self):
        return "PersistStats(%s)" % ", ".join("%s=%r" % item for item in self.asDict().items())


class SummaryStorage(object):
    """Concurrent cache of persisted summaries, keyed by live unit handle.

    getSummary() may be called from any number of threads. A unit's summary
    is computed at most once per storage: concurrent first requests for the
    same unit wait for the one computation in progress. loadData() and
    persistData() are meant to run outside the concurrent analysis; a
    persistData() running concurrently writes a snapshot that may miss
    entries inserted after it started.

    Attributes:
        provider: SummaryProvider computing summaries from scratch
        resolution: ResolutionStrategy for identifiers
        options: SummaryOptions (summary file and filter)
        hashing: HashingStrategy for validity fingerprints
        codec: SummaryCodec built on resolution
        filter: SummaryFilter built from options.summaryFilter
        executor: TaskExecutor running graph reconstruction after cache hits
    """

    def __init__(self, provider, resolution, options=None, hashing=None,
                 executor=None, reconstruct=None):
        """
        Args:
            provider: SummaryProvider
            resolution: ResolutionStrategy
            options: SummaryOptions (default: persistence disabled)
            hashing: HashingStrategy (default: BytecodeHashingStrategy)
            executor: TaskExecutor for reconstruction tasks (default: a new one)
            reconstruct: Callable rebuilding a unit's parsed graph after a
                cache hit (default: unit.ensureGraphParsed())
        """
        self.provider = provider
        self.resolution = resolution
        self.options = options if options is not None else SummaryOptions()
        self.hashing = hashing if hashing is not None else BytecodeHashingStrategy()
        self.codec = codecmodule.SummaryCodec(resolution)
        self.filter = SummaryFilter(self.options.pattern)
        self.executor = executor if executor is not None else TaskExecutor(self.options.workers)
        self.reconstruct = reconstruct if reconstruct is not None else _ensureGraphParsed

        self._storage = {}
        self._computing = {}
        self._reconstructed = set()
        self._lock = threading.Lock()

        LOG.info("Using summary filter %s", self.options.summaryFilter)

    def __len__(self):
        with self._lock:
            return len(self._storage)

    def __contains__(self, unit):
        with self._lock:
            return unit in self._storage

    def entry(self, unit):
        """The PersistedSummary cached for unit, or None."""
        with self._lock:
            return self._storage.get(unit)

    def snapshot(self):
        """List of (unit, PersistedSummary) pairs currently cached."""
        with self._lock:
            return list(self._storage.items())

    def _put(self, unit, persisted):
        with self._lock:
            self._storage[unit] = persisted

    def _keyLock(self, unit):
        with self._lock:
            lock = self._computing.get(unit)
            if lock is None:
                lock = threading.Lock()
                self._computing[unit] = lock
            return lock

    def getSummary(self, unit):
        """Summary of unit, reused from the cache when possible.

        On a cache hit the unit's parsed graph is rebuilt asynchronously on
        the executor; the returned summary does not depend on it.
        """
        persisted = self.entry(unit)
        if persisted is not None:
            self._postReconstruction(unit)
            return persisted.summary

        keyLock = self._keyLock(unit)
        with keyLock:
            try:
                persisted = self.entry(unit)
                if persisted is None:
                    summary = self.provider.getSummary(unit)
                    persisted = self.hashing.prepare(unit, summary)
                    with self._lock:
                        self._storage[unit] = persisted
                        # Computing the summary parsed the graph already
                        self._reconstructed.add(unit)
                return persisted.summary
            finally:
                with self._lock:
                    if self._computing.get(unit) is keyLock:
                        del self._computing[unit]

    def _postReconstruction(self, unit):
        with self._lock:
            if unit in self._reconstructed:
                return
            self._reconstructed.add(unit)
        self.executor.postTask(self.reconstruct, unit)

    def loadData(self):
        """Fill the cache from the summary file.

        Entries that are malformed, whose unit or any reference no longer
        resolves, or whose fingerprint is stale are skipped and counted. An
        unreadable or malformed file is logged and leaves the cache empty.

        Returns:
            LoadStats
        """
        stats = LoadStats()
        path = self.options.summaryFile
        if not path:
            return stats

        try:
            entries = container.readContainer(path)
        except FileNotFoundError:
            LOG.info("No summary file at %s, starting with an empty cache", path)
            return stats
        except (OSError, MalformedSummaryFile) as e:
            LOG.error("Cannot load summaries from %s: %s", path, e)
            return stats

        stats.available = True
        for entry in entries:
            stats.attempted += 1
            self._loadEntry(entry, stats)

        LOG.info("Loaded %s summaries", ratio(stats.loaded, stats.attempted))
        return stats

    def _loadEntry(self, entry, stats):
        try:
            unitId, serialized = container.parseEntry(entry)
        except MalformedSummaryFile as e:
            LOG.debug("Skipping malformed summary entry: %s", e)
            stats.malformed += 1
            return

        unit = self.resolution.resolveUnit(unitId)
        if unit is None:
            LOG.debug("Could not resolve unit %s", unitId)
            stats.unresolved += 1
            return

        if not self.hashing.isValid(unit, serialized.fingerprint):
            LOG.debug("Summary for %s is not valid", unitId)
            stats.stale += 1
            return

        try:
            summary = self.codec.decode(serialized)
        except UnresolvedReference as e:
            LOG.debug("Cannot resolve summary for %s: %s", unitId, e)
            stats.dangling += 1
            return

        self._put(unit, self.hashing.prepare(unit, summary))
        stats.loaded += 1

    def persistData(self, skipSet=frozenset()):
        """Write the eligible cache entries to the summary file.

        Args:
            skipSet: Units whose summary must not be persisted

        Returns:
            PersistStats
        """
        stats = PersistStats()
        path = self.options.summaryFile
        if not path:
            return stats

        LOG.info("Skipping summaries for %d units", len(skipSet))
        summaries = self.serializeStorage(skipSet, stats)

        try:
            container.writeContainer(path, summaries)
        except OSError as e:
            LOG.error("Cannot persist summaries to %s: %s", path, e)
            return stats

        stats.written = True
        stats.saved = len(summaries)
        LOG.info("Saving %d summaries out of %d", stats.saved, stats.entries)
        return stats

    def serializeStorage(self, skipSet, stats=None):
        """Encode the eligible entries.

        Returns:
            dict: UnitId -> SerializedSummary
        """
        if stats is None:
            stats = PersistStats()

        summaries = {}
        for unit, persisted in self.snapshot():
            stats.entries += 1
            if not self.filter.eligible(unit, skipSet):
                if unit in skipSet:
                    stats.skipped += 1
                else:
                    stats.filtered += 1
                continue

            unitId = self.resolution.unitId(unit)
            if isUnstable(unitId):
                stats.unstable += 1
                continue

            serialized, reason = self.codec.encode(persisted)
            if serialized is None:
                if reason == codecmodule.UNSTABLE:
                    stats.unstable += 1
                else:
                    stats.unpersistable += 1
                continue
            summaries[unitId] = serialized
        return summaries


def _ensureGraphParsed(unit):
    unit.ensureGraphParsed()
