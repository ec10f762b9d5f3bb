"""Sources of the skip set passed to SummaryStorage.persistData."""

import threading


class SummaryInvalidator(object):
    """Reports the units whose cached summary must not be persisted."""

    def summariesToSkip(self):
        """Return a frozenset of unit handles."""
        raise NotImplementedError


class RecordingSummaryInvalidator(SummaryInvalidator):
    """Collects invalidated units as the analysis reports them.

    invalidate() may be called from any worker thread.
    """

    def __init__(self):
        self._units = set()
        self._lock = threading.Lock()

    def invalidate(self, unit):
        with self._lock:
            self._units.add(unit)

    def summariesToSkip(self):
        with self._lock:
            return frozenset(self._units)
