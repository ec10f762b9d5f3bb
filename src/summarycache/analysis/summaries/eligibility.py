"""Which computed summaries are worth persisting.

A unit's summary is persisted when the unit's qualified name fully matches
the configured filter and the unit is not in the skip set. The filter bounds
the cache to a relevant part of the program. The skip set comes from the
analysis driver and names units whose summary was invalidated after it was
handed out; their entry no longer reflects what the analysis used.
"""

import re


class SummaryFilter(object):
    """Eligibility policy for persisting summaries.

    Attributes:
        pattern: Compiled regular expression matched against qualified names
    """

    def __init__(self, pattern):
        """
        Args:
            pattern: Regular expression source or compiled pattern
        """
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        self.pattern = pattern

    def matches(self, unit):
        return self.pattern.fullmatch(unit.qualifiedName) is not None

    def eligible(self, unit, skipSet):
        """True if the summary of unit may be persisted."""
        return unit not in skipSet and self.matches(unit)

    def __repr__(self):
        return "SummaryFilter(%r)" % self.pattern.pattern
