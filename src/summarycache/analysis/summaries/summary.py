"""Summary data model.

A Summary is the result of analyzing one unit: the units it invokes
(directly, and through dynamic dispatch), the types it accesses and
instantiates, and the fields it reads and writes. All references are live
handles of the same program universe.

Summaries and PersistedSummary records are immutable. A cache entry is
updated by replacing its record, never by mutating it, so a summary that was
handed out to a caller can not change afterwards.
"""

__all__ = ["Summary", "PersistedSummary", "EMPTY_SUMMARY"]


class Summary(object):
    """Analysis summary of one unit.

    Attributes:
        invokedUnits: Direct call targets
        implementationInvokedUnits: Call targets reached through dispatch
        accessedTypes: Types referenced by the unit
        instantiatedTypes: Types the unit creates instances of
        readFields: Fields the unit reads
        writtenFields: Fields the unit writes
        foreignCalls: Descriptors of calls into code outside the program
        embeddedConstants: Constant objects embedded in the unit

    The last two categories are not persisted; see SummaryCodec.
    """
    __slots__ = (
        "invokedUnits",
        "implementationInvokedUnits",
        "accessedTypes",
        "instantiatedTypes",
        "readFields",
        "writtenFields",
        "foreignCalls",
        "embeddedConstants",
    )

    # Categories that reference program elements, in container order.
    categories = (
        "invokedUnits",
        "implementationInvokedUnits",
        "accessedTypes",
        "instantiatedTypes",
        "readFields",
        "writtenFields",
    )

    def __init__(self, invokedUnits=(), implementationInvokedUnits=(),
                 accessedTypes=(), instantiatedTypes=(), readFields=(),
                 writtenFields=(), foreignCalls=(), embeddedConstants=()):
        assign = object.__setattr__
        assign(self, "invokedUnits", tuple(invokedUnits))
        assign(self, "implementationInvokedUnits", tuple(implementationInvokedUnits))
        assign(self, "accessedTypes", tuple(accessedTypes))
        assign(self, "instantiatedTypes", tuple(instantiatedTypes))
        assign(self, "readFields", tuple(readFields))
        assign(self, "writtenFields", tuple(writtenFields))
        assign(self, "foreignCalls", tuple(foreignCalls))
        assign(self, "embeddedConstants", tuple(embeddedConstants))

    def __setattr__(self, name, value):
        raise AttributeError("Summary is immutable")

    def __delattr__(self, name):
        raise AttributeError("Summary is immutable")

    def hasUnpersistableParts(self):
        return bool(self.foreignCalls or self.embeddedConstants)

    def _key(self):
        key = tuple(frozenset(getattr(self, name)) for name in self.categories)
        return key + (frozenset(self.foreignCalls), frozenset(self.embeddedConstants))

    def __eq__(self, other):
        # Each category is a set; order carries no meaning
        if not isinstance(other, Summary):
            return NotImplemented
        return self._key() == other._key()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        parts = [
            "%s=%r" % (name, list(getattr(self, name)))
            for name in self.categories + ("foreignCalls", "embeddedConstants")
            if getattr(self, name)
        ]
        return "Summary(%s)" % ", ".join(parts)


EMPTY_SUMMARY = Summary()


class PersistedSummary(object):
    """A Summary plus the fingerprint its unit had when it was captured."""
    __slots__ = "summary", "fingerprint"

    def __init__(self, summary, fingerprint):
        object.__setattr__(self, "summary", summary)
        object.__setattr__(self, "fingerprint", fingerprint)

    def __setattr__(self, name, value):
        raise AttributeError("PersistedSummary is immutable")

    def __repr__(self):
        return "PersistedSummary(%r, %r)" % (self.fingerprint, self.summary)
