"""Conversion between summaries and their persisted form.

A Summary references live handles; a SerializedSummary references
identifiers only. Encoding goes through a ResolutionStrategy one category at
a time and preserves the order of every category.

A summary is persisted whole or not at all:

- if any identifier of any category is unstable (see
  identifiers.isUnstable), the whole summary is rejected;
- if the summary has foreign-call descriptors or embedded constants, it is
  rejected, since those categories have no persisted form and a reloaded
  summary without them would be incomplete;
- decoding fails with UnresolvedReference as soon as one identifier does not
  resolve, so a partially resolved summary is never produced.
"""

from summarycache.application.errors import MalformedSummaryFile, UnresolvedReference
from .identifiers import FieldId, TypeId, UnitId, isUnstable
from .summary import Summary

# Rejection reasons reported by SummaryCodec.encode
UNSTABLE = "unstable"
UNPERSISTABLE = "unpersistable"

# Category attribute, container key, identifier class
_LAYOUT = (
    ("invokedUnits", "invoked", UnitId),
    ("implementationInvokedUnits", "implementation_invoked", UnitId),
    ("accessedTypes", "accessed_types", TypeId),
    ("instantiatedTypes", "instantiated_types", TypeId),
    ("readFields", "read_fields", FieldId),
    ("writtenFields", "written_fields", FieldId),
)


class SerializedSummary(object):
    """Persisted form of a summary: a fingerprint and six identifier tuples."""
    __slots__ = ("fingerprint",) + tuple(attr for attr, _, _ in _LAYOUT)

    def __init__(self, fingerprint, **categories):
        self.fingerprint = fingerprint
        for attr, _, _ in _LAYOUT:
            setattr(self, attr, tuple(categories.get(attr, ())))

    def identifiers(self):
        """All identifiers, category by category."""
        for attr, _, _ in _LAYOUT:
            for identifier in getattr(self, attr):
                yield identifier

    def toPayload(self):
        payload = {"fingerprint": self.fingerprint}
        for attr, key, _ in _LAYOUT:
            payload[key] = [identifier.toPayload() for identifier in getattr(self, attr)]
        return payload

    @classmethod
    def fromPayload(cls, payload):
        """Rebuild from toPayload() output.

        Raises:
            MalformedSummaryFile: If the payload does not have the expected shape.
        """
        if not isinstance(payload, dict):
            raise MalformedSummaryFile("Expected a summary object, got %r" % (payload,))
        fingerprint = payload.get("fingerprint")
        if not isinstance(fingerprint, str):
            raise MalformedSummaryFile("Summary without fingerprint: %r" % (payload,))

        categories = {}
        for attr, key, idClass in _LAYOUT:
            values = payload.get(key, [])
            if not isinstance(values, list):
                raise MalformedSummaryFile("Expected a list for %r, got %r" % (key, values))
            categories[attr] = [idClass.fromPayload(value) for value in values]
        return cls(fingerprint, **categories)

    def __eq__(self, other):
        if not isinstance(other, SerializedSummary):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return "SerializedSummary(%r, %d identifiers)" % (
            self.fingerprint,
            sum(1 for _ in self.identifiers()),
        )


class SummaryCodec(object):
    """Encodes and decodes summaries through a ResolutionStrategy.

    Attributes:
        resolution: ResolutionStrategy used in both directions
        isUnstable: Predicate over identifiers excluding them from persistence
    """

    def __init__(self, resolution, isUnstable=isUnstable):
        self.resolution = resolution
        self.isUnstable = isUnstable

        self._identify = {
            UnitId: resolution.unitId,
            TypeId: resolution.typeId,
            FieldId: resolution.fieldId,
        }
        self._resolve = {
            UnitId: resolution.resolveUnit,
            TypeId: resolution.resolveType,
            FieldId: resolution.resolveField,
        }

    def encode(self, persisted):
        """Serialize a PersistedSummary.

        Returns:
            (SerializedSummary, None) on success, or (None, reason) where
            reason is UNSTABLE or UNPERSISTABLE.
        """
        summary = persisted.summary
        if summary.hasUnpersistableParts():
            return None, UNPERSISTABLE

        categories = {}
        for attr, _, idClass in _LAYOUT:
            identify = self._identify[idClass]
            ids = [identify(handle) for handle in getattr(summary, attr)]
            if any(self.isUnstable(identifier) for identifier in ids):
                return None, UNSTABLE
            categories[attr] = ids
        return SerializedSummary(persisted.fingerprint, **categories), None

    def decode(self, serialized):
        """Resolve a SerializedSummary back to a Summary of live handles.

        Raises:
            UnresolvedReference: If any identifier does not resolve.
        """
        categories = {}
        for attr, _, idClass in _LAYOUT:
            resolve = self._resolve[idClass]
            categories[attr] = [
                self._resolveOne(resolve, identifier)
                for identifier in getattr(serialized, attr)
            ]
        return Summary(**categories)

    def _resolveOne(self, resolve, identifier):
        resolved = resolve(identifier)
        if resolved is None:
            raise UnresolvedReference(identifier)
        return resolved
