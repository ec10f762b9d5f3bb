"""Stable, name-based identifiers for persisted program elements.

Identifiers stand in for live analysis handles in persisted summaries. They
hold nothing but strings, so they compare equal across program reloads when
they denote the same declared element, and can be written to and read from a
container without touching the live program.

Each identifier knows its own payload form (plain dicts of strings, ready
for JSON) and how to rebuild itself from it.
"""

from summarycache.application.errors import MalformedSummaryFile
from summarycache.util.canonical import CanonicalObject


def _string(payload, key):
    value = payload.get(key) if isinstance(payload, dict) else None
    if not isinstance(value, str) or not value:
        raise MalformedSummaryFile("Expected a non-empty string for %r in %r" % (key, payload))
    return value


class TypeId(CanonicalObject):
    """Identifier of a declared type (or module), by qualified name."""
    __slots__ = ()

    def __init__(self, qualifiedName):
        CanonicalObject.__init__(self, qualifiedName)

    @property
    def qualifiedName(self):
        return self.canonical[0]

    def declaringNames(self):
        return (self.qualifiedName,)

    def toPayload(self):
        return self.qualifiedName

    @classmethod
    def fromPayload(cls, payload):
        if not isinstance(payload, str) or not payload:
            raise MalformedSummaryFile("Expected a type name, got %r" % (payload,))
        return cls(payload)

    def __str__(self):
        return self.qualifiedName


class UnitId(CanonicalObject):
    """Identifier of a unit: owning type name plus signature.

    The signature is the unit's name followed by its parameter list, e.g.
    ``run()`` or ``helper(self, x)``.
    """
    __slots__ = ()

    def __init__(self, owner, signature):
        CanonicalObject.__init__(self, owner, signature)

    @property
    def owner(self):
        return self.canonical[0]

    @property
    def signature(self):
        return self.canonical[1]

    @property
    def name(self):
        return self.signature.split("(", 1)[0]

    @property
    def ownerType(self):
        return TypeId(self.owner)

    def declaringNames(self):
        return (self.owner, self.name)

    def toPayload(self):
        return {"owner": self.owner, "signature": self.signature}

    @classmethod
    def fromPayload(cls, payload):
        return cls(_string(payload, "owner"), _string(payload, "signature"))

    def __str__(self):
        return "%s.%s" % (self.owner, self.signature)


class FieldId(CanonicalObject):
    """Identifier of a field: owning TypeId plus field name."""
    __slots__ = ()

    def __init__(self, owner, name):
        assert isinstance(owner, TypeId), owner
        CanonicalObject.__init__(self, owner, name)

    @property
    def owner(self):
        return self.canonical[0]

    @property
    def name(self):
        return self.canonical[1]

    def declaringNames(self):
        return (self.owner.qualifiedName,)

    def toPayload(self):
        return {"owner": self.owner.qualifiedName, "name": self.name}

    @classmethod
    def fromPayload(cls, payload):
        return cls(TypeId(_string(payload, "owner")), _string(payload, "name"))

    def __str__(self):
        return "%s.%s" % (self.owner, self.name)


# Name fragments of types that are generated by the interpreter or by a
# framework. Their names are not guaranteed to denote the same type after
# the program is reloaded.
UNSTABLE_NAME_MARKERS = (
    "<lambda>",  # anonymous call targets
    "<locals>",  # closures and classes created inside a function body
    "<genexpr>",
    "<listcomp>",
    "<setcomp>",
    "<dictcomp>",
    "[",  # array and parameterized types, e.g. list[int]
    "$$Proxy",  # synthetic proxy classes
)


def isUnstableName(qualifiedName, markers=UNSTABLE_NAME_MARKERS):
    """True if a type name must not be trusted as a resolution key."""
    return any(marker in qualifiedName for marker in markers)


def isUnstable(identifier, markers=UNSTABLE_NAME_MARKERS):
    """True if any name an identifier is built from is unstable.

    A type identifier is checked directly, a field identifier through its
    owning type, and a unit identifier through its owner and its own name
    (a module-level lambda has a stable owner but no stable name).
    """
    return any(isUnstableName(name, markers) for name in identifier.declaringNames())
