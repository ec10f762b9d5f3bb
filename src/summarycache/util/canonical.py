"""
Canonical value objects.

A canonical object is defined entirely by a tuple of plain values: two
canonical objects are equal when they have the same type and the same
canonical values, regardless of which instance was created first. This is
what makes the persisted identifiers of the summary cache safe to compare
across program reloads - they never hold a reference to a live object.

Key concepts:
- CanonicalObject: Base class for objects that are compared by canonical values
- sortKey(): A total order over canonical objects of mixed types, used to
  produce deterministic output
"""


class CanonicalObject(object):
    """
    Base class for objects that are compared by their canonical values.

    Canonical objects are equal if they have the same type and the same
    canonical values (the arguments passed to setCanonical). Instances are
    hashable and may be used as dictionary keys and set members.

    Attributes:
        canonical: Tuple of canonical values that define this object's identity
        hash: Precomputed hash value for efficient hashing

    Example:
        >>> class MyCanonical(CanonicalObject):
        ...     pass
        >>> obj1 = MyCanonical(1, 2, 3)
        >>> obj2 = MyCanonical(1, 2, 3)
        >>> obj1 == obj2
        True  # Equal because canonical values match
        >>> obj1 is obj2
        False  # But different instances
    """
    __slots__ = "canonical", "hash", "__weakref__"

    def __init__(self, *args):
        """
        Initialize a canonical object with canonical values.

        Args:
            *args: Values that define this object's canonical identity
        """
        self.setCanonical(*args)

    def setCanonical(self, *args):
        """
        Set the canonical values for this object.

        Args:
            *args: Values that define this object's canonical identity
        """
        self.canonical = args
        # Hash combines the type name with the canonical values
        self.hash = hash((type(self).__name__, args))

    def sortKey(self):
        """
        Return a key that orders canonical objects deterministically.

        Nested canonical objects are expanded so the key only contains
        plain values.

        Returns:
            tuple: (type name, expanded canonical values)
        """
        expanded = tuple(
            value.sortKey() if isinstance(value, CanonicalObject) else value
            for value in self.canonical
        )
        return (type(self).__name__, expanded)

    def __hash__(self):
        return self.hash

    def __eq__(self, other):
        """
        Check if this canonical object equals another.

        Args:
            other: Object to compare with

        Returns:
            bool: True if objects are equal (same type and canonical values)
        """
        return type(self) == type(other) and self.canonical == other.canonical

    def __ne__(self, other):
        return not self == other

    def __lt__(self, other):
        if not isinstance(other, CanonicalObject):
            return NotImplemented
        return self.sortKey() < other.sortKey()

    def __repr__(self):
        """
        Return a string representation of this canonical object.

        Returns:
            str: String in format "ClassName(val1, val2, ...)"
        """
        canonicalStr = ", ".join([repr(obj) for obj in self.canonical])
        return "%s(%s)" % (type(self).__name__, canonicalStr)
