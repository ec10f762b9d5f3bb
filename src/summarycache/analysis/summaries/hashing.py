"""Validity fingerprints for units.

A hashing strategy decides whether a persisted summary still describes a
unit: the fingerprint captured when the summary was computed must equal the
fingerprint of the unit as it is loaded now.
"""

import inspect
import logging
import sys
import types

from summarycache.util.io.filesystem import dataHash
from .summary import PersistedSummary

LOG = logging.getLogger(__name__)


class HashingStrategy(object):
    """Interface for validity fingerprints.

    Subclasses implement fingerprint(); prepare() and isValid() are defined
    in terms of it.
    """

    def fingerprint(self, unit):
        """Fingerprint of the unit's current content.

        Must be deterministic for a given program and must change whenever
        anything the unit's summary depends on changes.
        """
        raise NotImplementedError

    def prepare(self, unit, summary):
        """Wrap a summary with the unit's current fingerprint."""
        return PersistedSummary(summary, self.fingerprint(unit))

    def isValid(self, unit, fingerprint):
        """True if a summary captured with `fingerprint` is valid for unit."""
        return self.fingerprint(unit) == fingerprint


class TrustAllHashingStrategy(HashingStrategy):
    """Reports every persisted summary as valid.

    UNSAFE: stale summaries are accepted silently. Only use this with caches
    that are verified by some other means, e.g. produced from the exact same
    program by a trusted build.
    """

    FINGERPRINT = "trusted"

    def __init__(self):
        LOG.warning("Summary validity checks are disabled; stale summaries will be reused")

    def fingerprint(self, unit):
        return self.FINGERPRINT

    def isValid(self, unit, fingerprint):
        return True


# Constants and defaults described by value; anything else is described by
# what it is (its kind and qualified name), never by repr().
_LITERALS = (type(None), bool, int, float, complex, str, bytes, type(Ellipsis))

_METHOD_KINDS = (types.FunctionType, staticmethod, classmethod)


def _qualifiedName(pyobj):
    return "%s.%s" % (getattr(pyobj, "__module__", None), getattr(pyobj, "__qualname__", None))


def _closureValues(function):
    """Current values of the function's free variables, by name."""
    values = {}
    for name, cell in zip(function.__code__.co_freevars, function.__closure__ or ()):
        try:
            values[name] = cell.cell_contents
        except ValueError:
            # Unbound cell
            continue
    return values


def _referencedNames(code, names):
    """Add co_names of code and of every nested code object to names."""
    names.update(code.co_names)
    for const in code.co_consts:
        if isinstance(const, types.CodeType):
            _referencedNames(const, names)
    return names


class BytecodeHashingStrategy(HashingStrategy):
    """SHA-256 over everything a unit's summary is derived from.

    The hash covers:

    - the unit's qualified name, signature and declaration kind (function,
      staticmethod, classmethod);
    - its code object, nested code objects included;
    - its default argument values;
    - what every global or closure name used by the code is bound to, and
      what those names resolve to on program modules and classes reached
      through attribute chains (``helpers.compute``, ``Config.load``);
    - for program classes bound to such names, their MRO and the methods
      each class in it declares, which decide the constructor a call runs;
    - for methods, the MRO, method tables and fields of the owner and of
      its registered subclasses, which decide dispatch targets and field
      owners.

    Values are described by kind and qualified name, and unordered
    collections in sorted order, so the fingerprint does not depend on
    object addresses or the hash seed. The interpreter's cache tag is part of
    the hash because bytecode is only comparable within one interpreter
    version.
    """

    def __init__(self, cacheTag=None):
        self.cacheTag = cacheTag if cacheTag is not None else sys.implementation.cache_tag

    def fingerprint(self, unit):
        function = unit.function
        universe = unit.owner.universe
        parts = [
            str(self.cacheTag),
            unit.qualifiedName,
            unit.signature,
            self._declarationKind(unit),
            self._describeValue(function.__defaults__, universe),
            self._describeValue(function.__kwdefaults__ or {}, universe),
        ]
        self._describeCode(function.__code__, parts)
        self._describeBindings(function, universe, parts)

        if unit.isMethod():
            owner = unit.owner
            # Dispatch targets and field owners come from the class hierarchy
            parts.append(self._describeClass(owner.pyobj))
            parts.append(self._describeFields(owner.pyobj, universe))
            for subtype in owner.subtypes():
                parts.append(self._describeClass(subtype.pyobj))
        return dataHash("\0".join(parts).encode("utf-8", "backslashreplace"))

    def _declarationKind(self, unit):
        if not unit.isMethod():
            return "function"
        declared = vars(unit.owner.pyobj).get(unit.name)
        return type(declared).__name__

    def _describeCode(self, code, parts):
        parts.append(code.co_code.hex())
        parts.append(repr(code.co_names))
        parts.append(repr(code.co_varnames))
        parts.append(repr(code.co_freevars))
        parts.append(repr(code.co_cellvars))
        parts.append(str(code.co_flags))
        parts.append(str(code.co_argcount))
        parts.append(str(code.co_kwonlyargcount))
        for const in code.co_consts:
            if isinstance(const, types.CodeType):
                self._describeCode(const, parts)
            else:
                parts.append(self._describeValue(const, None))

    def _describeValue(self, value, universe):
        """Deterministic description of a constant or default value."""
        if isinstance(value, _LITERALS):
            return repr(value)
        if isinstance(value, (tuple, list)):
            items = [self._describeValue(item, universe) for item in value]
            return "%s(%s)" % (type(value).__name__, ", ".join(items))
        if isinstance(value, (frozenset, set)):
            items = sorted(self._describeValue(item, universe) for item in value)
            return "%s{%s}" % (type(value).__name__, ", ".join(items))
        if isinstance(value, dict):
            items = sorted(
                "%s: %s" % (self._describeValue(k, universe), self._describeValue(v, universe))
                for k, v in value.items()
            )
            return "dict{%s}" % ", ".join(items)
        if isinstance(value, slice):
            return "slice(%s)" % ", ".join(
                self._describeValue(item, universe) for item in (value.start, value.stop, value.step)
            )
        return self._describeBinding(value, universe)

    def _describeBinding(self, value, universe):
        """Kind and qualified name of what a name is bound to."""
        if isinstance(value, (staticmethod, classmethod)):
            return "%s %s" % (type(value).__name__, self._describeBinding(value.__func__, universe))
        if isinstance(value, types.FunctionType):
            return "function %s" % _qualifiedName(value)
        if isinstance(value, types.ModuleType):
            return "module %s" % value.__name__
        if isinstance(value, type):
            if universe is not None and universe.isProgramObject(value):
                return self._describeClass(value)
            return "class %s" % _qualifiedName(value)
        if isinstance(value, types.BuiltinFunctionType):
            return "builtin %s.%s" % (value.__module__, value.__qualname__)
        return "instance of %s" % _qualifiedName(type(value))

    def _describeClass(self, cls):
        """A class with its MRO and the methods each class in it declares."""
        entries = []
        for base in inspect.getmro(cls):
            declared = sorted(
                "%s:%s" % (name, type(value).__name__)
                for name, value in vars(base).items()
                if isinstance(value, _METHOD_KINDS)
            )
            entries.append("%s[%s]" % (_qualifiedName(base), ",".join(declared)))
        return "class %s" % " < ".join(entries)

    def _describeFields(self, cls, universe):
        entries = []
        for base in inspect.getmro(cls):
            declaring = universe.lookupType(base)
            if declaring is not None:
                entries.append("%s{%s}" % (declaring.qualifiedName, ",".join(sorted(declaring.fieldNames()))))
        return "fields %s" % " ".join(entries)

    def _describeBindings(self, function, universe, parts):
        """Describe what the names used by function are bound to.

        Names resolve through the closure, then the globals, as the summary
        provider resolves them. Attribute names are then looked up on every
        program module and class reached that way, transitively.
        """
        names = sorted(_referencedNames(function.__code__, set()))
        closure = _closureValues(function)
        namespace = function.__globals__

        pending = []
        for name in sorted(set(names) | set(closure)):
            if name in closure:
                value = closure[name]
            elif name in namespace:
                value = namespace[name]
            else:
                continue
            parts.append("%s = %s" % (name, self._describeBinding(value, universe)))
            pending.append(value)

        seen = set()
        while pending:
            value = pending.pop(0)
            container = self._programNamespace(value, universe)
            if container is None or id(value) in seen:
                continue
            seen.add(id(value))
            for name in names:
                attr = container(name)
                if attr is None:
                    continue
                parts.append("%s.%s = %s" % (
                    self._containerName(value), name, self._describeBinding(attr, universe)
                ))
                pending.append(attr)

    def _programNamespace(self, value, universe):
        """Attribute lookup for program modules and classes, else None."""
        if isinstance(value, types.ModuleType):
            if universe.modules.get(value.__name__) is value:
                return vars(value).get
        elif isinstance(value, type) and universe.isProgramObject(value):
            return lambda name: inspect.getattr_static(value, name, None)
        return None

    def _containerName(self, value):
        if isinstance(value, types.ModuleType):
            return value.__name__
        return _qualifiedName(value)
