"""
Computation of summaries from scratch.

The AST-based provider parses a unit's source and records what it can see
statically:

- calls of names bound to program functions (invoked units);
- calls of names bound to program classes (instantiated types, and the
  class' __init__ as an invoked unit);
- calls ``self.m(...)`` inside a method (implementation-invoked units: every
  override of ``m`` in the owner class and its registered subclasses);
- loads of names bound to program classes (accessed types);
- ``self.a`` loads and stores inside a method (read and written fields).

Names are resolved through the function's closure and globals; attribute
chains through program modules and classes (``helpers.compute()``,
``Config.load()``) are followed. Builtins and objects from outside the
program are ignored.
"""

import ast
import inspect
import types

from .summary import EMPTY_SUMMARY, Summary


class SummaryProvider(object):
    """Interface of the analyzer that computes a unit's summary."""

    def getSummary(self, unit):
        """Compute the summary of unit from scratch."""
        raise NotImplementedError


class _OrderedSet(object):
    __slots__ = "items"

    def __init__(self):
        self.items = {}

    def add(self, item):
        if item is not None:
            self.items.setdefault(item, None)

    def __iter__(self):
        return iter(self.items)


class AstSummaryProvider(SummaryProvider):
    """Summarizes Python functions of an AnalysisUniverse from their source.

    Parsing the source also fills the unit's analyzedGraph.
    """

    def __init__(self, universe):
        self.universe = universe

    def getSummary(self, unit):
        tree = unit.ensureGraphParsed()
        if tree is None:
            return EMPTY_SUMMARY
        return _SummaryBuilder(self.universe, unit, tree).build()


class _SummaryBuilder(object):
    def __init__(self, universe, unit, tree):
        self.universe = universe
        self.unit = unit
        self.tree = tree

        try:
            closure = inspect.getclosurevars(unit.function)
            self.namespaces = (closure.nonlocals, unit.function.__globals__)
        except (TypeError, ValueError):
            self.namespaces = (unit.function.__globals__,)

        self.selfName, self.instanceReceiver = self._receiver()

        self.invoked = _OrderedSet()
        self.implementationInvoked = _OrderedSet()
        self.accessed = _OrderedSet()
        self.instantiated = _OrderedSet()
        self.read = _OrderedSet()
        self.written = _OrderedSet()

    def _receiver(self):
        """Name of the receiver parameter, and whether it is an instance."""
        owner = self.unit.owner
        if not owner.isClass() or not self.tree.args.args:
            return None, False
        declared = vars(owner.pyobj).get(self.unit.name)
        if isinstance(declared, staticmethod):
            return None, False
        return self.tree.args.args[0].arg, not isinstance(declared, classmethod)

    def build(self):
        callees = set()
        for node in ast.walk(self.tree):
            if isinstance(node, ast.Call):
                callees.add(id(node.func))
                self.visitCall(node)

        for node in ast.walk(self.tree):
            if id(node) in callees:
                continue
            if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load):
                self.visitName(node)
            elif isinstance(node, ast.Attribute):
                self.visitAttribute(node)

        return Summary(
            invokedUnits=self.invoked,
            implementationInvokedUnits=self.implementationInvoked,
            accessedTypes=self.accessed,
            instantiatedTypes=self.instantiated,
            readFields=self.read,
            writtenFields=self.written,
        )

    def lookup(self, node):
        """Python object an expression statically refers to, or None."""
        if isinstance(node, ast.Name):
            if node.id == self.selfName:
                return None
            for namespace in self.namespaces:
                if node.id in namespace:
                    return namespace[node.id]
            return None
        elif isinstance(node, ast.Attribute):
            base = self.lookup(node.value)
            if isinstance(base, types.ModuleType) and base.__name__ in self.universe.modules:
                return vars(base).get(node.attr)
            if isinstance(base, type) and self.universe.isProgramObject(base):
                return inspect.getattr_static(base, node.attr, None)
            return None
        return None

    def isReceiver(self, node):
        return self.selfName is not None and isinstance(node, ast.Name) and node.id == self.selfName

    def visitCall(self, node):
        func = node.func
        if isinstance(func, ast.Attribute) and self.isReceiver(func.value):
            self.dispatch(func.attr)
            return

        target = self.lookup(func)
        if isinstance(target, (staticmethod, classmethod)):
            target = target.__func__
        if isinstance(target, types.FunctionType):
            self.invoked.add(self.universe.lookupUnit(target))
        elif isinstance(target, type):
            cls = self.universe.lookupType(target)
            if cls is not None:
                self.instantiated.add(cls)
                self.invoked.add(cls.resolveMethod("__init__"))

    def dispatch(self, name):
        owner = self.unit.owner
        for t in [owner] + owner.subtypes():
            self.implementationInvoked.add(t.resolveMethod(name))

    def visitName(self, node):
        target = self.lookup(node)
        if isinstance(target, type):
            self.accessed.add(self.universe.lookupType(target))

    def visitAttribute(self, node):
        if not self.isReceiver(node.value) or not self.instanceReceiver:
            target = self.lookup(node)
            if isinstance(target, type) and isinstance(node.ctx, ast.Load):
                self.accessed.add(self.universe.lookupType(target))
            return

        if isinstance(node.ctx, ast.Store):
            self.written.add(self.field(node.attr))
        elif isinstance(node.ctx, ast.Load):
            if self.unit.owner.resolveMethod(node.attr) is None:
                self.read.add(self.field(node.attr))

    def field(self, name):
        """Field handle for self.<name>, owned by the class declaring it."""
        owner = self.unit.owner
        for cls in inspect.getmro(owner.pyobj):
            declaring = self.universe.lookupType(cls)
            if declaring is not None and declaring.declaresField(name):
                owner = declaring
                break
        return self.universe.lookupField(owner, name)
