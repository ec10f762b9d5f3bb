# Describes the live program "snapshot" the analysis runs on.
#
# The handles defined here are the in-memory identities of program elements
# for one run. They are canonical within a universe (one handle per Python
# object) but carry no meaning across runs; persisted data refers to program
# elements through the identifiers in analysis.summaries.identifiers instead.

import ast
import importlib.util
import inspect
import sys
import textwrap
import threading
import types


def parseFunction(function):
    """Parse the source of a Python function.

    Returns:
        ast.FunctionDef or ast.AsyncFunctionDef, or None when the function
        has no retrievable source (builtins, code created by exec, ...).
    """
    try:
        source = inspect.getsource(function)
    except (OSError, TypeError):
        return None

    try:
        tree = ast.parse(textwrap.dedent(source))
    except SyntaxError:
        # Lambdas are returned as the full source line, which may not parse
        return None

    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            return node
    return None


def signatureString(function):
    """Name and parameter list of a function, e.g. "helper(self, x, *args)".

    Annotations and default values are left out: they do not identify the
    function and default reprs may contain addresses.
    """
    try:
        sig = inspect.signature(function)
    except (TypeError, ValueError):
        return "%s(...)" % function.__name__

    params = []
    sawKeywordOnly = False
    for param in sig.parameters.values():
        if param.kind is param.VAR_POSITIONAL:
            params.append("*" + param.name)
            sawKeywordOnly = True
        elif param.kind is param.VAR_KEYWORD:
            params.append("**" + param.name)
        elif param.kind is param.KEYWORD_ONLY:
            if not sawKeywordOnly:
                params.append("*")
                sawKeywordOnly = True
            params.append(param.name)
        else:
            params.append(param.name)

    positionalOnly = [
        p for p in sig.parameters.values() if p.kind is p.POSITIONAL_ONLY
    ]
    if positionalOnly:
        params.insert(len(positionalOnly), "/")

    return "%s(%s)" % (function.__name__, ", ".join(params))


class AnalysisType(object):
    """A declared type: a class, or a module owning module-level functions.

    Attributes:
        universe: Owning AnalysisUniverse
        pyobj: The class or module, or None for owners that cannot be reached
            by name (e.g. functions defined inside another function)
        qualifiedName: Dotted name, "module.Class" or "module"
        isModule: True if this type stands for a module
    """
    __slots__ = "universe", "pyobj", "qualifiedName", "isModule", "_fieldNames", "__weakref__"

    def __init__(self, universe, pyobj, qualifiedName):
        self.universe = universe
        self.pyobj = pyobj
        self.qualifiedName = qualifiedName
        self.isModule = isinstance(pyobj, types.ModuleType)
        self._fieldNames = None

    def isClass(self):
        return isinstance(self.pyobj, type)

    def lookupMethod(self, name):
        """Unit for the Python function bound to `name` directly on this type.

        The unit's owner is the type that defines the function, which differs
        from this type when the function is an alias (``run = helper``).

        Returns:
            AnalysisUnit, or None if the type does not bind such a function.
        """
        if self.pyobj is None:
            return None
        return self.universe.lookupUnit(vars(self.pyobj).get(name))

    def resolveMethod(self, name):
        """Unit that a call to `name` on an instance of this type dispatches to."""
        if not self.isClass():
            return self.lookupMethod(name)
        for cls in inspect.getmro(self.pyobj):
            owner = self.universe.lookupType(cls)
            if owner is None:
                continue
            unit = owner.lookupMethod(name)
            if unit is not None:
                return unit
        return None

    def subtypes(self):
        """Registered, transitive subclasses of this type (excluding itself)."""
        if not self.isClass():
            return []
        result = []
        seen = set()
        pending = list(self.pyobj.__subclasses__())
        while pending:
            cls = pending.pop()
            if cls in seen:
                continue
            seen.add(cls)
            pending.extend(cls.__subclasses__())
            subtype = self.universe.lookupType(cls)
            if subtype is not None:
                result.append(subtype)
        result.sort(key=lambda t: t.qualifiedName)
        return result

    def fieldNames(self):
        """Names of the instance fields this class declares.

        A field is declared by __slots__, by a class-level annotation, by a
        plain class attribute, or by an assignment to `self.<name>` in one of
        the class' own methods.
        """
        if self._fieldNames is None:
            self._fieldNames = frozenset(self._collectFieldNames())
        return self._fieldNames

    def _collectFieldNames(self):
        names = set()
        if not self.isClass():
            return names

        namespace = vars(self.pyobj)
        slots = namespace.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.update(slots)
        names.update(inspect.get_annotations(self.pyobj))

        for name, value in namespace.items():
            if isinstance(value, (staticmethod, classmethod, property)):
                continue
            if not isinstance(value, types.FunctionType):
                # Class attributes double as instance defaults
                if not (name.startswith("__") and name.endswith("__")) and not callable(value):
                    names.add(name)
                continue
            tree = parseFunction(value)
            if tree is None or not tree.args.args:
                continue
            selfName = tree.args.args[0].arg
            for node in ast.walk(tree):
                if (
                    isinstance(node, ast.Attribute)
                    and isinstance(node.ctx, ast.Store)
                    and isinstance(node.value, ast.Name)
                    and node.value.id == selfName
                ):
                    names.add(node.attr)
        names.discard("__weakref__")
        names.discard("__dict__")
        return names

    def declaresField(self, name):
        return name in self.fieldNames()

    def __repr__(self):
        return "AnalysisType(%s)" % self.qualifiedName


class AnalysisUnit(object):
    """A Python function or method: the element that owns a summary.

    Attributes:
        function: The Python function object
        owner: Declaring AnalysisType
        name: Function name
        signature: Name and parameter list, see signatureString()
        analyzedGraph: Parsed AST of the function, set by ensureGraphParsed()
    """
    __slots__ = "function", "owner", "name", "signature", "analyzedGraph", "__weakref__"

    def __init__(self, function, owner):
        self.function = function
        self.owner = owner
        self.name = function.__name__
        self.signature = signatureString(function)
        self.analyzedGraph = None

    @property
    def qualifiedName(self):
        return "%s.%s" % (self.owner.qualifiedName, self.name)

    def isMethod(self):
        return self.owner.isClass()

    def ensureGraphParsed(self):
        """Parse the unit's source once and keep the result.

        Returns:
            The parsed function AST, or None if no source is available.
        """
        graph = self.analyzedGraph
        if graph is None:
            graph = parseFunction(self.function)
            self.analyzedGraph = graph
        return graph

    def __repr__(self):
        return "AnalysisUnit(%s)" % self.qualifiedName


class AnalysisField(object):
    """An instance field, identified by its declaring type and name."""
    __slots__ = "owner", "name", "__weakref__"

    def __init__(self, owner, name):
        self.owner = owner
        self.name = name

    @property
    def qualifiedName(self):
        return "%s.%s" % (self.owner.qualifiedName, self.name)

    def __repr__(self):
        return "AnalysisField(%s)" % self.qualifiedName


class AnalysisUniverse(object):
    """Registry of the live program elements of one run.

    Only modules registered with addModule() belong to the program; elements
    of other modules (the standard library, third-party packages) are not
    analyzed and have no handles. Handle creation is thread-safe.

    Attributes:
        modules: Dictionary mapping module name to registered module
    """

    def __init__(self):
        self.modules = {}
        self._types = {}
        self._syntheticTypes = {}
        self._units = {}
        self._fields = {}
        self._lock = threading.RLock()

    def addModule(self, module):
        """Register a module as part of the analyzed program."""
        with self._lock:
            self.modules[module.__name__] = module

    def loadModule(self, path, name=None):
        """Execute a Python source file as a module and register it.

        The module is also placed in sys.modules, so that classes defined in
        it can find their module.

        Args:
            path: Path of the source file
            name: Module name (default: the file's stem)

        Returns:
            The loaded module.
        """
        path = str(path)
        if name is None:
            name = inspect.getmodulename(path)
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        spec.loader.exec_module(module)
        self.addModule(module)
        return module

    def isProgramObject(self, pyobj):
        return getattr(pyobj, "__module__", None) in self.modules

    def lookupType(self, pyobj):
        """Handle for a class or module of the program.

        Returns:
            AnalysisType, or None if pyobj is not part of the program.
        """
        with self._lock:
            result = self._types.get(pyobj)
            if result is not None:
                return result

            if isinstance(pyobj, types.ModuleType):
                if self.modules.get(pyobj.__name__) is not pyobj:
                    return None
                qualifiedName = pyobj.__name__
            elif isinstance(pyobj, type):
                if not self.isProgramObject(pyobj):
                    return None
                qualifiedName = "%s.%s" % (pyobj.__module__, pyobj.__qualname__)
            else:
                return None

            result = AnalysisType(self, pyobj, qualifiedName)
            self._types[pyobj] = result
            return result

    def _syntheticType(self, qualifiedName):
        with self._lock:
            result = self._syntheticTypes.get(qualifiedName)
            if result is None:
                result = AnalysisType(self, None, qualifiedName)
                self._syntheticTypes[qualifiedName] = result
            return result

    def ownerOf(self, function):
        """The type declaring a function, derived from its __qualname__."""
        moduleName = function.__module__
        parts = function.__qualname__.split(".")[:-1]

        pyobj = self.modules.get(moduleName)
        for part in parts:
            if pyobj is None:
                break
            pyobj = vars(pyobj).get(part) if hasattr(pyobj, "__dict__") else None

        if parts:
            if isinstance(pyobj, type):
                owner = self.lookupType(pyobj)
                if owner is not None:
                    return owner
            # Declared in a function body
            return self._syntheticType("%s.%s" % (moduleName, ".".join(parts)))

        module = self.modules.get(moduleName)
        if module is not None:
            return self.lookupType(module)
        return self._syntheticType(moduleName)

    def lookupUnit(self, function, owner=None):
        """Handle for a Python function of the program.

        Args:
            function: Python function (staticmethod/classmethod are unwrapped)
            owner: Declaring AnalysisType, derived from the function if None

        Returns:
            AnalysisUnit, or None if function is not a program function.
        """
        if isinstance(function, (staticmethod, classmethod)):
            function = function.__func__
        if not isinstance(function, types.FunctionType):
            return None
        if not self.isProgramObject(function):
            return None

        with self._lock:
            result = self._units.get(function)
            if result is None:
                if owner is None:
                    owner = self.ownerOf(function)
                result = AnalysisUnit(function, owner)
                self._units[function] = result
            return result

    def lookupField(self, owner, name):
        """Handle for the field `name` of the type `owner`."""
        key = (owner, name)
        with self._lock:
            result = self._fields.get(key)
            if result is None:
                result = AnalysisField(owner, name)
                self._fields[key] = result
            return result

    def lookupName(self, qualifiedName):
        """Find a program object by dotted name.

        The longest registered module name that prefixes qualifiedName is
        taken, and the remaining parts are looked up as attributes. Nothing is
        imported and no descriptor is invoked.

        Returns:
            The object, or None if the name does not denote one.
        """
        parts = qualifiedName.split(".")
        for split in range(len(parts), 0, -1):
            module = self.modules.get(".".join(parts[:split]))
            if module is None:
                continue
            pyobj = module
            for part in parts[split:]:
                namespace = getattr(pyobj, "__dict__", None)
                if namespace is None or part not in namespace:
                    pyobj = None
                    break
                pyobj = namespace[part]
            if pyobj is not None:
                return pyobj
        return None

    def allFunctions(self):
        """Units for every function and method declared at the top level of
        the registered modules and their classes, sorted by qualified name."""
        result = set()
        for module in list(self.modules.values()):
            for value in list(vars(module).values()):
                if getattr(value, "__module__", None) != module.__name__:
                    continue
                if isinstance(value, types.FunctionType):
                    result.add(self.lookupUnit(value))
                elif isinstance(value, type):
                    cls = self.lookupType(value)
                    for name in list(vars(value)):
                        result.add(cls.lookupMethod(name))
        result.discard(None)
        return sorted(result, key=lambda unit: unit.qualifiedName)
