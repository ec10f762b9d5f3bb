"""Translation between live program handles and persisted identifiers.

Saving maps handles to identifiers; loading maps identifiers back to the
handles of the freshly loaded program. Resolution is best effort: an
identifier that no longer denotes a program element resolves to None, it
never raises.
"""

import types

from .identifiers import FieldId, TypeId, UnitId


class ResolutionStrategy(object):
    """Interface for identifier resolution.

    Implementations must be pure for a fixed program: resolving the same
    identifier twice yields the same handle.
    """

    def resolveUnit(self, unitId):
        raise NotImplementedError

    def resolveType(self, typeId):
        raise NotImplementedError

    def resolveField(self, fieldId):
        raise NotImplementedError

    def unitId(self, unit):
        return UnitId(unit.owner.qualifiedName, unit.signature)

    def typeId(self, type_):
        return TypeId(type_.qualifiedName)

    def fieldId(self, field):
        return FieldId(self.typeId(field.owner), field.name)


class UniverseResolutionStrategy(ResolutionStrategy):
    """Resolves identifiers against the modules registered in a universe.

    - A type resolves if its qualified name denotes a registered module or a
      class of the program.
    - A unit resolves if its owner resolves, the owner binds a function of
      that name, that function is declared by the owner, and its current
      signature equals the persisted one.
    - A field resolves if its owner resolves to a class declaring it.
    """

    def __init__(self, universe):
        self.universe = universe

    def resolveType(self, typeId):
        pyobj = self.universe.lookupName(typeId.qualifiedName)
        if not isinstance(pyobj, (type, types.ModuleType)):
            return None
        result = self.universe.lookupType(pyobj)
        if result is None or result.qualifiedName != typeId.qualifiedName:
            # Reached through an alias
            return None
        return result

    def resolveUnit(self, unitId):
        owner = self.resolveType(unitId.ownerType)
        if owner is None:
            return None
        unit = owner.lookupMethod(unitId.name)
        if unit is None or unit.owner is not owner:
            return None
        if unit.signature != unitId.signature:
            return None
        return unit

    def resolveField(self, fieldId):
        owner = self.resolveType(fieldId.owner)
        if owner is None or not owner.declaresField(fieldId.name):
            return None
        return self.universe.lookupField(owner, fieldId.name)


class MappingResolutionStrategy(ResolutionStrategy):
    """Resolves identifiers through an explicit table of handles.

    Useful where the program elements are not Python objects, and for
    substituting a controlled program in tests.

    Args:
        handles: Iterable of unit, type and field handles; each handle is
            registered under the identifier this strategy assigns to it.
    """

    def __init__(self, handles=()):
        self.table = {}
        for handle in handles:
            self.register(handle)

    def register(self, handle):
        self.table[self.identify(handle)] = handle

    def identify(self, handle):
        if hasattr(handle, "signature"):
            return self.unitId(handle)
        elif hasattr(handle, "owner"):
            return self.fieldId(handle)
        else:
            return self.typeId(handle)

    def resolveUnit(self, unitId):
        return self.table.get(unitId)

    def resolveType(self, typeId):
        return self.table.get(typeId)

    def resolveField(self, fieldId):
        return self.table.get(fieldId)
