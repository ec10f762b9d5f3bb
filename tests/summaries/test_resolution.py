from summarycache.analysis.summaries.identifiers import FieldId, TypeId, UnitId
from summarycache.analysis.summaries.resolution import (
    MappingResolutionStrategy,
    UniverseResolutionStrategy,
)


ALIASES = """
import json


class Shape:
    def area(self):
        return 0


class Copy:
    area = Shape.area


Alias = Shape


def helper(x):
    return x + 1


alias = helper
"""


def test_identifiers_of_handles(sample_program):
    resolution = UniverseResolutionStrategy(sample_program.universe)

    assert resolution.unitId(sample_program.unit("run")) == UnitId("Main", "run()")
    assert resolution.unitId(sample_program.unit("Square.area")) == UnitId("Main.Square", "area(self)")
    assert resolution.unitId(sample_program.unit("Shape.__init__")) == UnitId(
        "Main.Shape", "__init__(self, name)"
    )
    assert resolution.typeId(sample_program.type("Square")) == TypeId("Main.Square")
    assert resolution.fieldId(sample_program.field("Shape", "name")) == FieldId(
        TypeId("Main.Shape"), "name"
    )


def test_resolution_is_identity_within_a_run(sample_program):
    resolution = UniverseResolutionStrategy(sample_program.universe)

    for unit in sample_program.universe.allFunctions():
        assert resolution.resolveUnit(resolution.unitId(unit)) is unit
    square = sample_program.type("Square")
    assert resolution.resolveType(resolution.typeId(square)) is square
    field = sample_program.field("Square", "size")
    assert resolution.resolveField(resolution.fieldId(field)) is field


def test_resolution_after_reload(load_program):
    first = load_program()
    second = load_program()
    resolution = UniverseResolutionStrategy(second.universe)

    unitId = UniverseResolutionStrategy(first.universe).unitId(first.unit("Square.area"))
    unit = resolution.resolveUnit(unitId)
    assert unit is second.unit("Square.area")
    assert unit.function is not first.unit("Square.area").function


def test_changed_signature_does_not_resolve(load_program):
    program = load_program("""
        def helper(x, y):
            return x + y
    """)
    resolution = UniverseResolutionStrategy(program.universe)

    assert resolution.resolveUnit(UnitId("Main", "helper(x)")) is None
    assert resolution.resolveUnit(UnitId("Main", "helper(x, y)")) is program.unit("helper")


def test_missing_elements_do_not_resolve(sample_program):
    resolution = UniverseResolutionStrategy(sample_program.universe)

    assert resolution.resolveType(TypeId("Main.Circle")) is None
    assert resolution.resolveType(TypeId("Other")) is None
    assert resolution.resolveUnit(UnitId("Main", "missing()")) is None
    assert resolution.resolveUnit(UnitId("Main.Circle", "area(self)")) is None
    assert resolution.resolveField(FieldId(TypeId("Main.Shape"), "radius")) is None
    assert resolution.resolveField(FieldId(TypeId("Main.Circle"), "name")) is None


def test_module_type(sample_program):
    resolution = UniverseResolutionStrategy(sample_program.universe)

    module = resolution.resolveType(TypeId("Main"))
    assert module is not None
    assert module.isModule
    assert module is sample_program.unit("run").owner


def test_aliases_do_not_resolve(load_program):
    program = load_program(ALIASES)
    resolution = UniverseResolutionStrategy(program.universe)

    assert resolution.resolveType(TypeId("Main.Alias")) is None
    assert resolution.resolveType(TypeId("Main.json")) is None
    assert resolution.resolveUnit(UnitId("Main", "alias(x)")) is None
    assert resolution.resolveUnit(UnitId("Main.Copy", "area(self)")) is None
    assert resolution.resolveUnit(UnitId("Main.Shape", "area(self)")) is program.unit("Shape.area")


def test_field_owner_must_declare(sample_program):
    resolution = UniverseResolutionStrategy(sample_program.universe)

    # name is assigned in Shape.__init__ only
    assert resolution.resolveField(FieldId(TypeId("Main.Shape"), "name")) is not None
    assert resolution.resolveField(FieldId(TypeId("Main.Square"), "name")) is None
    # class attributes count as declarations
    assert resolution.resolveField(FieldId(TypeId("Main.Square"), "sides")) is not None


def test_mapping_resolution(sample_program):
    unit = sample_program.unit("helper")
    type_ = sample_program.type("Shape")
    field = sample_program.field("Shape", "name")
    resolution = MappingResolutionStrategy([unit, type_, field])

    assert resolution.resolveUnit(UnitId("Main", "helper(x)")) is unit
    assert resolution.resolveType(TypeId("Main.Shape")) is type_
    assert resolution.resolveField(FieldId(TypeId("Main.Shape"), "name")) is field
    assert resolution.resolveUnit(UnitId("Main", "run()")) is None
    assert resolution.resolveType(TypeId("Main.Square")) is None
