import unittest

from summarycache.analysis.summaries.identifiers import (
    FieldId,
    TypeId,
    UnitId,
    isUnstable,
    isUnstableName,
)
from summarycache.application.errors import MalformedSummaryFile


class TestUnitId(unittest.TestCase):
    def testEqualAcrossInstances(self):
        self.assertEqual(UnitId("Main", "run()"), UnitId("Main", "run()"))
        self.assertEqual(hash(UnitId("Main", "run()")), hash(UnitId("Main", "run()")))

    def testSignatureIsPartOfIdentity(self):
        self.assertNotEqual(UnitId("Main", "helper(x)"), UnitId("Main", "helper(x, y)"))

    def testName(self):
        unitId = UnitId("Main.Square", "area(self)")
        self.assertEqual(unitId.name, "area")
        self.assertEqual(unitId.ownerType, TypeId("Main.Square"))
        self.assertEqual(str(unitId), "Main.Square.area(self)")

    def testPayload(self):
        unitId = UnitId("Main", "run()")
        self.assertEqual(unitId.toPayload(), {"owner": "Main", "signature": "run()"})
        self.assertEqual(UnitId.fromPayload(unitId.toPayload()), unitId)

    def testMalformedPayload(self):
        for payload in (None, "Main.run()", {}, {"owner": "Main"}, {"owner": "", "signature": "run()"},
                        {"owner": "Main", "signature": 3}):
            with self.assertRaises(MalformedSummaryFile):
                UnitId.fromPayload(payload)


class TestTypeAndFieldIds(unittest.TestCase):
    def testTypeIdPayloadIsTheName(self):
        self.assertEqual(TypeId("Main.Shape").toPayload(), "Main.Shape")
        self.assertEqual(TypeId.fromPayload("Main.Shape"), TypeId("Main.Shape"))
        with self.assertRaises(MalformedSummaryFile):
            TypeId.fromPayload(["Main.Shape"])

    def testFieldIdPayload(self):
        fieldId = FieldId(TypeId("Main.Shape"), "name")
        self.assertEqual(fieldId.toPayload(), {"owner": "Main.Shape", "name": "name"})
        self.assertEqual(FieldId.fromPayload(fieldId.toPayload()), fieldId)

    def testKindsNeverCompareEqual(self):
        self.assertNotEqual(TypeId("Main"), UnitId("Main", "run()"))
        self.assertNotEqual(TypeId("Main.Shape"), FieldId(TypeId("Main"), "Shape"))

    def testSorting(self):
        ids = [UnitId("Main", "run()"), UnitId("Main.Shape", "area(self)"), UnitId("Main", "helper(x)")]
        self.assertEqual(
            [str(unitId) for unitId in sorted(ids)],
            ["Main.helper(x)", "Main.run()", "Main.Shape.area(self)"],
        )


class TestUnstable(unittest.TestCase):
    def testStableNames(self):
        self.assertFalse(isUnstableName("Main.Shape"))
        self.assertFalse(isUnstable(TypeId("Main.Shape")))
        self.assertFalse(isUnstable(UnitId("Main.Shape", "area(self)")))
        self.assertFalse(isUnstable(FieldId(TypeId("Main.Shape"), "name")))

    def testClosureTypes(self):
        closure = TypeId("Main.makeLocal.<locals>.Local")
        self.assertTrue(isUnstable(closure))
        self.assertTrue(isUnstable(FieldId(closure, "value")))
        self.assertTrue(isUnstable(UnitId(closure.qualifiedName, "__init__(self)")))

    def testGeneratedNames(self):
        self.assertTrue(isUnstable(TypeId("Main.Config$$ProxyImpl")))
        self.assertTrue(isUnstable(TypeId("list[int]")))
        self.assertTrue(isUnstable(UnitId("Main", "<lambda>(x)")))

    def testCustomMarkers(self):
        self.assertTrue(isUnstable(TypeId("Main.Generated_1"), markers=("Generated_",)))
        self.assertFalse(isUnstable(TypeId("Main.<locals>"), markers=("Generated_",)))


if __name__ == "__main__":
    unittest.main()
