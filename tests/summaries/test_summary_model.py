import unittest

from summarycache.analysis.summaries.summary import EMPTY_SUMMARY, PersistedSummary, Summary


class TestSummary(unittest.TestCase):
    def testCategoriesAreSets(self):
        self.assertEqual(Summary(invokedUnits=["a", "b"]), Summary(invokedUnits=["b", "a"]))
        self.assertEqual(
            hash(Summary(readFields=["x", "y"])), hash(Summary(readFields=["y", "x"]))
        )

    def testCategoriesAreDistinct(self):
        self.assertNotEqual(Summary(invokedUnits=["a"]), Summary(implementationInvokedUnits=["a"]))
        self.assertNotEqual(Summary(readFields=["f"]), Summary(writtenFields=["f"]))

    def testOrderIsKept(self):
        summary = Summary(accessedTypes=["b", "a", "c"])
        self.assertEqual(summary.accessedTypes, ("b", "a", "c"))

    def testImmutable(self):
        summary = Summary(invokedUnits=["a"])
        with self.assertRaises(AttributeError):
            summary.invokedUnits = ("b",)
        with self.assertRaises(AttributeError):
            del summary.invokedUnits
        self.assertEqual(summary.invokedUnits, ("a",))

        persisted = PersistedSummary(summary, "f1")
        with self.assertRaises(AttributeError):
            persisted.fingerprint = "f2"

    def testUnpersistableParts(self):
        self.assertFalse(EMPTY_SUMMARY.hasUnpersistableParts())
        self.assertTrue(Summary(foreignCalls=["libc.malloc"]).hasUnpersistableParts())
        self.assertTrue(Summary(embeddedConstants=[42]).hasUnpersistableParts())

    def testRepr(self):
        self.assertEqual(repr(EMPTY_SUMMARY), "Summary()")
        self.assertEqual(repr(Summary(invokedUnits=["a"])), "Summary(invokedUnits=['a'])")


if __name__ == "__main__":
    unittest.main()
