import threading
import unittest

from summarycache.util.application.async_utils import TaskExecutor


class TestTaskExecutor(unittest.TestCase):
    def testTasksMayPostTasks(self):
        results = []
        lock = threading.Lock()

        with TaskExecutor(workers=3) as executor:
            def visit(n):
                with lock:
                    results.append(n)
                if n < 20:
                    executor.postTask(visit, n * 2)
                    executor.postTask(visit, n * 2 + 1)

            executor.postTask(visit, 1)
            self.assertTrue(executor.quiesce(timeout=10))
            self.assertEqual(executor.pending, 0)

        self.assertEqual(sorted(results), list(range(1, 40)))
        self.assertEqual(executor.failures, [])

    def testFailuresAreIsolated(self):
        done = []

        def fail():
            raise ValueError("boom")

        with TaskExecutor(workers=2) as executor:
            executor.postTask(fail)
            executor.postTask(done.append, 1)
            executor.quiesce(timeout=10)

        self.assertEqual(done, [1])
        self.assertEqual(len(executor.failures), 1)
        self.assertEqual(executor.failures[0].name, "fail")
        self.assertIsInstance(executor.failures[0].exception, ValueError)

    def testDisabledRunsInline(self):
        executor = TaskExecutor(enabled=False)
        thread = []

        executor.postTask(lambda: thread.append(threading.current_thread()))
        executor.postTask(lambda: 1 / 0)

        self.assertEqual(thread, [threading.current_thread()])
        self.assertEqual(executor.pending, 0)
        self.assertEqual(len(executor.failures), 1)
        self.assertTrue(executor.quiesce())

    def testQuiesceTimesOut(self):
        release = threading.Event()

        with TaskExecutor(workers=1) as executor:
            executor.postTask(release.wait)
            self.assertFalse(executor.quiesce(timeout=0.05))
            release.set()
            self.assertTrue(executor.quiesce(timeout=10))

    def testKeywordArguments(self):
        seen = {}
        executor = TaskExecutor(enabled=False)
        executor.postTask(seen.update, unit="run", fingerprint="f1")
        self.assertEqual(seen, {"unit": "run", "fingerprint": "f1"})


if __name__ == "__main__":
    unittest.main()
