from __future__ import annotations

import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Optional

import pytest

from summarycache.analysis.summaries.provider import AstSummaryProvider
from summarycache.analysis.summaries.resolution import UniverseResolutionStrategy
from summarycache.analysis.summaries.storage import SummaryStorage
from summarycache.application.options import SummaryOptions
from summarycache.language.python.program import AnalysisUniverse
from summarycache.util.application.async_utils import TaskExecutor


SAMPLE_PROGRAM = """
class Shape:
    sides = 0

    def __init__(self, name):
        self.name = name

    def area(self):
        return 0

    def describe(self):
        return "%s: %s" % (self.name, self.area())


class Square(Shape):
    sides = 4

    def __init__(self, size):
        Shape.__init__(self, "square")
        self.size = size

    def area(self):
        return self.size * self.size


def helper(x):
    return x + 1


def run():
    shape = Square(helper(2))
    return shape.describe()


def main():
    shape = Square(helper(2))
    return Square.describe(shape)
"""


@dataclass
class LoadedProgram:
    universe: AnalysisUniverse
    module: ModuleType
    path: Path

    def unit(self, name: str):
        """Unit for a dotted name relative to the module, e.g. "Square.area"."""
        pyobj = self.universe.lookupName("%s.%s" % (self.module.__name__, name))
        unit = self.universe.lookupUnit(pyobj)
        assert unit is not None, name
        return unit

    def type(self, name: str):
        pyobj = self.universe.lookupName("%s.%s" % (self.module.__name__, name))
        result = self.universe.lookupType(pyobj)
        assert result is not None, name
        return result

    def field(self, owner: str, name: str):
        return self.universe.lookupField(self.type(owner), name)


class ProgramLoader:
    """
    Writes program sources to fresh files and loads them as modules.

    Every load uses a new file and, unless a universe is given, a new
    universe: loading the same module name twice simulates a second run of
    the analysis on a reloaded program.
    """

    def __init__(self, tmp_path: Path):
        self._tmp_path = tmp_path
        self._count = 0
        self.names: set[str] = set()

    def __call__(
        self,
        source: str = SAMPLE_PROGRAM,
        *,
        name: str = "Main",
        universe: Optional[AnalysisUniverse] = None,
    ) -> LoadedProgram:
        self._count += 1
        directory = self._tmp_path / ("run%d" % self._count)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / ("%s.py" % name)
        path.write_text(textwrap.dedent(source).lstrip("\n"), encoding="utf-8")

        if universe is None:
            universe = AnalysisUniverse()
        module = universe.loadModule(path, name)
        self.names.add(name)
        return LoadedProgram(universe, module, path)


@pytest.fixture()
def load_program(tmp_path: Path):
    loader = ProgramLoader(tmp_path)
    yield loader
    for name in loader.names:
        sys.modules.pop(name, None)


class CountingProvider(AstSummaryProvider):
    """AST provider that records which units it summarized."""

    def __init__(self, universe):
        AstSummaryProvider.__init__(self, universe)
        self.calls = []

    def getSummary(self, unit):
        self.calls.append(unit)
        return AstSummaryProvider.getSummary(self, unit)


@pytest.fixture()
def make_storage():
    """Factory for a SummaryStorage over a loaded program, with a counting
    provider and a synchronous executor."""
    def _make(program: LoadedProgram, summary_file="", summary_filter=".*", **kwargs):
        options = SummaryOptions(summaryFile=summary_file, summaryFilter=summary_filter)
        kwargs.setdefault("executor", TaskExecutor(enabled=False))
        return SummaryStorage(
            CountingProvider(program.universe),
            UniverseResolutionStrategy(program.universe),
            options,
            **kwargs,
        )
    return _make


@pytest.fixture()
def summary_file(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "summaries.json"


@pytest.fixture()
def sample_program(load_program) -> LoadedProgram:
    return load_program()
