import re
import threading

from summarycache.analysis.summaries.eligibility import SummaryFilter
from summarycache.analysis.summaries.invalidator import RecordingSummaryInvalidator
from summarycache.application.options import DEFAULT_SUMMARY_FILTER


def test_full_match(sample_program):
    run = sample_program.unit("run")
    summaryFilter = SummaryFilter(r"Main\.run")

    assert summaryFilter.matches(run)
    assert not summaryFilter.matches(sample_program.unit("helper"))
    assert not SummaryFilter(r"Main\.ru").matches(run)
    assert not SummaryFilter(r"run").matches(run)


def test_methods_match_by_qualified_name(sample_program):
    summaryFilter = SummaryFilter(r"Main\.Square\..*")

    assert summaryFilter.matches(sample_program.unit("Square.area"))
    assert summaryFilter.matches(sample_program.unit("Square.__init__"))
    assert not summaryFilter.matches(sample_program.unit("Shape.area"))


def test_default_filter(sample_program):
    summaryFilter = SummaryFilter(DEFAULT_SUMMARY_FILTER)

    assert summaryFilter.matches(sample_program.unit("main"))
    assert not summaryFilter.matches(sample_program.unit("run"))


def test_compiled_pattern(sample_program):
    summaryFilter = SummaryFilter(re.compile(r"main\.run", re.IGNORECASE))
    assert summaryFilter.matches(sample_program.unit("run"))


def test_skip_set_wins(sample_program):
    run = sample_program.unit("run")
    summaryFilter = SummaryFilter(".*")

    assert summaryFilter.eligible(run, frozenset())
    assert not summaryFilter.eligible(run, frozenset([run]))


def test_recording_invalidator(sample_program):
    invalidator = RecordingSummaryInvalidator()
    units = sample_program.universe.allFunctions()

    threads = [threading.Thread(target=invalidator.invalidate, args=(unit,)) for unit in units]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    invalidator.invalidate(units[0])

    skipSet = invalidator.summariesToSkip()
    assert isinstance(skipSet, frozenset)
    assert skipSet == frozenset(units)
