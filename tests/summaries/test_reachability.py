import linecache
import logging

from summarycache.analysis.reachability import ReachabilityAnalysis, graphReconstructor
from summarycache.analysis.summaries.invalidator import RecordingSummaryInvalidator
from summarycache.util.application.async_utils import TaskExecutor


def qualified_names(units):
    return sorted(unit.qualifiedName for unit in units)


def test_reachable_from_main(sample_program, make_storage):
    analysis = ReachabilityAnalysis(make_storage(sample_program))

    reachable = analysis.run([sample_program.unit("main")])

    assert qualified_names(reachable) == [
        "Main.Shape.__init__",
        "Main.Shape.area",
        "Main.Shape.describe",
        "Main.Square.__init__",
        "Main.Square.area",
        "Main.helper",
        "Main.main",
    ]
    assert analysis.instantiatedTypes == {sample_program.type("Square")}
    assert analysis.writtenFields == {
        sample_program.field("Shape", "name"),
        sample_program.field("Square", "size"),
    }
    assert analysis.readFields == {
        sample_program.field("Shape", "name"),
        sample_program.field("Square", "size"),
    }
    assert analysis.invocations[sample_program.unit("Shape.describe")] == frozenset(
        [sample_program.unit("Shape.area"), sample_program.unit("Square.area")]
    )


def test_unresolved_receiver_calls_are_not_followed(sample_program, make_storage):
    analysis = ReachabilityAnalysis(make_storage(sample_program))

    reachable = analysis.run([sample_program.unit("run")])

    assert qualified_names(reachable) == [
        "Main.Shape.__init__",
        "Main.Square.__init__",
        "Main.helper",
        "Main.run",
    ]


def test_statistics(sample_program, make_storage):
    analysis = ReachabilityAnalysis(make_storage(sample_program))
    analysis.run([sample_program.unit("main")])

    assert analysis.statistics() == {
        "reachable units": 7,
        "instantiated types": 1,
        "accessed types": 2,
        "read fields": 2,
        "written fields": 2,
    }


def test_threaded_run_matches_synchronous_run(load_program, make_storage):
    synchronous = load_program()
    threaded = load_program()

    expected = ReachabilityAnalysis(make_storage(synchronous)).run([synchronous.unit("main")])
    with TaskExecutor(workers=4) as executor:
        storage = make_storage(threaded, executor=executor)
        reachable = ReachabilityAnalysis(storage).run([threaded.unit("main")])

    assert qualified_names(reachable) == qualified_names(expected)
    assert storage.provider.calls and len(storage.provider.calls) == len(reachable)


def test_analysis_uses_cached_summaries(load_program, make_storage, summary_file):
    first = load_program()
    before = make_storage(first, summary_file)
    ReachabilityAnalysis(before).run([first.unit("main")])
    before.persistData()

    second = load_program()
    after = make_storage(second, summary_file)
    assert after.loadData().loaded == 7

    reachable = ReachabilityAnalysis(after).run([second.unit("main")])

    assert len(reachable) == 7
    assert after.provider.calls == []
    # Reused summaries get their graphs rebuilt
    assert all(unit.analyzedGraph is not None for unit in reachable)


def test_reconstructor_invalidates_units_without_source(sample_program, caplog):
    invalidator = RecordingSummaryInvalidator()
    reconstruct = graphReconstructor(invalidator)
    helper = sample_program.unit("helper")
    run = sample_program.unit("run")

    reconstruct(helper)
    sample_program.path.unlink()
    linecache.clearcache()
    with caplog.at_level(logging.WARNING):
        reconstruct(run)

    assert helper.analyzedGraph is not None
    assert invalidator.summariesToSkip() == frozenset([run])
    assert "Cannot rebuild the graph" in caplog.text
