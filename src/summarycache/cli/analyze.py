"""
CLI for the ``analyze`` command: load cached summaries, run the reachability
analysis of a program, and persist the summaries again.
"""

import logging
import sys
from pathlib import Path

from summarycache.analysis.reachability import ReachabilityAnalysis, graphReconstructor
from summarycache.analysis.summaries.hashing import BytecodeHashingStrategy, TrustAllHashingStrategy
from summarycache.analysis.summaries.invalidator import RecordingSummaryInvalidator
from summarycache.analysis.summaries.provider import AstSummaryProvider
from summarycache.analysis.summaries.resolution import UniverseResolutionStrategy
from summarycache.analysis.summaries.storage import SummaryStorage
from summarycache.application.context import AnalysisContext
from summarycache.application.errors import OptionError
from summarycache.application.options import SummaryOptions, addSummaryArguments
from summarycache.language.python.program import AnalysisUniverse
from summarycache.util.application.async_utils import TaskExecutor
from summarycache.util.application.console import Console
from summarycache.util.io.formatting import ratio


def add_analyze_parser(subparsers):
    """Add the analyze subcommand parser."""
    parser = subparsers.add_parser(
        "analyze", help="Analyze a Python program, reusing cached summaries"
    )
    parser.add_argument("program", type=Path, help="Python file to analyze")
    parser.add_argument(
        "--module-name",
        help="Module name to load the program as (default: the file name)",
    )
    parser.add_argument(
        "--entry",
        action="append",
        help="Entry point, a function or Class.method of the program "
        "(may be repeated, default: main)",
    )
    addSummaryArguments(parser)
    parser.add_argument(
        "--trust-cache",
        action="store_true",
        help="Skip validity checks of cached summaries (UNSAFE: reuses stale summaries)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Debug output"
    )
    parser.set_defaults(func=run_analyze)


def findEntryPoints(universe, module, names):
    """Units for the entry point names, relative to module.

    Raises:
        OptionError: If a name does not denote a function of the program.
    """
    units = []
    for name in names:
        unit = universe.lookupUnit(universe.lookupName("%s.%s" % (module.__name__, name)))
        if unit is None:
            raise OptionError("Entry point %r is not a function of %s" % (name, module.__name__))
        units.append(unit)
    return units


def run_analyze(args):
    """Run the analysis described by parsed arguments."""
    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        options = SummaryOptions.fromArgs(args)
    except OptionError as e:
        print("Error: %s" % e, file=sys.stderr)
        return 2

    if not args.program.is_file():
        print("Error: '%s' is not a file" % args.program, file=sys.stderr)
        return 1

    context = AnalysisContext(Console(verbose=args.verbose), options)
    console = context.console
    universe = AnalysisUniverse()

    try:
        with console.scope("load program"):
            module = universe.loadModule(args.program, args.module_name)
        entryPoints = findEntryPoints(universe, module, args.entry or ["main"])
    except OptionError as e:
        print("Error: %s" % e, file=sys.stderr)
        return 2
    except Exception as e:
        print("Error loading %s: %s" % (args.program, e), file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1

    hashing = TrustAllHashingStrategy() if args.trust_cache else BytecodeHashingStrategy()
    invalidator = RecordingSummaryInvalidator()

    with TaskExecutor(options.workers) as executor:
        storage = SummaryStorage(
            AstSummaryProvider(universe),
            UniverseResolutionStrategy(universe),
            options,
            hashing=hashing,
            executor=executor,
            reconstruct=graphReconstructor(invalidator),
        )

        with console.scope("load summaries"):
            context.record("load", storage.loadData())

        analysis = ReachabilityAnalysis(storage)
        with console.scope("reachability"):
            analysis.run(entryPoints)
        context.stats["reachability"].update(analysis.statistics())

        with console.scope("persist summaries"):
            context.record("persist", storage.persistData(invalidator.summariesToSkip()))

    report(context, analysis)
    return 1 if executor.failures else 0


def report(context, analysis):
    console = context.console
    load = context.stats["load"]
    persist = context.stats["persist"]

    if context.options.persistenceEnabled:
        console.output("summaries loaded: %s" % ratio(load["loaded"], load["attempted"]), 0)
    for name, value in context.stats["reachability"].items():
        console.output("%s: %d" % (name, value), 0)
    if context.options.persistenceEnabled:
        console.output("summaries saved: %s" % ratio(persist["saved"], persist["entries"]), 0)

    for unit in sorted(analysis.reachableUnits, key=lambda unit: unit.qualifiedName):
        console.verbose_output(unit.qualifiedName)
