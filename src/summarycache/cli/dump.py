"""
CLI for the ``dump`` command: print the contents of a summary file.
"""

import json
import sys
from pathlib import Path

from summarycache.analysis.summaries import container
from summarycache.application.errors import MalformedSummaryFile

_CATEGORIES = (
    ("invoked", "invoked"),
    ("implementation_invoked", "implementation invoked"),
    ("accessed_types", "accessed types"),
    ("instantiated_types", "instantiated types"),
    ("read_fields", "read fields"),
    ("written_fields", "written fields"),
)


def add_dump_parser(subparsers):
    """Add the dump subcommand parser."""
    parser = subparsers.add_parser("dump", help="Print the contents of a summary file")
    parser.add_argument("summary_file", type=Path, help="Summary file to print")
    parser.add_argument(
        "--format",
        "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.set_defaults(func=run_dump)


def generate_text_output(summaries):
    output = []
    output.append("Summaries (%d)" % len(summaries))
    output.append("=" * 50)
    for unitId in sorted(summaries):
        summary = summaries[unitId]
        output.append("")
        output.append(str(unitId))
        output.append("  fingerprint: %s" % summary.fingerprint)
        payload = summary.toPayload()
        for key, label in _CATEGORIES:
            values = payload[key]
            if values:
                output.append("  %s:" % label)
                for value in values:
                    if isinstance(value, dict):
                        value = ".".join(str(part) for part in value.values())
                    output.append("    - %s" % value)
    return "\n".join(output)


def generate_json_output(summaries):
    data = {
        str(unitId): summaries[unitId].toPayload()
        for unitId in sorted(summaries)
    }
    return json.dumps(data, indent=2, sort_keys=True)


def run_dump(args):
    try:
        entries = container.readContainer(args.summary_file)
        summaries = dict(container.parseEntry(entry) for entry in entries)
    except (OSError, MalformedSummaryFile) as e:
        print("Error: %s" % e, file=sys.stderr)
        return 1

    if args.format == "json":
        print(generate_json_output(summaries))
    else:
        print(generate_text_output(summaries))
    return 0
