"""On-disk container of persisted summaries.

The container is a single JSON document::

    {
      "format_version": 1,
      "entries": [
        {"unit": {"owner": ..., "signature": ...},
         "summary": {"fingerprint": ..., "invoked": [...], ...}},
        ...
      ]
    }

Entries are written sorted by unit identifier with sorted keys, so writing
the same summaries twice produces identical bytes. The file is replaced
atomically.
"""

import json

from summarycache.application.errors import MalformedSummaryFile
from summarycache.util.io import filesystem
from .codec import SerializedSummary
from .identifiers import UnitId

FORMAT_VERSION = 1


def dumps(summaries):
    """Render a mapping of UnitId -> SerializedSummary as container text."""
    entries = [
        {"unit": unitId.toPayload(), "summary": summaries[unitId].toPayload()}
        for unitId in sorted(summaries)
    ]
    payload = {"format_version": FORMAT_VERSION, "entries": entries}
    return json.dumps(payload, sort_keys=True, indent=1, ensure_ascii=True) + "\n"


def writeContainer(path, summaries):
    """Atomically write a mapping of UnitId -> SerializedSummary to path."""
    filesystem.writeTextAtomic(path, dumps(summaries))


def loads(text):
    """Parse container text into its raw entries.

    Only the top-level structure is checked here; entries are validated one
    by one with parseEntry() so that a single bad entry can be skipped.

    Returns:
        list: The raw entry objects.

    Raises:
        MalformedSummaryFile: If the text is not a container of this format.
    """
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise MalformedSummaryFile("Summary file is not valid JSON: %s" % e)

    if not isinstance(payload, dict):
        raise MalformedSummaryFile("Summary file does not hold a JSON object")
    version = payload.get("format_version")
    if version != FORMAT_VERSION:
        raise MalformedSummaryFile(
            "Unsupported summary file version %r (expected %d)" % (version, FORMAT_VERSION)
        )
    entries = payload.get("entries")
    if not isinstance(entries, list):
        raise MalformedSummaryFile("Summary file has no entry list")
    return entries


def readContainer(path):
    """Read the raw entries of the container at path.

    Raises:
        OSError: If the file can not be read (FileNotFoundError if missing).
        MalformedSummaryFile: If the contents are not a valid container.
    """
    try:
        text = filesystem.readText(path)
    except UnicodeDecodeError as e:
        raise MalformedSummaryFile("Summary file is not UTF-8 text: %s" % e)
    return loads(text)


def parseEntry(entry):
    """Convert one raw entry to (UnitId, SerializedSummary).

    Raises:
        MalformedSummaryFile: If the entry does not have the expected shape.
    """
    if not isinstance(entry, dict):
        raise MalformedSummaryFile("Expected an entry object, got %r" % (entry,))
    return UnitId.fromPayload(entry.get("unit")), SerializedSummary.fromPayload(entry.get("summary"))
