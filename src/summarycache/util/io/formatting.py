"""
Formatting utilities for human-readable output.
"""


def elapsedTime(t):
    """
    Format a time duration in seconds as a human-readable string.

    Args:
        t: Time duration in seconds (float)

    Returns:
        Formatted string with appropriate unit (e.g., "123.4 ms", "45.6 s")

    Example:
        elapsedTime(0.05) -> "50 ms"
        elapsedTime(125.5) -> "2.091 m"
    """
    if t < 1.0:
        return "%5.4g ms" % (t * 1000.0)
    elif t < 60.0:
        return "%5.4g s" % (t)
    elif t < 3600.0:
        return "%5.4g m" % (t / 60.0)
    else:
        return "%5.4g h" % (t / 3600.0)


def ratio(part, whole):
    """
    Format a part/whole count, e.g. "3 out of 4 (75%)".

    Args:
        part: Number of selected items
        whole: Total number of items

    Returns:
        str: Formatted ratio; the percentage is omitted when whole is zero
    """
    if whole:
        return "%d out of %d (%d%%)" % (part, whole, (100 * part) // whole)
    else:
        return "%d out of %d" % (part, whole)
