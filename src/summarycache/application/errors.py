"""
Error classes for the summary cache.

Every failure of the cache is recoverable from the analysis' point of view:
a summary that cannot be reused is recomputed. The exceptions below mark
where that recovery happens; only InternalError and OptionError are meant
to reach the user.
"""


class SummaryCacheError(Exception):
    """
    Base class for all summary cache errors.
    """
    pass


class OptionError(SummaryCacheError):
    """
    Exception raised for an invalid option value, such as a summary filter
    that is not a valid regular expression.
    """
    pass


class UnresolvedReference(SummaryCacheError):
    """
    Exception raised when a persisted identifier no longer maps to a live
    program element.

    Attributes:
        identifier: The identifier that failed to resolve
    """

    def __init__(self, identifier):
        SummaryCacheError.__init__(self, "Failed to resolve %r" % (identifier,))
        self.identifier = identifier


class MalformedSummaryFile(SummaryCacheError):
    """
    Exception raised when a summary container, or one of its entries, does
    not have the expected shape.
    """
    pass


class InternalError(SummaryCacheError):
    """
    Exception raised for internal errors in the summary cache.

    This exception indicates a bug or unexpected condition in the cache's
    implementation, as opposed to a problem with the cached data.
    """
    pass
