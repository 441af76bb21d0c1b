"""Error types raised while resolving location occurrences.

Callers always receive either an ordered (possibly empty) candidate list or
one of these typed failures, so "no match" is never confused with "search
failed".
"""


class GazetteerError(Exception):
    """Base class for every error raised by the gazetteer resolver."""


class QueryConstructionError(GazetteerError):
    """The occurrence text could not be turned into a valid index query."""


class SearchExecutionError(GazetteerError):
    """The index backend failed while executing a query."""


class ResourceAcquisitionError(GazetteerError):
    """A session against the name index could not be obtained."""
