"""
Error taxonomy for diagram lookups.

Each error carries a ``category`` that the API layer reports to callers.
"""
from typing import Optional


class DiagramLookupError(Exception):
    """Base class for lookup failures"""
    category = "lookup_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class QueryValidationError(DiagramLookupError):
    """Missing or blank query"""
    category = "validation_error"


class UpstreamTimeout(DiagramLookupError):
    """A collaborator exceeded its time bound"""
    category = "upstream_timeout"


class UpstreamError(DiagramLookupError):
    """The media repository answered with a failure"""
    category = "upstream_error"

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AggregationFailure(DiagramLookupError):
    """Every search attempt for a lookup failed"""
    category = "aggregation_failure"
