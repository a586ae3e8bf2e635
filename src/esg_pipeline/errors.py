"""Error taxonomy for the aggregation pipeline.

Parse and shape errors abort the whole run. Metric errors abort only the asset
they occur in. `AggregationWarning` is never raised; it is recorded as a
diagnostic when one asset cannot contribute to a fund-wide average.
"""

from __future__ import annotations


class EsgPipelineError(Exception):
    """Base class for all pipeline errors.

    Attributes:
        path: Dotted metric path the error refers to, if any.
        asset: Name of the asset the error refers to, if any.
    """

    def __init__(self, message: str, *, path: str | None = None, asset: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.asset = asset

    def __str__(self) -> str:
        where = [p for p in (self.asset, self.path) if p]
        if not where:
            return self.message
        return f"{self.message} [{' / '.join(where)}]"


class ParseError(EsgPipelineError):
    """Input text is not valid JSON or not a JSON object."""


class UnsupportedInputShapeError(EsgPipelineError):
    """Input document matches neither the canonical nor the monthly-record shape."""


class InvalidInputError(EsgPipelineError):
    """A metric's value sequence is empty, not a sequence, or holds non-finite numbers."""


class MissingMetricError(EsgPipelineError):
    """An asset lacks a metric required by the fixed catalog."""


class AggregationWarning(UserWarning):
    """One asset could not contribute to a fund-wide metric average."""

    def __init__(self, message: str, *, path: str, asset: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.asset = asset
