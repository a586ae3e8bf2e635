"""Time-series summarizer.

Statistics are rounded to 2 decimals with half-away-from-zero rounding. The
rounding goes through the shortest decimal representation of the float, so
``2.675`` rounds to ``2.68`` rather than following its binary expansion.
"""

from __future__ import annotations

import math
import numbers
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Sequence

import numpy as np

from esg_pipeline.errors import InvalidInputError
from esg_pipeline.models import MetricSeries, MetricStats

_CENTS = Decimal("0.01")
# wide enough to quantize any finite double to cents
_WIDE = Context(prec=400)


def round2(value: float) -> float:
    """Round to 2 decimals, halves away from zero."""
    return float(Decimal(repr(float(value))).quantize(_CENTS, rounding=ROUND_HALF_UP, context=_WIDE))


def _validated(values: Any) -> list[float]:
    """Return `values` as a list of floats or raise `InvalidInputError`."""
    if not isinstance(values, (list, tuple)):
        raise InvalidInputError(f"Metric values must be a list, got {type(values).__name__}")
    if len(values) == 0:
        raise InvalidInputError("Metric values are empty")

    for i, v in enumerate(values):
        if isinstance(v, bool) or not isinstance(v, numbers.Real):
            raise InvalidInputError(f"Metric value at index {i} is not a number: {v!r}")

    try:
        arr = np.asarray(values, dtype=float)
    except OverflowError as exc:
        raise InvalidInputError(f"Metric values exceed float range: {exc}") from exc
    bad = np.flatnonzero(~np.isfinite(arr))
    if bad.size:
        i = int(bad[0])
        raise InvalidInputError(f"Metric value at index {i} is not finite: {values[i]!r}")
    return arr.tolist()


def _mean(vals: list[float], lo: float, hi: float) -> float:
    n = len(vals)
    try:
        mean = math.fsum(vals) / n
    except OverflowError:
        mean = math.fsum(v / n for v in vals)
    return min(max(mean, lo), hi)


def _difference(a: float, b: float, what: str) -> float:
    diff = a - b
    if not math.isfinite(diff):
        raise InvalidInputError(f"{what} overflows: {a!r} - {b!r}")
    return diff


def summarize(values: Sequence[float], unit: str = "") -> MetricStats:
    """Compute point statistics for an ordered series of observations.

    Args:
        values: Observations in time order; at least one finite number.
        unit: Unit label copied into the stats block.

    Returns:
        `MetricStats` with `previous` set to None and `year_over_year_change`
        set to 0 when only one observation exists.

    Raises:
        InvalidInputError: if `values` is not a list, is empty, or holds a
            non-numeric or non-finite entry.
    """
    vals = _validated(values)
    lo, hi = min(vals), max(vals)

    current = vals[-1]
    previous = vals[-2] if len(vals) >= 2 else None
    yoy = _difference(current, previous, "year_over_year_change") if previous is not None else 0.0

    return MetricStats(
        current=current,
        previous=previous,
        min=round2(lo),
        max=round2(hi),
        average=round2(_mean(vals, lo, hi)),
        trend=round2(_difference(vals[-1], vals[0], "trend")),
        year_over_year_change=yoy,
        unit=unit,
    )


def build_series(values: Sequence[float], unit: str = "") -> MetricSeries:
    """Wrap raw values and their statistics into a `MetricSeries`."""
    stats = summarize(values, unit)
    return MetricSeries(values=[float(v) for v in values], unit=unit, stats=stats)
