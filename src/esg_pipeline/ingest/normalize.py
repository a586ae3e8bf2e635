"""Input shape detection and the monthly-record adapter.

Two input shapes are accepted:

- canonical: ``{"fund_name", "analysis_period", "assets_analysis": [...]}`` where
  each asset carries ``time_series.time_points`` and per-category metric series;
- monthly records: ``{"fund": {"name", "assets": [{"name", "data": {month: {...}}}]}}``
  where each month holds flat metric values.

`normalize_document` always returns the canonical shape. Per-asset content is
not validated here; that happens in the asset transformer so one bad asset does
not reject the whole document.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from esg_pipeline.errors import UnsupportedInputShapeError
from esg_pipeline.schema import METRIC_PATHS, MetricPath, set_path

log = logging.getLogger(__name__)

SHAPE_CANONICAL = "canonical"
SHAPE_MONTHLY = "monthly"


def detect_shape(doc: Mapping[str, Any]) -> str:
    """Return which supported input shape `doc` follows.

    Raises:
        UnsupportedInputShapeError: if `doc` matches neither shape.
    """
    if isinstance(doc.get("assets_analysis"), list):
        return SHAPE_CANONICAL
    fund = doc.get("fund")
    if isinstance(fund, Mapping) and isinstance(fund.get("assets"), list):
        return SHAPE_MONTHLY
    raise UnsupportedInputShapeError(
        "Expected either an 'assets_analysis' list or a 'fund' object with an "
        f"'assets' list; got keys {sorted(doc)}"
    )


def normalize_document(doc: Mapping[str, Any]) -> dict[str, Any]:
    """Return `doc` in the canonical input shape.

    Args:
        doc: Parsed input document.

    Returns:
        Dict with `fund_name`, `analysis_period` and `assets_analysis`.

    Raises:
        UnsupportedInputShapeError: on an unknown shape or a missing fund name.
    """
    shape = detect_shape(doc)
    if shape == SHAPE_CANONICAL:
        fund_name = doc.get("fund_name")
        period = doc.get("analysis_period", "")
        assets = list(doc["assets_analysis"])
    else:
        fund = doc["fund"]
        fund_name = fund.get("name")
        assets = [_monthly_asset_to_canonical(a) for a in fund["assets"]]
        period = fund.get("analysis_period") or doc.get("analysis_period") or _period_from(assets)

    if not isinstance(fund_name, str) or not fund_name.strip():
        raise UnsupportedInputShapeError("Fund name is missing or not a string")
    if not isinstance(period, str):
        raise UnsupportedInputShapeError("analysis_period must be a string")

    log.info("Normalized %s input: fund=%s assets=%d", shape, fund_name, len(assets))
    return {"fund_name": fund_name, "analysis_period": period, "assets_analysis": assets}


def _period_from(assets: list[Any]) -> str:
    """Label the analysis period by the first and last time point of the first usable asset."""
    for asset in assets:
        ts = asset.get("time_series") if isinstance(asset, Mapping) else None
        points = ts.get("time_points") if isinstance(ts, Mapping) else None
        if points:
            return points[0] if len(points) == 1 else f"{points[0]}-{points[-1]}"
    return ""


def _lookup(record: Any, key: str) -> Any:
    # month records use mixed case, e.g. "Board_Diversity"
    if not isinstance(record, Mapping):
        return None
    if key in record:
        return record[key]
    lowered = key.lower()
    for k, v in record.items():
        if isinstance(k, str) and k.lower() == lowered:
            return v
    return None


def _month_value(record: Any, path: MetricPath) -> Any:
    node = record
    for key in path[1:]:
        node = _lookup(node, key)
        if node is None:
            return None
    return node


def _monthly_asset_to_canonical(asset: Any) -> Any:
    """Pivot one asset's month → metrics records into per-metric series.

    A metric absent from every month is left out so the transformer reports it
    as missing; a metric absent from only some months keeps a ``None`` gap that
    the summarizer rejects.
    """
    if not isinstance(asset, Mapping) or not isinstance(asset.get("data"), Mapping):
        return asset

    months = list(asset["data"].keys())
    records = [asset["data"][m] for m in months]
    units = asset.get("units") if isinstance(asset.get("units"), Mapping) else {}

    metrics: dict[str, Any] = {}
    for path in METRIC_PATHS:
        values = [_month_value(r, path) for r in records]
        if all(v is None for v in values):
            continue
        set_path(metrics, path, {"values": values, "unit": units.get(path[-1], "")})

    return {
        "name": asset.get("name"),
        "sector": asset.get("sector", ""),
        "time_series": {"time_points": months, "metrics": metrics},
    }
