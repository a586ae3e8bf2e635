"""Fund aggregator.

For every catalog metric, the fund statistic is the arithmetic mean of the
assets' `year_over_year_change`. An asset that cannot contribute to one metric
is skipped for that metric only and recorded as an `AggregationWarning`
diagnostic; a metric that no asset can contribute to falls back to 0.
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Any, Mapping, Sequence

from esg_pipeline.errors import AggregationWarning
from esg_pipeline.models import AssetAnalysis, Diagnostic, FundStatistics
from esg_pipeline.schema import METRIC_PATHS, MetricPath, dotted, get_path, set_path

log = logging.getLogger(__name__)

AssetLike = AssetAnalysis | Mapping[str, Any]


def _as_document(asset: Any) -> Any:
    if isinstance(asset, AssetAnalysis):
        return asset.model_dump()
    return asset


def _asset_name(asset: Any, index: int) -> str:
    name = asset.get("name") if isinstance(asset, Mapping) else None
    return name if isinstance(name, str) and name else f"assets_analysis[{index}]"


def _yoy_change(asset: Any, path: MetricPath) -> float:
    """Return the asset's `year_over_year_change` for `path`.

    Raises:
        KeyError: if the metric or its stats block is missing.
        TypeError: if the value is not a finite number.
    """
    if not isinstance(asset, Mapping):
        raise KeyError(dotted(path))
    metric = get_path(asset, ("time_series", "metrics", *path))
    value = get_path(metric, ("stats", "year_over_year_change"))
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise TypeError(f"year_over_year_change is not a finite number: {value!r}")
    return float(value)


def _record(warning: AggregationWarning, diagnostics: list[Diagnostic] | None) -> None:
    log.warning("%s (asset=%s path=%s)", warning.message, warning.asset, warning.path)
    if diagnostics is not None:
        diagnostics.append(
            Diagnostic(
                level="warning",
                code=type(warning).__name__,
                message=warning.message,
                asset=warning.asset,
                path=warning.path,
            )
        )


def average_metric_change(
    assets: Sequence[Any],
    path: MetricPath,
    diagnostics: list[Diagnostic] | None = None,
) -> float:
    """Average `year_over_year_change` of one metric across assets.

    Args:
        assets: Asset documents (dicts as dumped from `AssetAnalysis`).
        path: Catalog path of the metric.
        diagnostics: Optional list that receives one warning per skipped asset.

    Returns:
        Mean over the assets that carry the metric, or 0.0 when none do.
    """
    name = dotted(path)
    changes: list[float] = []
    for i, asset in enumerate(assets):
        try:
            changes.append(_yoy_change(asset, path))
        except (KeyError, TypeError) as exc:
            reason = "missing" if isinstance(exc, KeyError) else str(exc)
            _record(
                AggregationWarning(
                    f"Asset cannot contribute to {name}: {reason}",
                    path=name,
                    asset=_asset_name(asset, i),
                ),
                diagnostics,
            )

    if not changes:
        return 0.0
    n = len(changes)
    try:
        return math.fsum(changes) / n
    except OverflowError:
        return math.fsum(c / n for c in changes)


def aggregate_fund(
    assets: Sequence[AssetLike],
    diagnostics: list[Diagnostic] | None = None,
) -> FundStatistics:
    """Compute fund-wide average statistics over all assets.

    Never raises on bad asset data: per-asset problems become warnings in
    `diagnostics` and the affected metric falls back as described above.

    Args:
        assets: Transformed assets, as models or plain documents.
        diagnostics: Optional list that receives aggregation warnings.

    Returns:
        A frozen `FundStatistics`.
    """
    docs = [_as_document(a) for a in assets]
    tree: dict[str, Any] = {}
    for path in METRIC_PATHS:
        set_path(tree, path, average_metric_change(docs, path, diagnostics))

    log.info("Aggregated fund statistics over %d assets", len(docs))
    return FundStatistics.model_validate(tree)
