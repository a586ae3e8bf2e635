"""Asset transformer.

Builds one asset's normalized `time_series` block by summarizing every slot of
the fixed metric catalog. Failures name the asset and the dotted metric path.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from dask import compute, delayed  # type: ignore[attr-defined]

from esg_pipeline.errors import EsgPipelineError, InvalidInputError, MissingMetricError
from esg_pipeline.models import AssetAnalysis, AssetMetrics, Diagnostic, MetricSeries
from esg_pipeline.schema import METRIC_PATHS, MetricPath, dotted, get_path, set_path
from esg_pipeline.transform.summarize import build_series

log = logging.getLogger(__name__)


def _raw_series(raw_metric: Any, path: str, asset: str) -> tuple[Any, str]:
    """Split a raw metric into `(values, unit)`.

    A raw metric is either ``{"values": [...], "unit": "..."}`` or a bare list.
    Any precomputed ``stats`` block is ignored.
    """
    if isinstance(raw_metric, (list, tuple)):
        return raw_metric, ""
    if not isinstance(raw_metric, Mapping):
        raise InvalidInputError(
            f"Metric must be an object or a list, got {type(raw_metric).__name__}", path=path, asset=asset
        )
    if "values" not in raw_metric:
        raise InvalidInputError("Metric has no 'values'", path=path, asset=asset)
    unit = raw_metric.get("unit") or ""
    if not isinstance(unit, str):
        raise InvalidInputError(f"Metric unit must be a string, got {unit!r}", path=path, asset=asset)
    return raw_metric["values"], unit


def _metric_series(metrics: Mapping[str, Any], path: MetricPath, asset: str, n_points: int) -> MetricSeries:
    name = dotted(path)
    try:
        raw_metric = get_path(metrics, path)
    except KeyError:
        raise MissingMetricError(f"Required metric {name} is missing", path=name, asset=asset) from None

    values, unit = _raw_series(raw_metric, name, asset)
    try:
        series = build_series(values, unit)
    except InvalidInputError as exc:
        raise InvalidInputError(exc.message, path=name, asset=asset) from exc

    if len(series.values) != n_points:
        raise InvalidInputError(
            f"Metric has {len(series.values)} values for {n_points} time points", path=name, asset=asset
        )
    return series


def transform_asset(raw_asset: Mapping[str, Any]) -> AssetAnalysis:
    """Summarize every catalog metric of one asset.

    Args:
        raw_asset: ``{"name", "sector", "time_series": {"time_points", "metrics"}}``
            with each metric holding a raw value sequence.

    Returns:
        A new frozen `AssetAnalysis`; `raw_asset` is left untouched.

    Raises:
        MissingMetricError: if a catalog metric is absent.
        InvalidInputError: if the asset block or a metric's values are malformed.
    """
    if not isinstance(raw_asset, Mapping):
        raise InvalidInputError(f"Asset must be an object, got {type(raw_asset).__name__}")

    name = raw_asset.get("name")
    if not isinstance(name, str) or not name:
        raise InvalidInputError("Asset name is missing or not a string", path="name")
    sector = raw_asset.get("sector") or ""
    if not isinstance(sector, str):
        raise InvalidInputError(f"Asset sector must be a string, got {sector!r}", path="sector", asset=name)

    ts = raw_asset.get("time_series")
    if not isinstance(ts, Mapping):
        raise InvalidInputError("Asset has no time_series block", path="time_series", asset=name)
    time_points = ts.get("time_points")
    if not isinstance(time_points, (list, tuple)) or not all(isinstance(t, str) for t in time_points):
        raise InvalidInputError("time_points must be a list of strings", path="time_series.time_points", asset=name)
    metrics = ts.get("metrics")
    if not isinstance(metrics, Mapping):
        raise InvalidInputError("time_series has no metrics block", path="time_series.metrics", asset=name)

    tree: dict[str, Any] = {}
    for path in METRIC_PATHS:
        set_path(tree, path, _metric_series(metrics, path, name, len(time_points)))

    return AssetAnalysis(
        name=name,
        sector=sector,
        time_series={"time_points": list(time_points), "metrics": AssetMetrics.model_validate(tree)},
    )


def _asset_label(raw_asset: Any, index: int) -> str:
    name = raw_asset.get("name") if isinstance(raw_asset, Mapping) else None
    return name if isinstance(name, str) and name else f"assets_analysis[{index}]"


def _try_transform(raw_asset: Any) -> tuple[AssetAnalysis | None, EsgPipelineError | None]:
    """Runs inside a worker (delayed task); returns the error instead of raising."""
    try:
        return transform_asset(raw_asset), None
    except (InvalidInputError, MissingMetricError) as exc:
        return None, exc


def transform_assets(
    raw_assets: Iterable[Any],
    *,
    fail_fast: bool = False,
    parallel: bool = False,
) -> tuple[list[AssetAnalysis], list[Diagnostic]]:
    """Transform every asset, isolating failures per asset.

    Args:
        raw_assets: Canonical raw asset blocks.
        fail_fast: Re-raise the first asset error instead of skipping the asset.
        parallel: Run the per-asset transforms as dask delayed tasks on threads.

    Returns:
        A tuple of (transformed_assets_in_input_order, error_diagnostics).
    """
    raw_list = list(raw_assets)

    if parallel and len(raw_list) > 1:
        tasks = [delayed(_try_transform)(a) for a in raw_list]
        outcomes = list(compute(*tasks, scheduler="threads"))
    else:
        outcomes = []
        for a in raw_list:
            outcome = _try_transform(a)
            if fail_fast and outcome[1] is not None:
                raise outcome[1]
            outcomes.append(outcome)

    done: list[AssetAnalysis] = []
    diagnostics: list[Diagnostic] = []
    for i, (asset, err) in enumerate(outcomes):
        if err is None:
            done.append(asset)  # type: ignore[arg-type]
            continue
        if fail_fast:
            raise err
        label = err.asset or _asset_label(raw_list[i], i)
        log.error("Skipping asset %s: %s", label, err)
        diagnostics.append(
            Diagnostic(level="error", code=type(err).__name__, message=err.message, asset=label, path=err.path)
        )

    log.info("Transformed %d of %d assets", len(done), len(raw_list))
    return done, diagnostics
