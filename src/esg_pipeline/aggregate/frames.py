"""Flatten analysis results into pandas tables.

Chart code reads series by fixed paths such as
``assets_analysis[i].time_series.metrics.environmental.CO2_emission.values``;
these helpers expose the same data as tidy DataFrames instead.
"""
from __future__ import annotations

from typing import Any, Mapping

import pandas as pd

from esg_pipeline.models import AnalysisResult
from esg_pipeline.schema import METRIC_PATHS, get_path

SERIES_COLUMNS = ["asset", "sector", "category", "metric", "time_point", "value", "unit"]
STATS_COLUMNS = [
    "asset",
    "sector",
    "category",
    "metric",
    "unit",
    "current",
    "previous",
    "min",
    "max",
    "average",
    "trend",
    "year_over_year_change",
]


def _document(result: AnalysisResult | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(result, AnalysisResult):
        return result.to_document()
    return result


def result_to_frame(result: AnalysisResult | Mapping[str, Any]) -> pd.DataFrame:
    """Return one row per asset, metric and time point.

    Args:
        result: Finished analysis, as a model or its document.

    Returns:
        pandas.DataFrame with columns `asset`, `sector`, `category`, `metric`,
        `time_point`, `value`, `unit`. `metric` is the path below the category,
        e.g. ``board_diversity.female_percentage``.
    """
    rows: list[dict[str, Any]] = []
    for asset in _document(result)["assets_analysis"]:
        ts = asset["time_series"]
        for path in METRIC_PATHS:
            series = get_path(ts["metrics"], path)
            for point, value in zip(ts["time_points"], series["values"]):
                rows.append(
                    {
                        "asset": asset["name"],
                        "sector": asset.get("sector", ""),
                        "category": path[0],
                        "metric": ".".join(path[1:]),
                        "time_point": point,
                        "value": value,
                        "unit": series.get("unit", ""),
                    }
                )
    return pd.DataFrame(rows, columns=SERIES_COLUMNS)


def stats_to_frame(result: AnalysisResult | Mapping[str, Any]) -> pd.DataFrame:
    """Return one row per asset and metric with its statistics.

    `previous` is NaN for single-observation series.
    """
    rows: list[dict[str, Any]] = []
    for asset in _document(result)["assets_analysis"]:
        for path in METRIC_PATHS:
            stats = get_path(asset["time_series"]["metrics"], path)["stats"]
            row = {
                "asset": asset["name"],
                "sector": asset.get("sector", ""),
                "category": path[0],
                "metric": ".".join(path[1:]),
            }
            row.update({c: stats.get(c) for c in STATS_COLUMNS[4:]})
            rows.append(row)

    pdf = pd.DataFrame(rows, columns=STATS_COLUMNS)
    pdf["previous"] = pdf["previous"].astype(float)
    return pdf
