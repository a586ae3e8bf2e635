"""
tests/conftest.py
=================
Shared pytest fixtures: builders for raw fund documents in both input shapes.
"""
from __future__ import annotations

from typing import Any, Callable

import pytest

from esg_pipeline.schema import METRIC_PATHS, MetricPath, set_path

MONTHS = ["January", "February", "March"]

BASE_VALUES: dict[MetricPath, list[float]] = {
    ("environmental", "CO2_emission"): [120.0, 110.0, 104.5],
    ("environmental", "water_usage"): [5000.0, 4800.0, 4750.0],
    ("environmental", "renewable_energy_percentage"): [30.0, 32.5, 35.0],
    ("social", "board_diversity", "female_percentage"): [25.0, 25.0, 30.0],
    ("social", "board_diversity", "minority_percentage"): [10.0, 12.0, 12.0],
    ("social", "employee_satisfaction"): [7.1, 7.3, 7.2],
    ("social", "pay_equity_ratio"): [0.91, 0.92, 0.94],
    ("governance", "board_independence"): [60.0, 60.0, 65.0],
    ("governance", "ethics_violations"): [3.0, 2.0, 1.0],
    ("governance", "cybersecurity_incidents"): [1.0, 0.0, 2.0],
}

UNITS = {"CO2_emission": "tCO2e", "water_usage": "m3", "renewable_energy_percentage": "%"}


def _raw_asset(
    name: str = "Acme Energy",
    sector: str = "Utilities",
    time_points: list[str] | None = None,
    overrides: dict[MetricPath, Any] | None = None,
    drop: tuple[MetricPath, ...] = (),
) -> dict[str, Any]:
    points = list(time_points or MONTHS)
    metrics: dict[str, Any] = {}
    for path in METRIC_PATHS:
        if path in drop:
            continue
        values = (overrides or {}).get(path, BASE_VALUES[path][: len(points)])
        set_path(metrics, path, {"values": values, "unit": UNITS.get(path[-1], "")})
    return {
        "name": name,
        "sector": sector,
        "time_series": {"time_points": points, "metrics": metrics},
    }


@pytest.fixture
def make_raw_asset() -> Callable[..., dict[str, Any]]:
    return _raw_asset


@pytest.fixture
def canonical_doc() -> dict[str, Any]:
    return {
        "fund_name": "Green Future Fund",
        "analysis_period": "Q1",
        "assets_analysis": [
            _raw_asset("Acme Energy", "Utilities"),
            _raw_asset(
                "Blue Water Co",
                "Industrials",
                overrides={
                    ("environmental", "CO2_emission"): [80.0, 82.0, 78.0],
                    ("governance", "ethics_violations"): [0.0, 1.0, 0.0],
                },
            ),
        ],
    }


@pytest.fixture
def monthly_doc() -> dict[str, Any]:
    def month(i: int) -> dict[str, Any]:
        rec: dict[str, Any] = {}
        for path, values in BASE_VALUES.items():
            key = "Board_Diversity" if path[1] == "board_diversity" else path[1]
            if len(path) == 3:
                rec.setdefault(key, {})[path[2]] = values[i]
            else:
                rec[key] = values[i]
        return rec

    return {
        "fund": {
            "name": "Green Future Fund",
            "assets": [
                {"name": "Acme Energy", "sector": "Utilities", "data": {m: month(i) for i, m in enumerate(MONTHS)}},
            ],
        }
    }
