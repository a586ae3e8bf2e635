"""Pydantic models for the fund analysis document.

The models mirror the output document field for field; downstream chart and
report code reads these keys by path, so the names are part of the contract.
All models are frozen: a finished analysis is never modified in place.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class MetricStats(_Frozen):
    """Point statistics of one metric time series.

    Attributes:
        current: Last observation.
        previous: Second-to-last observation, None for a single observation.
        min: Smallest observation (2 decimals).
        max: Largest observation (2 decimals).
        average: Arithmetic mean (2 decimals).
        trend: Last minus first observation (2 decimals).
        year_over_year_change: Last minus second-to-last observation, 0 for a
            single observation.
        unit: Unit label, empty when unknown.
    """
    current: float
    previous: float | None = None
    min: float
    max: float
    average: float
    trend: float
    year_over_year_change: float
    unit: str = ""


class MetricSeries(_Frozen):
    """Raw values of one metric plus their statistics."""
    values: list[float] = Field(..., min_length=1)
    unit: str = ""
    stats: MetricStats


class BoardDiversitySeries(_Frozen):
    female_percentage: MetricSeries
    minority_percentage: MetricSeries


class EnvironmentalSeries(_Frozen):
    CO2_emission: MetricSeries
    water_usage: MetricSeries
    renewable_energy_percentage: MetricSeries


class SocialSeries(_Frozen):
    board_diversity: BoardDiversitySeries
    employee_satisfaction: MetricSeries
    pay_equity_ratio: MetricSeries


class GovernanceSeries(_Frozen):
    board_independence: MetricSeries
    ethics_violations: MetricSeries
    cybersecurity_incidents: MetricSeries


class AssetMetrics(_Frozen):
    environmental: EnvironmentalSeries
    social: SocialSeries
    governance: GovernanceSeries


class TimeSeries(_Frozen):
    time_points: list[str]
    metrics: AssetMetrics


class AssetAnalysis(_Frozen):
    """Normalized time series block of one fund holding."""
    name: str
    sector: str = ""
    time_series: TimeSeries


class BoardDiversityStatistics(_Frozen):
    female_percentage: float = 0.0
    minority_percentage: float = 0.0


class EnvironmentalStatistics(_Frozen):
    CO2_emission: float = 0.0
    water_usage: float = 0.0
    renewable_energy_percentage: float = 0.0


class SocialStatistics(_Frozen):
    board_diversity: BoardDiversityStatistics = BoardDiversityStatistics()
    employee_satisfaction: float = 0.0
    pay_equity_ratio: float = 0.0


class GovernanceStatistics(_Frozen):
    board_independence: float = 0.0
    ethics_violations: float = 0.0
    cybersecurity_incidents: float = 0.0


class FundStatistics(_Frozen):
    """Fund-wide average of each metric's year-over-year change."""
    environmental: EnvironmentalStatistics = EnvironmentalStatistics()
    social: SocialStatistics = SocialStatistics()
    governance: GovernanceStatistics = GovernanceStatistics()


class AnalysisResult(_Frozen):
    """The complete fund analysis document."""
    fund_name: str
    analysis_period: str
    assets_analysis: list[AssetAnalysis]
    fund_statistics: FundStatistics

    def to_document(self) -> dict[str, Any]:
        """Return the result as plain dicts and lists, ready for JSON."""
        return self.model_dump(mode="json", exclude_none=True)


class Diagnostic(_Frozen):
    """Side-channel record of a skipped asset or an aggregation fallback."""
    level: Literal["error", "warning"]
    code: str
    message: str
    asset: str | None = None
    path: str | None = None
