"""esg_pipeline package.

Turns raw per-asset ESG metric time series into the normalized fund analysis
document consumed by the chart and report views.

Architecture:
- Raw document → canonical shape → per-asset time series → fund statistics
- Pydantic models validate and freeze every output block
- Dask is used for optional per-asset parallel transforms
"""

from esg_pipeline.pipeline import AnalysisRun, analyze_fund

__all__ = ["__version__", "AnalysisRun", "analyze_fund"]
__version__ = "0.1.0"
