"""End-to-end fund analysis.

`analyze_fund` chains the stages: parse → normalize → transform each asset →
aggregate the fund → assemble the `AnalysisResult`. Parse and shape errors
propagate. Asset errors either skip the asset (default) or propagate when
`fail_fast` is set. Aggregation problems never propagate.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

from esg_pipeline.aggregate.fund import aggregate_fund
from esg_pipeline.config import get_settings
from esg_pipeline.ingest.normalize import normalize_document
from esg_pipeline.ingest.parse_input import load_document
from esg_pipeline.models import AnalysisResult, Diagnostic
from esg_pipeline.transform.asset import transform_assets

log = logging.getLogger(__name__)


class AnalysisRun(BaseModel):
    """Analysis result plus the diagnostics collected while producing it."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    result: AnalysisResult
    diagnostics: list[Diagnostic] = []

    @property
    def ok(self) -> bool:
        """True when no asset was skipped."""
        return not any(d.level == "error" for d in self.diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.level == "error"]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.level == "warning"]

    def to_document(self) -> dict[str, Any]:
        return self.result.to_document()


def analyze_fund(
    source: str | bytes | Mapping[str, Any],
    *,
    fail_fast: bool | None = None,
    parallel: bool | None = None,
) -> AnalysisRun:
    """Run the full aggregation pipeline on one fund document.

    Args:
        source: JSON text or parsed document, canonical or monthly-record shape.
        fail_fast: Propagate the first asset error. Defaults to `ESG_FAIL_FAST`.
        parallel: Transform assets with dask. Defaults to `ESG_PARALLEL`.

    Returns:
        `AnalysisRun` holding the result and any error/warning diagnostics.

    Raises:
        ParseError: if `source` is not a JSON object.
        UnsupportedInputShapeError: if the document shape is not recognized.
        InvalidInputError, MissingMetricError: only when `fail_fast` is set.
    """
    if fail_fast is None or parallel is None:
        s = get_settings()
        fail_fast = s.fail_fast if fail_fast is None else fail_fast
        parallel = s.parallel if parallel is None else parallel

    doc = normalize_document(load_document(source))
    assets, diagnostics = transform_assets(doc["assets_analysis"], fail_fast=fail_fast, parallel=parallel)
    fund_statistics = aggregate_fund(assets, diagnostics)

    result = AnalysisResult(
        fund_name=doc["fund_name"],
        analysis_period=doc["analysis_period"],
        assets_analysis=assets,
        fund_statistics=fund_statistics,
    )
    log.info(
        "Analysis of %s complete: %d assets, %d diagnostics",
        result.fund_name,
        len(assets),
        len(diagnostics),
    )
    return AnalysisRun(result=result, diagnostics=diagnostics)
