from __future__ import annotations

import copy
import json

import pytest

from esg_pipeline import analyze_fund
from esg_pipeline.errors import MissingMetricError, ParseError, UnsupportedInputShapeError


def test_analyze_canonical_json_text(canonical_doc) -> None:
    run = analyze_fund(json.dumps(canonical_doc), fail_fast=False, parallel=False)
    assert run.ok
    assert run.diagnostics == []

    doc = run.to_document()
    assert set(doc) == {"fund_name", "analysis_period", "assets_analysis", "fund_statistics"}
    assert doc["fund_name"] == "Green Future Fund"
    assert [a["name"] for a in doc["assets_analysis"]] == ["Acme Energy", "Blue Water Co"]
    co2 = doc["assets_analysis"][0]["time_series"]["metrics"]["environmental"]["CO2_emission"]
    assert co2["values"] == [120.0, 110.0, 104.5]
    assert co2["stats"]["previous"] == 110.0
    assert doc["fund_statistics"]["environmental"]["CO2_emission"] == pytest.approx(-4.75)


def test_result_survives_json_round_trip(canonical_doc) -> None:
    doc = analyze_fund(canonical_doc, fail_fast=False, parallel=False).to_document()
    assert json.loads(json.dumps(doc)) == doc


def test_input_is_not_mutated(canonical_doc) -> None:
    before = copy.deepcopy(canonical_doc)
    first = analyze_fund(canonical_doc, fail_fast=False, parallel=False)
    second = analyze_fund(canonical_doc, fail_fast=False, parallel=False)
    assert canonical_doc == before
    assert first == second


def test_single_period_omits_previous(make_raw_asset) -> None:
    raw = {
        "fund_name": "F",
        "analysis_period": "January",
        "assets_analysis": [make_raw_asset(time_points=["January"])],
    }
    doc = analyze_fund(raw, fail_fast=False, parallel=False).to_document()
    stats = doc["assets_analysis"][0]["time_series"]["metrics"]["governance"]["ethics_violations"]["stats"]
    assert "previous" not in stats
    assert stats["year_over_year_change"] == 0
    assert doc["fund_statistics"]["governance"]["ethics_violations"] == 0


def test_bad_asset_is_skipped_with_diagnostic(canonical_doc, make_raw_asset) -> None:
    canonical_doc["assets_analysis"].append(
        make_raw_asset("Broken Co", drop=(("governance", "cybersecurity_incidents"),))
    )
    run = analyze_fund(canonical_doc, fail_fast=False, parallel=True)
    assert not run.ok
    assert [a.name for a in run.result.assets_analysis] == ["Acme Energy", "Blue Water Co"]
    assert [(e.asset, e.path) for e in run.errors] == [("Broken Co", "governance.cybersecurity_incidents")]
    assert run.warnings == []


def test_fail_fast_aborts_the_run(canonical_doc, make_raw_asset) -> None:
    canonical_doc["assets_analysis"].append(
        make_raw_asset("Broken Co", drop=(("governance", "cybersecurity_incidents"),))
    )
    with pytest.raises(MissingMetricError):
        analyze_fund(canonical_doc, fail_fast=True, parallel=False)


def test_fail_fast_defaults_from_environment(canonical_doc, make_raw_asset, monkeypatch) -> None:
    monkeypatch.setenv("ESG_FAIL_FAST", "true")
    monkeypatch.setenv("ESG_PARALLEL", "false")
    canonical_doc["assets_analysis"].append(make_raw_asset("Broken Co", drop=(("social", "pay_equity_ratio"),)))
    with pytest.raises(MissingMetricError):
        analyze_fund(canonical_doc)


def test_parse_and_shape_errors_propagate() -> None:
    with pytest.raises(ParseError):
        analyze_fund("{not json", fail_fast=False, parallel=False)
    with pytest.raises(UnsupportedInputShapeError):
        analyze_fund({"something": "else"}, fail_fast=False, parallel=False)


def test_analyze_monthly_document(monthly_doc) -> None:
    run = analyze_fund(monthly_doc, fail_fast=False, parallel=False)
    assert run.ok
    doc = run.to_document()
    assert doc["analysis_period"] == "January-March"
    asset = doc["assets_analysis"][0]
    assert asset["time_series"]["time_points"] == ["January", "February", "March"]
    assert doc["fund_statistics"]["social"]["board_diversity"]["female_percentage"] == 5.0


def test_monthly_document_with_partial_catalog_skips_asset(monthly_doc) -> None:
    for rec in monthly_doc["fund"]["assets"][0]["data"].values():
        for key in ("water_usage", "renewable_energy_percentage"):
            del rec[key]
    run = analyze_fund(monthly_doc, fail_fast=False, parallel=False)
    assert run.result.assets_analysis == []
    assert [(e.code, e.path) for e in run.errors] == [("MissingMetricError", "environmental.water_usage")]
    assert run.to_document()["fund_statistics"]["environmental"]["CO2_emission"] == 0
