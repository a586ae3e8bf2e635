from __future__ import annotations

import pytest

from esg_pipeline.aggregate.fund import aggregate_fund, average_metric_change
from esg_pipeline.models import Diagnostic, FundStatistics
from esg_pipeline.schema import METRIC_PATHS, get_path
from esg_pipeline.transform.asset import transform_asset


def _assets(make_raw_asset):
    a = transform_asset(make_raw_asset("A"))
    b = transform_asset(
        make_raw_asset(
            "B",
            overrides={
                ("environmental", "CO2_emission"): [80.0, 82.0, 78.0],
                ("governance", "ethics_violations"): [0.0, 1.0, 0.0],
            },
        )
    )
    return a, b


def test_empty_fund_is_all_zero() -> None:
    diagnostics: list[Diagnostic] = []
    stats = aggregate_fund([], diagnostics)
    assert stats == FundStatistics()
    doc = stats.model_dump()
    for path in METRIC_PATHS:
        assert get_path(doc, path) == 0
    assert diagnostics == []


def test_fund_average_of_year_over_year_change(make_raw_asset) -> None:
    a, b = _assets(make_raw_asset)
    stats = aggregate_fund([a, b])
    # A: 104.5 - 110 = -5.5, B: 78 - 82 = -4
    assert stats.environmental.CO2_emission == pytest.approx(-4.75)
    # A: 1 - 2 = -1, B: 0 - 1 = -1
    assert stats.governance.ethics_violations == pytest.approx(-1.0)
    assert stats.social.board_diversity.female_percentage == pytest.approx(5.0)


def test_asset_order_does_not_matter(make_raw_asset) -> None:
    a, b = _assets(make_raw_asset)
    assert aggregate_fund([a, b]) == aggregate_fund([b, a])


def test_missing_metric_degrades_to_remaining_assets(make_raw_asset) -> None:
    a, b = _assets(make_raw_asset)
    b_doc = b.model_dump()
    del b_doc["time_series"]["metrics"]["governance"]["ethics_violations"]

    diagnostics: list[Diagnostic] = []
    stats = aggregate_fund([a, b_doc], diagnostics)

    assert stats.governance.ethics_violations == pytest.approx(-1.0)
    assert stats.environmental.CO2_emission == pytest.approx(-4.75)
    assert len(diagnostics) == 1
    d = diagnostics[0]
    assert d.level == "warning"
    assert d.code == "AggregationWarning"
    assert d.asset == "B"
    assert d.path == "governance.ethics_violations"


def test_metric_missing_everywhere_falls_back_to_zero(make_raw_asset) -> None:
    a, _ = _assets(make_raw_asset)
    a_doc = a.model_dump()
    del a_doc["time_series"]["metrics"]["social"]["board_diversity"]

    diagnostics: list[Diagnostic] = []
    stats = aggregate_fund([a_doc], diagnostics)
    assert stats.social.board_diversity.female_percentage == 0
    assert stats.social.board_diversity.minority_percentage == 0
    assert stats.social.employee_satisfaction == pytest.approx(-0.1)
    assert {d.path for d in diagnostics} == {
        "social.board_diversity.female_percentage",
        "social.board_diversity.minority_percentage",
    }


def test_non_numeric_change_is_a_warning(make_raw_asset) -> None:
    a, b = _assets(make_raw_asset)
    b_doc = b.model_dump()
    b_doc["time_series"]["metrics"]["governance"]["board_independence"]["stats"]["year_over_year_change"] = "n/a"

    diagnostics: list[Diagnostic] = []
    stats = aggregate_fund([a, b_doc], diagnostics)
    assert stats.governance.board_independence == pytest.approx(5.0)
    assert [d.asset for d in diagnostics] == ["B"]


def test_unusable_asset_entries_never_raise() -> None:
    diagnostics: list[Diagnostic] = []
    stats = aggregate_fund([None, "junk", {"name": "X"}], diagnostics)  # type: ignore[list-item]
    assert stats == FundStatistics()
    assert len(diagnostics) == 3 * len(METRIC_PATHS)
    assert {d.asset for d in diagnostics} == {"assets_analysis[0]", "assets_analysis[1]", "X"}


def test_average_metric_change_single_path(make_raw_asset) -> None:
    a, b = _assets(make_raw_asset)
    docs = [a.model_dump(), b.model_dump()]
    assert average_metric_change(docs, ("environmental", "CO2_emission")) == pytest.approx(-4.75)
    assert average_metric_change([], ("environmental", "CO2_emission")) == 0.0
