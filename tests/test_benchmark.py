from __future__ import annotations

import pytest

from pmi_insight.domain.models.financials import CompetitorStatement
from pmi_insight.domain.services.benchmark import (
    benchmark_chart_data,
    classify_position,
    create_benchmark,
    percentile_rank,
)
from pmi_insight.utils.formatting import NBSP


def _scaled(make_statement, factor: float, **overrides):
    values = dict(
        revenue=1_000_000 * factor,
        ebitda=200_000 * factor,
        ebitda_margin=0.10 * factor,
        net_income=100_000 * factor,
        equity=500_000 * factor,
    )
    values.update(overrides)
    return make_statement(**values)


@pytest.fixture
def competitors(make_statement):
    return [
        CompetitorStatement(name="Alfa S.r.l.", statement=_scaled(make_statement, 1), vat_number="IT01"),
        CompetitorStatement(name="Beta S.p.A.", statement=_scaled(make_statement, 1)),
    ]


def test_empty_competitor_list_is_rejected(make_statement):
    with pytest.raises(ValueError):
        create_benchmark(make_statement(), [])


def test_leader_when_far_above_competitors(make_statement, competitors):
    result = create_benchmark(_scaled(make_statement, 5), competitors)

    assert [c.metric for c in result.comparisons] == [
        "revenue", "ebitda", "ebitda_margin", "net_income", "equity",
    ]
    assert all(c.position == "above" for c in result.comparisons)
    assert all(c.percentile == 67 for c in result.comparisons)
    assert result.summary.overall_position == "leader"
    assert result.summary.strengths[0] == "Ricavi superiore alla media"
    assert result.summary.weaknesses == []
    assert result.summary.recommendations == [
        "Mantieni il vantaggio competitivo investendo in innovazione"
    ]
    revenue = result.comparisons[0]
    assert revenue.competitor_average == pytest.approx(1_000_000)
    assert revenue.narrative == (
        f"Il tuo ricavi (5.000.000{NBSP}€) è superiore alla media dei competitor "
        f"(1.000.000{NBSP}€). Ti posizioni nel 67° percentile."
    )
    margin = result.comparisons[2]
    assert "(50,0%)" in margin.narrative
    assert "(10,0%)" in margin.narrative


def test_lagging_when_far_below_competitors(make_statement, competitors):
    result = create_benchmark(_scaled(make_statement, 0.2), competitors)

    assert all(c.position == "below" for c in result.comparisons)
    assert all(c.percentile == 0 for c in result.comparisons)
    assert result.summary.overall_position == "lagging"
    assert result.summary.recommendations == [
        "Valuta una revisione della struttura dei costi per migliorare i margini",
        "Potresti investire in strategie di crescita per aumentare i ricavi",
        "Analizza le voci che impattano l'utile finale: interessi, tasse, ammortamenti",
        "Considera una consulenza strategica per identificare le aree prioritarie di intervento",
    ]


def test_in_line_company(make_statement, competitors):
    result = create_benchmark(_scaled(make_statement, 1.05), competitors)

    assert all(c.position == "average" for c in result.comparisons)
    assert result.summary.overall_position == "average"
    assert result.summary.recommendations == []
    assert "è in linea con la media dei competitor" in result.comparisons[0].narrative


def test_competitive_with_three_metrics_above(make_statement, competitors):
    company = _scaled(make_statement, 2, net_income=100_000, equity=500_000)
    result = create_benchmark(company, competitors)
    assert [c.position for c in result.comparisons] == ["above", "above", "above", "average", "average"]
    assert result.summary.overall_position == "competitive"


def test_competitor_kpis_are_extracted(make_statement, competitors):
    result = create_benchmark(_scaled(make_statement, 3), competitors)
    assert [c.name for c in result.competitors] == ["Alfa S.r.l.", "Beta S.p.A."]
    assert result.competitors[0].vat_number == "IT01"
    assert result.competitors[0].kpis.revenue == pytest.approx(1_000_000)
    assert result.company_kpis.revenue == pytest.approx(3_000_000)


def test_classify_position_handles_zero_average():
    assert classify_position(10, 0) == "above"
    assert classify_position(-10, 0) == "below"
    assert classify_position(0, 0) == "average"
    assert classify_position(111, 100) == "above"
    assert classify_position(110, 100) == "average"
    assert classify_position(89, 100) == "below"


def test_percentile_rank_uses_first_occurrence():
    assert percentile_rank(5, [1, 2, 3]) == 75
    assert percentile_rank(2, [2, 2, 3]) == 0
    assert percentile_rank(1, [2]) == 0


def test_chart_data_scales_margins(make_statement, competitors):
    result = create_benchmark(_scaled(make_statement, 2), competitors)
    chart = benchmark_chart_data(result)

    assert set(chart) == {"revenue", "ebitda", "ebitda_margin"}
    assert chart["revenue"]["company"] == pytest.approx(2_000_000)
    assert chart["ebitda_margin"]["company"] == pytest.approx(20.0)
    assert chart["ebitda_margin"]["competitors"][0] == {"name": "Alfa S.r.l.", "value": pytest.approx(10.0)}


def test_benchmark_is_deterministic(make_statement, competitors):
    company = _scaled(make_statement, 1.5)
    assert create_benchmark(company, competitors) == create_benchmark(company, competitors)
