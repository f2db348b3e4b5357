from __future__ import annotations

import math

import pytest

from pmi_insight.domain.services.kpi import (
    KPI_DEFINITIONS,
    calculate_average,
    calculate_cagr,
    calculate_growth_rate,
    current_ratio_status,
    debt_to_equity_status,
    ebitda_margin_status,
    extract_kpis,
    growth_status,
    kpi_explanation,
    net_margin_ratio,
    round_half_up,
)


def test_extract_kpis_coerces_numeric_strings(make_statement):
    statement = make_statement(
        revenue="2500000",
        ebitda="300000.50",
        ebitda_margin="0.12",
        net_debt="",
        revenue_growth="0.08",
        debt_to_equity_ratio=None,
        current_ratio=float("nan"),
    )
    kpis = extract_kpis(statement)

    assert kpis.revenue == 2_500_000.0
    assert kpis.ebitda == pytest.approx(300_000.5)
    assert kpis.ebitda_margin == pytest.approx(0.12)
    assert kpis.revenue_growth == pytest.approx(0.08)
    assert kpis.net_debt is None
    assert kpis.debt_to_equity_ratio is None
    assert kpis.current_ratio is None
    assert kpis.fiscal_year == 2023
    assert kpis.currency == "EUR"


def test_extract_kpis_keeps_zero_optionals(make_statement):
    kpis = extract_kpis(make_statement(net_debt=0, revenue_growth=0))
    assert kpis.net_debt == 0.0
    assert kpis.revenue_growth == 0.0


def test_growth_rate_cases():
    assert calculate_growth_rate(110, 100) == pytest.approx(0.1)
    assert calculate_growth_rate(90, 100) == pytest.approx(-0.1)
    assert calculate_growth_rate(100, 0) == 1
    assert calculate_growth_rate(0, 0) == 0
    assert calculate_growth_rate(-50, 0) == 0
    # Negative base divides by the absolute value.
    assert calculate_growth_rate(-50, -100) == pytest.approx(0.5)


def test_cagr_cases():
    assert calculate_cagr(100, 121, 2) == pytest.approx(0.10, abs=1e-6)
    assert calculate_cagr(0, 100, 2) == 0
    assert calculate_cagr(100, 200, 0) == 0
    assert calculate_cagr(-100, 200, 2) == 0


def test_average_skips_missing_values(make_statement):
    statements = [
        make_statement(fiscal_year=2023, net_debt=100),
        make_statement(fiscal_year=2022, net_debt=None),
        make_statement(fiscal_year=2021, net_debt=300),
    ]
    assert calculate_average(statements, "net_debt") == pytest.approx(200)
    assert calculate_average([make_statement(net_debt=None)], "net_debt") == 0.0
    assert calculate_average([], "revenue") == 0.0


@pytest.mark.parametrize(
    "margin, expected",
    [
        (0.20, "excellent"),
        (0.1999, "good"),
        (0.12, "good"),
        (0.1199, "fair"),
        (0.05, "fair"),
        (0.0499, "poor"),
        (-0.3, "poor"),
    ],
)
def test_ebitda_margin_status_boundaries(margin, expected):
    assert ebitda_margin_status(margin) == expected


def test_growth_status_boundaries():
    assert growth_status(None) == "fair"
    assert growth_status(0.15) == "excellent"
    assert growth_status(0.05) == "good"
    assert growth_status(0.0) == "fair"
    assert growth_status(-0.01) == "poor"


def test_debt_to_equity_status_boundaries():
    assert debt_to_equity_status(None) == "fair"
    assert debt_to_equity_status(0.3) == "excellent"
    assert debt_to_equity_status(0.6) == "good"
    assert debt_to_equity_status(1.0) == "fair"
    assert debt_to_equity_status(1.01) == "poor"


def test_current_ratio_status_boundaries():
    assert current_ratio_status(None) == "fair"
    assert current_ratio_status(2.0) == "excellent"
    assert current_ratio_status(1.5) == "good"
    assert current_ratio_status(1.0) == "fair"
    assert current_ratio_status(0.99) == "poor"


def test_kpi_explanation_and_definitions():
    assert kpi_explanation("ebitda").startswith("L'EBITDA")
    assert kpi_explanation("unknown_metric") == "Indicatore finanziario"
    assert KPI_DEFINITIONS["ebitda_margin"]["name"] == "Margine EBITDA"
    assert set(KPI_DEFINITIONS) >= {"revenue", "ebitda", "net_income", "equity"}


def test_round_half_up_rounds_toward_positive_infinity():
    assert round_half_up(38.5) == 39
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(0.49) == 0


def test_net_margin_ratio_on_zero_revenue():
    assert net_margin_ratio(60_000, 1_000_000) == pytest.approx(0.06)
    assert net_margin_ratio(10_000, 0) == math.inf
    assert net_margin_ratio(-10_000, 0) == -math.inf
    assert net_margin_ratio(0, 0) == 0.0
