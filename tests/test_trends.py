from __future__ import annotations

import pytest

from pmi_insight.domain.services.trends import TrendCalculator


def test_trends_compute_cagr_and_yoy(make_statement):
    statements = [
        make_statement(fiscal_year=2021, revenue=1_000_000, ebitda_margin=0.10),
        make_statement(fiscal_year=2023, revenue=1_210_000, ebitda_margin=0.14),
        make_statement(fiscal_year=2022, revenue=1_100_000, ebitda_margin=0.12),
    ]
    summary = TrendCalculator().calculate(statements)

    assert summary.metrics["periods_count"] == 3.0
    assert summary.metrics["revenue_cagr"] == pytest.approx(0.10, abs=1e-9)
    assert summary.metrics["average_ebitda_margin"] == pytest.approx(0.12)
    years = [row["fiscal_year"] for row in summary.history]
    assert years == [2023, 2022, 2021]
    assert summary.history[0]["revenue_yoy"] == pytest.approx(0.10)
    assert summary.history[-1]["revenue_yoy"] is None


def test_trends_single_year_has_no_cagr(make_statement):
    summary = TrendCalculator().calculate([make_statement()])
    assert summary.metrics["revenue_cagr"] is None
    assert len(summary.history) == 1


def test_trends_empty_input():
    summary = TrendCalculator().calculate([])
    assert summary.history == []
    assert summary.metrics == {"periods_count": 0.0}


def test_duplicate_years_are_averaged_once(make_statement):
    statements = [
        make_statement(fiscal_year=2023, ebitda_margin=0.20, net_profit_margin=0.08),
        make_statement(fiscal_year=2023, ebitda_margin=0.50, net_profit_margin=0.30),
        make_statement(fiscal_year=2022, ebitda_margin=0.10, net_profit_margin=None),
    ]
    summary = TrendCalculator().calculate(statements)

    assert summary.metrics["periods_count"] == 2.0
    assert summary.metrics["average_ebitda_margin"] == pytest.approx(0.15)
    assert summary.metrics["average_net_profit_margin"] == pytest.approx(0.08)
    assert summary.history[-1]["net_profit_margin"] is None


def test_missing_net_margins_average_to_zero(make_statement):
    summary = TrendCalculator().calculate([make_statement()])
    assert summary.metrics["average_net_profit_margin"] == 0.0
